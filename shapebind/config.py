"""Tunable thresholds for snapping, resolution and stroke recognition."""

from __future__ import annotations

import copy
from dataclasses import dataclass


@dataclass
class EngineConfig:
    # snapping, in screen pixels
    vertex_threshold: float = 10.0
    edge_threshold: float = 15.0
    # constraint resolution
    max_depth: int = 15
    change_tolerance: float = 1e-9
    # transforms
    rotation_snap_step: float = 15.0
    min_font_size: float = 4.0
    min_group_extent: float = 0.1
    marker_length: float = 20.0
    # freehand recognition
    min_stroke_points: int = 10
    min_stroke_diagonal: float = 5.0
    open_gap_ratio: float = 0.35
    closed_gap_ratio: float = 0.2
    line_tolerance: float = 20.0
    corner_tolerance_min: float = 10.0
    corner_tolerance_ratio: float = 0.04
    corner_min_turn: float = 25.0
    square_tolerance: float = 0.15
    circle_max_cv: float = 0.22


_ENGINE_CONFIG = EngineConfig()


def get_engine_config() -> EngineConfig:
    return copy.deepcopy(_ENGINE_CONFIG)


def set_engine_config(config: EngineConfig) -> None:
    global _ENGINE_CONFIG
    _ENGINE_CONFIG = copy.deepcopy(config)


def _resolve_config(config) -> EngineConfig:
    return config if config is not None else _ENGINE_CONFIG


__all__ = ["EngineConfig", "get_engine_config", "set_engine_config"]
