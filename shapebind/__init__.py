from .model import (
    ShapeCategory,
    Shape,
    OnEdge,
    OnPath,
    PointsLink,
    CurveFormula,
    MarkerConfig,
    parent_ids,
    find_shape,
)
from .config import EngineConfig, get_engine_config, set_engine_config
from .curves import Viewport, pixels_per_unit, vertex_to_standard
from .geometry import (
    Bounds,
    distance,
    rotate_point,
    shape_center,
    visual_corners,
    closest_point_on_segment,
)
from .snap import (
    SnapResult,
    find_snap_target,
    snap_free_point,
    snap_segment_endpoint,
    link_segment_endpoints,
)
from .constraints import (
    EdgeProjection,
    resolve,
    resolve_many,
    constrain_point_to_edge,
    get_dependents,
    delete_shapes,
    recalculate_marker,
)
from .transforms import (
    move_shape,
    rotate_shape,
    resize_shape,
    resize_group,
    selection_bounds,
    reflect_shape,
    fit_to_viewport,
)
from .gestures import (
    Preview,
    commit_preview,
    drag_point,
    resize_selection,
    create_point,
    create_segment,
)
from .freehand import RecognizedShape, classify_freehand, simplify_rdp
from .hittest import find_hit_shape, shape_contains_point
from .records import shape_from_record, shape_to_record, shapes_from_records, shapes_to_records
from .validate import validate_shapes, ValidationError

__all__ = [
    'ShapeCategory',
    'Shape',
    'OnEdge',
    'OnPath',
    'PointsLink',
    'CurveFormula',
    'MarkerConfig',
    'parent_ids',
    'find_shape',
    'EngineConfig',
    'get_engine_config',
    'set_engine_config',
    'Viewport',
    'pixels_per_unit',
    'vertex_to_standard',
    'Bounds',
    'distance',
    'rotate_point',
    'shape_center',
    'visual_corners',
    'closest_point_on_segment',
    'SnapResult',
    'find_snap_target',
    'snap_free_point',
    'snap_segment_endpoint',
    'link_segment_endpoints',
    'EdgeProjection',
    'resolve',
    'resolve_many',
    'constrain_point_to_edge',
    'get_dependents',
    'delete_shapes',
    'recalculate_marker',
    'move_shape',
    'rotate_shape',
    'resize_shape',
    'resize_group',
    'selection_bounds',
    'reflect_shape',
    'fit_to_viewport',
    'Preview',
    'commit_preview',
    'drag_point',
    'resize_selection',
    'create_point',
    'create_segment',
    'RecognizedShape',
    'classify_freehand',
    'simplify_rdp',
    'find_hit_shape',
    'shape_contains_point',
    'shape_from_record',
    'shape_to_record',
    'shapes_from_records',
    'shapes_to_records',
    'validate_shapes',
    'ValidationError',
]
