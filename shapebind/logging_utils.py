from __future__ import annotations

import logging
import reprlib
from functools import wraps
from typing import Any, Callable, Mapping, Sequence, Tuple, TypeVar, cast

import numpy as np

from .model import Shape

F = TypeVar("F", bound=Callable[..., Any])

_repr = reprlib.Repr()
_repr.maxother = 160
_repr.maxdict = 10
_repr.maxlist = 10
_repr.maxtuple = 10


def _sequence_brackets(value: Sequence[Any]) -> Tuple[str, str]:
    if isinstance(value, tuple):
        return "(", ")"
    if isinstance(value, (set, frozenset)):
        return "{", "}"
    return "[", "]"


def _shape_summary(shape: Shape) -> str:
    parts = [repr(shape.id), shape.category.value, f"{len(shape.points)} pt"]
    if shape.rotation:
        parts.append(f"rot={shape.rotation:.6g}")
    if shape.binding is not None:
        parts.append(type(shape.binding).__name__)
    return "Shape(" + ", ".join(parts) + ")"


def _safe_repr(value: Any, *, max_items: int = 5, max_length: int = 400) -> str:
    if isinstance(value, Shape):
        return _shape_summary(value)

    if isinstance(value, np.ndarray):
        summary = f"ndarray(shape={tuple(value.shape)}, dtype={value.dtype})"
        if 0 < value.size <= max_items:
            return f"{summary}, values={_repr.repr(value.tolist())}"
        if value.size and np.issubdtype(value.dtype, np.number):
            return f"{summary}, min={float(value.min()):.6g}, max={float(value.max()):.6g}"
        return summary

    if isinstance(value, dict):
        items = []
        for idx, (key, val) in enumerate(value.items()):
            if idx >= max_items:
                items.append("...")
                break
            items.append(f"{_safe_repr(key)}: {_safe_repr(val)}")
        return "{" + ", ".join(items) + "}"

    if isinstance(value, (list, tuple, set, frozenset)):
        open_br, close_br = _sequence_brackets(value)  # type: ignore[arg-type]
        items = []
        for idx, item in enumerate(value):
            if idx >= max_items:
                items.append(f"... ({len(value)} items)")
                break
            items.append(_safe_repr(item))
        return f"{open_br}{', '.join(items)}{close_br}"

    rendered = _repr.repr(value)
    if len(rendered) > max_length:
        return rendered[:max_length] + "... (truncated)"
    return rendered


def _format_arguments(args: Sequence[Any], kwargs: Mapping[str, Any]) -> str:
    rendered = [_safe_repr(arg) for arg in args]
    rendered.extend(f"{key}={_safe_repr(value)}" for key, value in kwargs.items())
    return ", ".join(rendered)


def debug_log_call(logger: logging.Logger) -> Callable[[F], F]:
    """Trace an engine entry point at DEBUG level with compact argument and result summaries."""

    def decorator(func: F) -> F:
        if getattr(func, "_debug_logging_wrapped", False):
            return func

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            if not logger.isEnabledFor(logging.DEBUG):
                return func(*args, **kwargs)
            logger.debug("Entering %s(%s)", func.__name__, _format_arguments(args, kwargs))
            try:
                result = func(*args, **kwargs)
            except Exception:
                logger.exception("Exception in %s", func.__name__)
                raise
            logger.debug("Exiting %s -> %s", func.__name__, _safe_repr(result))
            return result

        setattr(wrapper, "_debug_logging_wrapped", True)
        return cast(F, wrapper)

    return decorator


__all__ = ["debug_log_call"]
