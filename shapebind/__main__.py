import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from shapebind import (
    Preview,
    Shape,
    ShapeCategory,
    ValidationError,
    Viewport,
    classify_freehand,
    commit_preview,
    delete_shapes,
    find_shape,
    resize_selection,
    shape_center,
    shapes_from_records,
    shapes_to_records,
)

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


class _Operation(argparse.Action):
    """Collect edit operations in command-line order."""

    def __call__(self, parser, namespace, values, option_string=None):
        operations = list(getattr(namespace, self.dest, None) or [])
        operations.append((self.const, values))
        setattr(namespace, self.dest, operations)


def _require(shapes: Sequence[Shape], shape_id: str) -> Shape:
    shape = find_shape(shapes, shape_id)
    if shape is None:
        logger.error("No shape with id %s", shape_id)
        raise SystemExit(1)
    return shape


def _classify(shapes: List[Shape], shape_id: str) -> List[Shape]:
    shape = _require(shapes, shape_id)
    if shape.category is not ShapeCategory.FREEHAND:
        logger.warning("Shape %s is a %s, not a freehand stroke", shape_id, shape.category)
        return shapes
    recognized = classify_freehand(shape.points)
    if recognized is None:
        logger.info("Stroke %s kept as freehand", shape_id)
        return shapes
    logger.info("Stroke %s recognized as %s", shape_id, recognized.category)
    replacement = recognized.to_shape(shape_id, style=shape.style, labels=shape.labels)
    return [replacement if s.id == shape_id else s for s in shapes]


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Edit a figure given as JSON shape records")
    parser.add_argument("path", help="Path to a JSON list of shape records, or - for stdin")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--viewport",
        nargs=3,
        type=float,
        metavar=("WIDTH", "HEIGHT", "PPU"),
        help="Canvas size and pixels per unit, needed for curves",
    )
    parser.add_argument("--origin-y", type=float, help="Screen y of the math origin")
    parser.add_argument(
        "--move",
        nargs=3,
        metavar=("ID", "DX", "DY"),
        dest="operations",
        action=_Operation,
        const="move",
        help="Translate a shape by DX, DY pixels",
    )
    parser.add_argument(
        "--rotate",
        nargs=2,
        metavar=("ID", "DEGREES"),
        dest="operations",
        action=_Operation,
        const="rotate",
        help="Rotate a shape about its center or --pivot",
    )
    parser.add_argument(
        "--resize",
        nargs=4,
        metavar=("ID", "HANDLE", "X", "Y"),
        dest="operations",
        action=_Operation,
        const="resize",
        help="Drag handle HANDLE of a shape to X, Y",
    )
    parser.add_argument(
        "--delete",
        nargs=1,
        metavar="ID",
        dest="operations",
        action=_Operation,
        const="delete",
        help="Delete a shape and everything pinned to it",
    )
    parser.add_argument(
        "--classify",
        nargs=1,
        metavar="ID",
        dest="operations",
        action=_Operation,
        const="classify",
        help="Replace a freehand stroke by the shape it resembles",
    )
    parser.add_argument("--pivot", nargs=2, type=float, metavar=("X", "Y"))
    parser.add_argument(
        "--snap-rotation",
        action="store_true",
        help="Snap rotations to 15 degree steps",
    )
    parser.add_argument(
        "--keep-aspect",
        action="store_true",
        help="Keep the aspect ratio when resizing",
    )
    parser.add_argument("--output", help="Write the resulting records to this path")
    parser.set_defaults(operations=[])
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    if args.path == "-":
        text = sys.stdin.read()
    else:
        with open(args.path) as fin:
            text = fin.read()

    data = json.loads(text)
    records = data.get("shapes", []) if isinstance(data, dict) else data
    try:
        shapes = shapes_from_records(records)
    except ValidationError as exc:
        logger.error("Invalid shape records: %s", exc)
        raise SystemExit(1)
    logger.info("Loaded %d shape(s) from %s", len(shapes), args.path)

    viewport = None
    if args.viewport:
        width, height, ppu = args.viewport
        viewport = Viewport(width, height, ppu, origin_y=args.origin_y)

    for name, values in args.operations:
        shape_id = values[0]
        shape = _require(shapes, shape_id)
        if name == "move":
            preview = Preview(dx=float(values[1]), dy=float(values[2]))
            shapes = commit_preview(shapes, [shape_id], preview, viewport)
        elif name == "rotate":
            pivot = tuple(args.pivot) if args.pivot else shape_center(shape)
            preview = Preview(rotation=float(values[1]), pivot=pivot)
            shapes = commit_preview(
                shapes, [shape_id], preview, viewport, snap_rotation=args.snap_rotation
            )
        elif name == "resize":
            cursor = (float(values[2]), float(values[3]))
            shapes = resize_selection(
                shapes, [shape_id], cursor, int(values[1]), args.keep_aspect, viewport
            )
        elif name == "delete":
            shapes = delete_shapes(shapes, [shape_id])
        elif name == "classify":
            shapes = _classify(shapes, shape_id)
        logger.info("Applied %s to %s", name, shape_id)

    output = json.dumps(shapes_to_records(shapes), indent=2)
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(output + "\n", encoding="utf-8")
        logger.info("Wrote %d shape(s) to %s", len(shapes), output_path)
    else:
        print(output)


if __name__ == "__main__":
    main(sys.argv[1:])
