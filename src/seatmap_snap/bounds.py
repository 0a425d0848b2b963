"""
Bounds computation for every layout element shape.

Each shape variant maps to an :class:`ElementBounds` carrying the core box,
the visual box (core box grown to cover chairs, labels and other
decorations), the center, and the rotation with its origin.

Padding values mirror what the canvas renders around each shape so that
snapping lines up with what the user actually sees.
"""

from __future__ import annotations

import math
from typing import Callable

from seatmap_snap.models import (
    Element,
    ElementBounds,
    Line,
    Point,
    Polygon,
    RectangleTable,
    RoundTable,
    SeatingRow,
    SegmentedSeatingRow,
    Text,
    UnsupportedShapeError,
)

__all__ = [
    "UnsupportedShapeError",
    "bounds_of",
    "bounds_at_position",
    "default_bounds",
]


# ---------------------------------------------------------------------------
# Shape constants
# ---------------------------------------------------------------------------

# Tables: chairs sit CHAIR_OFFSET outside the table edge.
CHAIR_OFFSET = 25
CHAIR_RADIUS = 10
CHAIR_EXTRA_MARGIN = 10
TABLE_PADDING = CHAIR_OFFSET + CHAIR_RADIUS + CHAIR_EXTRA_MARGIN

# Seating rows
ROW_LABEL_OFFSET = 60   # label drawn behind the first seat
ROW_SEAT_WIDTH = 20
ROW_SEAT_HEIGHT = 20
ROW_PADDING = 20

SEGMENTED_ROW_PADDING = 20

LINE_PADDING = 10
POLYGON_PADDING = 10

# Text has no measured glyph metrics here; width is estimated per character.
TEXT_CHAR_WIDTH = 8
TEXT_HEIGHT = 20
TEXT_PADDING = 5

DEFAULT_SIZE = 100


# ---------------------------------------------------------------------------
# Per-shape bounds
# ---------------------------------------------------------------------------

def _round_table_bounds(element: RoundTable) -> ElementBounds:
    r = element.radius
    visual_r = r + TABLE_PADDING
    return ElementBounds(
        left=element.x - r,
        top=element.y - r,
        right=element.x + r,
        bottom=element.y + r,
        width=r * 2,
        height=r * 2,
        center_x=element.x,
        center_y=element.y,
        rotation=element.rotation or 0,
        rotation_origin=Point(element.x, element.y),
        visual_left=element.x - visual_r,
        visual_top=element.y - visual_r,
        visual_right=element.x + visual_r,
        visual_bottom=element.y + visual_r,
        element_id=element.id,
        element_type=element.type.value,
    )


def _rectangle_table_bounds(element: RectangleTable) -> ElementBounds:
    half_w = element.width / 2
    half_h = element.height / 2
    visual_half_w = half_w + TABLE_PADDING
    visual_half_h = half_h + TABLE_PADDING
    return ElementBounds(
        left=element.x - half_w,
        top=element.y - half_h,
        right=element.x + half_w,
        bottom=element.y + half_h,
        width=element.width,
        height=element.height,
        center_x=element.x,
        center_y=element.y,
        rotation=element.rotation or 0,
        rotation_origin=Point(element.x, element.y),
        visual_left=element.x - visual_half_w,
        visual_top=element.y - visual_half_h,
        visual_right=element.x + visual_half_w,
        visual_bottom=element.y + visual_half_h,
        element_id=element.id,
        element_type=element.type.value,
    )


def _seating_row_bounds(element: SeatingRow) -> ElementBounds:
    """Row bounds built in the row's local frame, then moved by the anchor.

    The anchor (first seat) is the local origin and also the rotation
    origin, so a rotated row pivots around its first seat.
    """
    if element.seat_count > 0:
        row_length = (element.seat_count - 1) * element.seat_spacing + ROW_SEAT_WIDTH
    else:
        row_length = ROW_SEAT_WIDTH

    local_left = -ROW_LABEL_OFFSET - ROW_PADDING
    local_right = row_length + ROW_PADDING
    local_top = -ROW_SEAT_HEIGHT / 2 - ROW_PADDING
    local_bottom = ROW_SEAT_HEIGHT / 2 + ROW_PADDING

    return ElementBounds(
        left=element.x - ROW_LABEL_OFFSET,
        top=element.y - ROW_SEAT_HEIGHT / 2,
        right=element.x + row_length,
        bottom=element.y + ROW_SEAT_HEIGHT / 2,
        width=row_length + ROW_LABEL_OFFSET,
        height=ROW_SEAT_HEIGHT,
        center_x=element.x + (local_left + local_right) / 2,
        center_y=element.y + (local_top + local_bottom) / 2,
        rotation=element.rotation or 0,
        rotation_origin=Point(element.x, element.y),
        visual_left=element.x + local_left,
        visual_top=element.y + local_top,
        visual_right=element.x + local_right,
        visual_bottom=element.y + local_bottom,
        element_id=element.id,
        element_type=element.type.value,
    )


def _segmented_row_bounds(element: SegmentedSeatingRow) -> ElementBounds:
    """Envelope of all segment endpoints.

    Unlike every other shape, the rotation origin is the envelope center
    rather than the element anchor.
    """
    if not element.segments:
        return default_bounds(element)

    xs = [v for seg in element.segments for v in (seg.start_x, seg.end_x)]
    ys = [v for seg in element.segments for v in (seg.start_y, seg.end_y)]
    min_x, max_x = min(xs), max(xs)
    min_y, max_y = min(ys), max(ys)
    half_seat = ROW_SEAT_HEIGHT / 2
    cx = (min_x + max_x) / 2
    cy = (min_y + max_y) / 2

    return ElementBounds(
        left=min_x,
        top=min_y - half_seat,
        right=max_x,
        bottom=max_y + half_seat,
        width=max_x - min_x,
        height=(max_y - min_y) + ROW_SEAT_HEIGHT,
        center_x=cx,
        center_y=cy,
        rotation=element.rotation or 0,
        rotation_origin=Point(cx, cy),
        visual_left=min_x - SEGMENTED_ROW_PADDING,
        visual_top=min_y - half_seat - SEGMENTED_ROW_PADDING,
        visual_right=max_x + SEGMENTED_ROW_PADDING,
        visual_bottom=max_y + half_seat + SEGMENTED_ROW_PADDING,
        element_id=element.id,
        element_type=element.type.value,
    )


def _line_bounds(element: Line) -> ElementBounds:
    """Endpoint envelope; rotation is the line's direction angle."""
    min_x = min(element.start_x, element.end_x)
    max_x = max(element.start_x, element.end_x)
    min_y = min(element.start_y, element.end_y)
    max_y = max(element.start_y, element.end_y)
    cx = (element.start_x + element.end_x) / 2
    cy = (element.start_y + element.end_y) / 2
    angle = math.degrees(math.atan2(
        element.end_y - element.start_y,
        element.end_x - element.start_x,
    ))

    return ElementBounds(
        left=min_x,
        top=min_y,
        right=max_x,
        bottom=max_y,
        width=(max_x - min_x) or 1,
        height=(max_y - min_y) or 1,
        center_x=cx,
        center_y=cy,
        rotation=angle,
        rotation_origin=Point(cx, cy),
        visual_left=min_x - LINE_PADDING,
        visual_top=min_y - LINE_PADDING,
        visual_right=max_x + LINE_PADDING,
        visual_bottom=max_y + LINE_PADDING,
        element_id=element.id,
        element_type=element.type.value,
    )


def _polygon_bounds(element: Polygon) -> ElementBounds:
    if not element.points:
        return default_bounds(element)

    xs = [p.x for p in element.points]
    ys = [p.y for p in element.points]
    min_x, max_x = min(xs), max(xs)
    min_y, max_y = min(ys), max(ys)

    return ElementBounds(
        left=min_x,
        top=min_y,
        right=max_x,
        bottom=max_y,
        width=max_x - min_x,
        height=max_y - min_y,
        center_x=element.x,
        center_y=element.y,
        rotation=0,
        rotation_origin=Point(element.x, element.y),
        visual_left=min_x - POLYGON_PADDING,
        visual_top=min_y - POLYGON_PADDING,
        visual_right=max_x + POLYGON_PADDING,
        visual_bottom=max_y + POLYGON_PADDING,
        element_id=element.id,
        element_type=element.type.value,
    )


def _text_bounds(element: Text) -> ElementBounds:
    width = len(element.text) * TEXT_CHAR_WIDTH
    half_w = width / 2
    half_h = TEXT_HEIGHT / 2
    return ElementBounds(
        left=element.x - half_w,
        top=element.y - half_h,
        right=element.x + half_w,
        bottom=element.y + half_h,
        width=width,
        height=TEXT_HEIGHT,
        center_x=element.x,
        center_y=element.y,
        rotation=element.rotation or 0,
        rotation_origin=Point(element.x, element.y),
        visual_left=element.x - half_w - TEXT_PADDING,
        visual_top=element.y - half_h - TEXT_PADDING,
        visual_right=element.x + half_w + TEXT_PADDING,
        visual_bottom=element.y + half_h + TEXT_PADDING,
        element_id=element.id,
        element_type=element.type.value,
    )


def default_bounds(element: Element) -> ElementBounds:
    """Fixed square centered on the element anchor.

    Used for shapes that legitimately carry no geometry yet, such as a
    segmented row without segments or a polygon without vertices.
    """
    half = DEFAULT_SIZE / 2
    return ElementBounds(
        left=element.x - half,
        top=element.y - half,
        right=element.x + half,
        bottom=element.y + half,
        width=DEFAULT_SIZE,
        height=DEFAULT_SIZE,
        center_x=element.x,
        center_y=element.y,
        rotation=0,
        rotation_origin=Point(element.x, element.y),
        visual_left=element.x - half,
        visual_top=element.y - half,
        visual_right=element.x + half,
        visual_bottom=element.y + half,
        element_id=element.id,
        element_type=element.type.value,
    )


_BOUNDS_BUILDERS: dict[type, Callable[..., ElementBounds]] = {
    RoundTable: _round_table_bounds,
    RectangleTable: _rectangle_table_bounds,
    SeatingRow: _seating_row_bounds,
    SegmentedSeatingRow: _segmented_row_bounds,
    Line: _line_bounds,
    Polygon: _polygon_bounds,
    Text: _text_bounds,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def bounds_of(element: Element) -> ElementBounds:
    """Compute bounds for any element in the closed shape set.

    Raises:
        UnsupportedShapeError: *element* is not one of the known shapes.
    """
    builder = _BOUNDS_BUILDERS.get(type(element))
    if builder is None:
        raise UnsupportedShapeError(getattr(element, "type", type(element).__name__))
    return builder(element)


def bounds_at_position(element: Element, x: float, y: float) -> ElementBounds:
    """Bounds the element would have with its anchor moved to (x, y).

    The element itself is left untouched; this is what drag previews use.
    """
    current = bounds_of(element)
    return current.translated(x - element.x, y - element.y)
