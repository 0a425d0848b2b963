"""
Alignment point extraction.

Every element exposes a small fixed set of points that can line up with
points of other elements: the midpoints of its visual edges and its
center. Corner points exist as an opt-in extension.
"""

from __future__ import annotations

import math

from seatmap_snap.models import AlignmentPoint, AlignmentPointType, ElementBounds, Point


_X_AXIS_TYPES = frozenset({
    AlignmentPointType.LEFT,
    AlignmentPointType.CENTER_X,
    AlignmentPointType.RIGHT,
    AlignmentPointType.TOP_LEFT,
    AlignmentPointType.TOP_RIGHT,
    AlignmentPointType.BOTTOM_LEFT,
    AlignmentPointType.BOTTOM_RIGHT,
})

_Y_AXIS_TYPES = frozenset({
    AlignmentPointType.TOP,
    AlignmentPointType.CENTER_Y,
    AlignmentPointType.BOTTOM,
    AlignmentPointType.TOP_LEFT,
    AlignmentPointType.TOP_RIGHT,
    AlignmentPointType.BOTTOM_LEFT,
    AlignmentPointType.BOTTOM_RIGHT,
})


def checks_axis(point_type: AlignmentPointType, axis: str) -> bool:
    """Whether a dragged point of *point_type* is compared on *axis* ("x"/"y").

    Corner points take part in both axes.
    """
    if axis == "x":
        return point_type in _X_AXIS_TYPES
    return point_type in _Y_AXIS_TYPES


def rotate_point(x: float, y: float, origin: Point, degrees: float) -> tuple[float, float]:
    """Rotate (x, y) about *origin*; positive angles turn clockwise on screen."""
    rad = math.radians(degrees)
    cos_a = math.cos(rad)
    sin_a = math.sin(rad)
    dx = x - origin.x
    dy = y - origin.y
    return (
        origin.x + dx * cos_a - dy * sin_a,
        origin.y + dx * sin_a + dy * cos_a,
    )


def alignment_points_of(
    bounds: ElementBounds,
    include_corners: bool = False,
) -> list[AlignmentPoint]:
    """Return the alignment points of an element in world coordinates.

    Always six points: the four visual-edge midpoints followed by two
    coincident center points (``center-x`` and ``center-y`` are matched on
    different axes). With *include_corners* the four visual corners are
    appended. Points are rotated about the rotation origin when the
    element is rotated.
    """
    eid = bounds.element_id
    cx = bounds.center_x
    cy = bounds.center_y
    raw: list[tuple[float, float, AlignmentPointType]] = [
        (bounds.visual_left, cy, AlignmentPointType.LEFT),
        (cx, bounds.visual_top, AlignmentPointType.TOP),
        (bounds.visual_right, cy, AlignmentPointType.RIGHT),
        (cx, bounds.visual_bottom, AlignmentPointType.BOTTOM),
        (cx, cy, AlignmentPointType.CENTER_X),
        (cx, cy, AlignmentPointType.CENTER_Y),
    ]
    if include_corners:
        raw.extend([
            (bounds.visual_left, bounds.visual_top, AlignmentPointType.TOP_LEFT),
            (bounds.visual_right, bounds.visual_top, AlignmentPointType.TOP_RIGHT),
            (bounds.visual_left, bounds.visual_bottom, AlignmentPointType.BOTTOM_LEFT),
            (bounds.visual_right, bounds.visual_bottom, AlignmentPointType.BOTTOM_RIGHT),
        ])

    if bounds.rotation != 0:
        raw = [
            (*rotate_point(x, y, bounds.rotation_origin, bounds.rotation), kind)
            for x, y, kind in raw
        ]

    return [AlignmentPoint(x=x, y=y, type=kind, element_id=eid) for x, y, kind in raw]
