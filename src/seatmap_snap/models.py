"""
Core model classes for seating layouts and alignment snapping.

Provides the closed set of layout element shapes (a tagged union of
dataclasses), the bounds record produced for every element, and the
ephemeral value types exchanged with the snap engine: alignment points,
matches, guides and snap results.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, ClassVar, Optional, Union


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ElementType(Enum):
    """Shape tags used by the layout store."""
    ROUND_TABLE = "roundTable"
    RECTANGLE_TABLE = "rectangleTable"
    SEATING_ROW = "seatingRow"
    SEGMENTED_SEATING_ROW = "segmentedSeatingRow"
    LINE = "line"
    POLYGON = "polygon"
    TEXT = "text"


class AlignmentPointType(Enum):
    LEFT = "left"
    CENTER_X = "center-x"
    RIGHT = "right"
    TOP = "top"
    CENTER_Y = "center-y"
    BOTTOM = "bottom"
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"

    @property
    def is_center(self) -> bool:
        return "center" in self.value

    @property
    def is_corner(self) -> bool:
        return self in _CORNER_TYPES


_CORNER_TYPES = frozenset({
    AlignmentPointType.TOP_LEFT,
    AlignmentPointType.TOP_RIGHT,
    AlignmentPointType.BOTTOM_LEFT,
    AlignmentPointType.BOTTOM_RIGHT,
})


class GuideOrientation(Enum):
    VERTICAL = "vertical"      # constant x, spans y
    HORIZONTAL = "horizontal"  # constant y, spans x


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class UnsupportedShapeError(ValueError):
    """Raised for an element whose shape is outside the closed shape set."""

    def __init__(self, shape: Any) -> None:
        self.shape = shape
        super().__init__(f"Unsupported element shape: {shape!r}")


# ---------------------------------------------------------------------------
# Geometry primitives
# ---------------------------------------------------------------------------

@dataclass
class Point:
    """A 2-D coordinate."""
    x: float
    y: float


@dataclass
class Rect:
    """Axis-aligned rectangle used for index regions and queries."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def cx(self) -> float:
        return self.x + self.width / 2

    @property
    def cy(self) -> float:
        return self.y + self.height / 2

    @classmethod
    def search_region(
        cls, left: float, top: float, width: float, height: float, padding: float
    ) -> 'Rect':
        """Region around a box grown by *padding* on every side."""
        return cls(left - padding, top - padding, width + padding * 2, height + padding * 2)

    def intersects_box(self, left: float, top: float, right: float, bottom: float) -> bool:
        """Inclusive overlap test: boxes that only touch still intersect."""
        return not (
            left > self.right
            or right < self.x
            or top > self.bottom
            or bottom < self.y
        )

    def intersects(self, other: 'Rect') -> bool:
        return self.intersects_box(other.x, other.y, other.right, other.bottom)

    def contains_box(self, left: float, top: float, right: float, bottom: float) -> bool:
        """Check if a box lies fully inside this rectangle (edges included)."""
        return (
            left >= self.x
            and top >= self.y
            and right <= self.right
            and bottom <= self.bottom
        )


# ---------------------------------------------------------------------------
# Layout elements (closed shape set)
# ---------------------------------------------------------------------------

@dataclass
class RoundTable:
    """A round table; (x, y) is the table center."""
    type: ClassVar[ElementType] = ElementType.ROUND_TABLE
    id: str
    x: float
    y: float
    radius: float = 50
    seats: int = 8
    rotation: float = 0
    label: Optional[str] = None


@dataclass
class RectangleTable:
    """A rectangular table; (x, y) is the table center."""
    type: ClassVar[ElementType] = ElementType.RECTANGLE_TABLE
    id: str
    x: float
    y: float
    width: float = 120
    height: float = 60
    up_chairs: int = 0
    down_chairs: int = 0
    left_chairs: int = 0
    right_chairs: int = 0
    rotation: float = 0
    label: Optional[str] = None


@dataclass
class SeatingRow:
    """A straight row of seats anchored at its first seat, (x, y)."""
    type: ClassVar[ElementType] = ElementType.SEATING_ROW
    id: str
    x: float
    y: float
    seat_count: int = 0
    seat_spacing: float = 30
    rotation: float = 0
    label: Optional[str] = None


@dataclass
class RowSegment:
    """One straight piece of a segmented seating row, in world coordinates."""
    start_x: float
    start_y: float
    end_x: float
    end_y: float
    seat_count: int = 0


@dataclass
class SegmentedSeatingRow:
    """A seating row made of connected segments."""
    type: ClassVar[ElementType] = ElementType.SEGMENTED_SEATING_ROW
    id: str
    x: float
    y: float
    segments: list[RowSegment] = field(default_factory=list)
    rotation: float = 0
    label: Optional[str] = None


@dataclass
class Line:
    """A drawn line between two world points; (x, y) is its nominal anchor."""
    type: ClassVar[ElementType] = ElementType.LINE
    id: str
    x: float
    y: float
    start_x: float = 0
    start_y: float = 0
    end_x: float = 0
    end_y: float = 0
    label: Optional[str] = None


@dataclass
class Polygon:
    """A free polygon; vertices are world points, (x, y) is its nominal center."""
    type: ClassVar[ElementType] = ElementType.POLYGON
    id: str
    x: float
    y: float
    points: list[Point] = field(default_factory=list)
    label: Optional[str] = None


@dataclass
class Text:
    """A free text label centered at (x, y)."""
    type: ClassVar[ElementType] = ElementType.TEXT
    id: str
    x: float
    y: float
    text: str = ""
    rotation: float = 0
    label: Optional[str] = None


Element = Union[
    RoundTable,
    RectangleTable,
    SeatingRow,
    SegmentedSeatingRow,
    Line,
    Polygon,
    Text,
]

ELEMENT_CLASSES: tuple[type, ...] = (
    RoundTable,
    RectangleTable,
    SeatingRow,
    SegmentedSeatingRow,
    Line,
    Polygon,
    Text,
)


# ---------------------------------------------------------------------------
# Bounds
# ---------------------------------------------------------------------------

@dataclass
class ElementBounds:
    """Core and visual extents of one element.

    The core box is the unrotated shape itself; the visual box also covers
    attached decorations (chairs, labels) and always contains the core box.
    Rotation is not baked into either box: consumers rotate points about
    ``rotation_origin`` by ``rotation`` degrees.
    """
    left: float
    top: float
    right: float
    bottom: float
    width: float
    height: float
    center_x: float
    center_y: float
    rotation: float
    rotation_origin: Point
    visual_left: float
    visual_top: float
    visual_right: float
    visual_bottom: float
    element_id: str
    element_type: str

    @property
    def visual_width(self) -> float:
        return self.visual_right - self.visual_left

    @property
    def visual_height(self) -> float:
        return self.visual_bottom - self.visual_top

    def translated(self, dx: float, dy: float) -> 'ElementBounds':
        """Copy with every box field and the rotation origin moved by (dx, dy)."""
        return ElementBounds(
            left=self.left + dx,
            top=self.top + dy,
            right=self.right + dx,
            bottom=self.bottom + dy,
            width=self.width,
            height=self.height,
            center_x=self.center_x + dx,
            center_y=self.center_y + dy,
            rotation=self.rotation,
            rotation_origin=Point(self.rotation_origin.x + dx, self.rotation_origin.y + dy),
            visual_left=self.visual_left + dx,
            visual_top=self.visual_top + dy,
            visual_right=self.visual_right + dx,
            visual_bottom=self.visual_bottom + dy,
            element_id=self.element_id,
            element_type=self.element_type,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Alignment value types (ephemeral, never persisted)
# ---------------------------------------------------------------------------

@dataclass
class AlignmentPoint:
    """A canonical point of an element in world coordinates."""
    x: float
    y: float
    type: AlignmentPointType
    element_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y, "type": self.type.value, "element_id": self.element_id}


@dataclass
class AlignmentMatch:
    """A candidate pairing of a dragged point with a neighbour point on one axis."""
    axis: str  # "x" or "y"
    dragged_point: AlignmentPoint
    target_point: AlignmentPoint
    distance: float
    snap_position: float
    priority: float

    @property
    def alignment_type(self) -> str:
        return alignment_label(self.dragged_point.type, self.target_point.type)

    @property
    def target_id(self) -> str:
        return self.target_point.element_id


@dataclass
class AlignmentGuide:
    """A renderable guide line: vertical guides sit at x, horizontal at y."""
    type: GuideOrientation
    position: float
    start: float
    end: float
    source_element: str
    target_element: str
    alignment_type: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "position": self.position,
            "start": self.start,
            "end": self.end,
            "source_element": self.source_element,
            "target_element": self.target_element,
            "alignment_type": self.alignment_type,
        }


@dataclass
class SnapResult:
    """Corrected position and guides returned by one detection call."""
    x: float
    y: float
    guides: list[AlignmentGuide] = field(default_factory=list)
    snapped_x: bool = False
    snapped_y: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "guides": [g.to_dict() for g in self.guides],
            "snapped_x": self.snapped_x,
            "snapped_y": self.snapped_y,
        }


# ---------------------------------------------------------------------------
# Configuration and hysteresis state
# ---------------------------------------------------------------------------

MIN_SNAP_THRESHOLD = 5.0
MAX_SNAP_THRESHOLD = 20.0


@dataclass
class SnappingConfig:
    """User-facing snapping settings for one editing session."""
    enable_snapping: bool = False
    snap_threshold: float = 10
    show_alignment_guides: bool = True
    prioritize_center_alignment: bool = True
    enable_corner_snapping: bool = False  # edges and center only

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def clamp_threshold(value: float) -> float:
    """Clamp a snap threshold into the supported pixel range."""
    return max(MIN_SNAP_THRESHOLD, min(MAX_SNAP_THRESHOLD, float(value)))


@dataclass
class AxisSnapState:
    """What one axis is currently snapped to, if anything."""
    snapped: bool = False
    target_id: str = ""
    alignment_type: str = ""

    def holds(self, target_id: str, alignment_type: str) -> bool:
        return (
            self.snapped
            and self.target_id == target_id
            and self.alignment_type == alignment_type
        )


@dataclass
class SnapState:
    """Per-axis hysteresis memory for a single drag gesture."""
    x: AxisSnapState = field(default_factory=AxisSnapState)
    y: AxisSnapState = field(default_factory=AxisSnapState)

    def axis(self, name: str) -> AxisSnapState:
        return self.x if name == "x" else self.y

    def set_axis(self, name: str, state: AxisSnapState) -> None:
        if name == "x":
            self.x = state
        else:
            self.y = state

    def reset(self) -> None:
        self.x = AxisSnapState()
        self.y = AxisSnapState()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def alignment_label(dragged: AlignmentPointType, target: AlignmentPointType) -> str:
    """Alignment type string, e.g. ``"left-to-right"``."""
    return f"{dragged.value}-to-{target.value}"


def is_finite_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _num(data: dict[str, Any], key: str, default: float = 0.0) -> float:
    value = data.get(key, default)
    return float(value) if value is not None else default


def _segment_from_dict(data: dict[str, Any]) -> RowSegment:
    return RowSegment(
        start_x=_num(data, "start_x"),
        start_y=_num(data, "start_y"),
        end_x=_num(data, "end_x"),
        end_y=_num(data, "end_y"),
        seat_count=int(data.get("seat_count", 0)),
    )


def element_from_dict(data: dict[str, Any]) -> Element:
    """Build an element from its store representation.

    The ``type`` key selects the shape; unknown tags raise
    :class:`UnsupportedShapeError`.
    """
    tag = data.get("type")
    try:
        shape = ElementType(tag)
    except ValueError:
        raise UnsupportedShapeError(tag) from None

    common: dict[str, Any] = {
        "id": str(data["id"]),
        "x": _num(data, "x"),
        "y": _num(data, "y"),
        "label": data.get("label"),
    }

    if shape is ElementType.ROUND_TABLE:
        return RoundTable(
            radius=_num(data, "radius", 50),
            seats=int(data.get("seats", 8)),
            rotation=_num(data, "rotation"),
            **common,
        )
    if shape is ElementType.RECTANGLE_TABLE:
        return RectangleTable(
            width=_num(data, "width", 120),
            height=_num(data, "height", 60),
            up_chairs=int(data.get("up_chairs", 0)),
            down_chairs=int(data.get("down_chairs", 0)),
            left_chairs=int(data.get("left_chairs", 0)),
            right_chairs=int(data.get("right_chairs", 0)),
            rotation=_num(data, "rotation"),
            **common,
        )
    if shape is ElementType.SEATING_ROW:
        return SeatingRow(
            seat_count=int(data.get("seat_count", 0)),
            seat_spacing=_num(data, "seat_spacing", 30),
            rotation=_num(data, "rotation"),
            **common,
        )
    if shape is ElementType.SEGMENTED_SEATING_ROW:
        return SegmentedSeatingRow(
            segments=[_segment_from_dict(s) for s in data.get("segments") or []],
            rotation=_num(data, "rotation"),
            **common,
        )
    if shape is ElementType.LINE:
        return Line(
            start_x=_num(data, "start_x"),
            start_y=_num(data, "start_y"),
            end_x=_num(data, "end_x"),
            end_y=_num(data, "end_y"),
            **common,
        )
    if shape is ElementType.POLYGON:
        return Polygon(
            points=[Point(float(p["x"]), float(p["y"])) for p in data.get("points") or []],
            **common,
        )
    return Text(
        text=str(data.get("text", "")),
        rotation=_num(data, "rotation"),
        **common,
    )


def element_to_dict(element: Element) -> dict[str, Any]:
    """Inverse of :func:`element_from_dict`."""
    if not isinstance(element, ELEMENT_CLASSES):
        raise UnsupportedShapeError(type(element).__name__)
    out: dict[str, Any] = {"type": element.type.value}
    out.update(asdict(element))
    if out.get("label") is None:
        out.pop("label", None)
    return out


def with_position(element: Element, x: float, y: float) -> Element:
    """Copy of *element* moved so its anchor sits at (x, y).

    Shapes that store world-space geometry (segments, endpoints, vertices)
    are shifted by the same delta as the anchor.
    """
    data = element_to_dict(element)
    dx = x - element.x
    dy = y - element.y
    data["x"] = x
    data["y"] = y
    if isinstance(element, Line):
        for key in ("start_x", "end_x"):
            data[key] += dx
        for key in ("start_y", "end_y"):
            data[key] += dy
    elif isinstance(element, SegmentedSeatingRow):
        for seg in data["segments"]:
            seg["start_x"] += dx
            seg["end_x"] += dx
            seg["start_y"] += dy
            seg["end_y"] += dy
    elif isinstance(element, Polygon):
        data["points"] = [{"x": p["x"] + dx, "y": p["y"] + dy} for p in data["points"]]
    return element_from_dict(data)
