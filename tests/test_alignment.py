"""Tests for alignment point extraction."""

import pytest

from seatmap_snap.alignment import alignment_points_of, checks_axis, rotate_point
from seatmap_snap.bounds import bounds_of
from seatmap_snap.models import AlignmentPointType as T
from seatmap_snap.models import Point, RoundTable, SeatingRow


def test_six_points_on_visual_box() -> None:
    pts = alignment_points_of(bounds_of(RoundTable(id="t", x=400, y=300, radius=50)))
    assert [p.type for p in pts] == [T.LEFT, T.TOP, T.RIGHT, T.BOTTOM, T.CENTER_X, T.CENTER_Y]
    by_type = {p.type: (p.x, p.y) for p in pts}
    assert by_type[T.LEFT] == (305, 300)
    assert by_type[T.TOP] == (400, 205)
    assert by_type[T.RIGHT] == (495, 300)
    assert by_type[T.BOTTOM] == (400, 395)
    assert by_type[T.CENTER_X] == by_type[T.CENTER_Y] == (400, 300)
    assert all(p.element_id == "t" for p in pts)


def test_corners_are_opt_in() -> None:
    b = bounds_of(RoundTable(id="t", x=0, y=0, radius=50))
    pts = alignment_points_of(b, include_corners=True)
    assert len(pts) == 10
    # the first six are unchanged by the corner extension
    assert [p.type for p in pts[:6]] == [p.type for p in alignment_points_of(b)]
    corners = {p.type: (p.x, p.y) for p in pts[6:]}
    assert corners == {
        T.TOP_LEFT: (-95, -95),
        T.TOP_RIGHT: (95, -95),
        T.BOTTOM_LEFT: (-95, 95),
        T.BOTTOM_RIGHT: (95, 95),
    }


def test_rotation_about_origin() -> None:
    b = bounds_of(RoundTable(id="t", x=0, y=0, radius=50, rotation=90))
    by_type = {p.type: p for p in alignment_points_of(b)}
    # clockwise on screen: the left midpoint swings to the top
    assert by_type[T.LEFT].x == pytest.approx(0, abs=1e-9)
    assert by_type[T.LEFT].y == pytest.approx(-95)
    assert by_type[T.TOP].x == pytest.approx(95)
    assert by_type[T.CENTER_X].x == pytest.approx(0)


def test_seating_row_rotates_about_first_seat() -> None:
    b = bounds_of(SeatingRow(id="r", x=100, y=100, seat_count=5, seat_spacing=30, rotation=180))
    center = next(p for p in alignment_points_of(b) if p.type is T.CENTER_X)
    # unrotated center is (140, 100); half a turn about (100, 100)
    assert center.x == pytest.approx(60)
    assert center.y == pytest.approx(100)


def test_rotate_point() -> None:
    x, y = rotate_point(10, 0, Point(0, 0), 90)
    assert x == pytest.approx(0, abs=1e-9)
    assert y == pytest.approx(10)
    assert rotate_point(5, 5, Point(5, 5), 33) == pytest.approx((5, 5))


@pytest.mark.parametrize("kind, x_axis, y_axis", [
    (T.LEFT, True, False),
    (T.RIGHT, True, False),
    (T.CENTER_X, True, False),
    (T.TOP, False, True),
    (T.BOTTOM, False, True),
    (T.CENTER_Y, False, True),
    (T.TOP_LEFT, True, True),
    (T.BOTTOM_RIGHT, True, True),
])
def test_checks_axis(kind, x_axis, y_axis) -> None:
    assert checks_axis(kind, "x") is x_axis
    assert checks_axis(kind, "y") is y_axis
