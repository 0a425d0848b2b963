"""Tests for the MCP server tools (4-tool architecture)."""

import json

from seatmap_snap.server import (
    _sessions,
    drag,
    elements,
    session,
    snapping,
)

TABLES = [
    {"id": "a", "type": "roundTable", "x": 400, "y": 300, "radius": 50},
    {"id": "b", "type": "roundTable", "x": 600, "y": 300, "radius": 50},
]


def setup_function() -> None:
    """Clear sessions between tests."""
    _sessions.clear()


def _session_with_tables(name: str = "plan", enabled: bool = True) -> None:
    session(action="create", name=name)
    elements(action="load", session_name=name, items=TABLES)
    if enabled:
        snapping(action="configure", session_name=name, enabled=True)


# ===================================================================
# session
# ===================================================================

def test_session_lifecycle() -> None:
    assert "created" in session(action="create", name="plan")
    assert "already exists" in session(action="create", name="plan")

    listing = json.loads(session(action="list"))
    assert listing == [{"name": "plan", "elements": 0}]

    info = json.loads(session(action="info", name="plan"))
    assert info["config"]["enable_snapping"] is False
    assert info["config"]["snap_threshold"] == 10

    assert "deleted" in session(action="delete", name="plan")
    assert "not found" in session(action="delete", name="plan")


def test_session_errors() -> None:
    assert session(action="explode", name="x").startswith("Error: Unknown session action")
    assert session(action="create").startswith("Error: 'name'")
    assert "not found" in session(action="info", name="ghost")


# ===================================================================
# elements
# ===================================================================

def test_load_and_list() -> None:
    session(action="create", name="plan")
    result = elements(action="load", session_name="plan", items=TABLES)
    assert "Loaded 2" in result
    listed = json.loads(elements(action="list", session_name="plan"))
    assert [e["id"] for e in listed] == ["a", "b"]
    assert listed[0]["type"] == "roundTable"
    assert json.loads(session(action="info", name="plan"))["indexed"] == 2


def test_load_rejects_invalid_items() -> None:
    session(action="create", name="plan")
    result = elements(action="load", session_name="plan", items=[
        {"id": "s", "type": "stage", "x": 0, "y": 0},
    ])
    assert result.startswith("Error:")
    assert "unknown type 'stage'" in result


def test_load_rejects_non_finite_geometry() -> None:
    _session_with_tables()
    result = elements(action="load", session_name="plan", items=TABLES + [
        {"id": "bad", "type": "roundTable", "x": 3000, "y": 3000, "radius": float("nan")},
    ])
    assert result.startswith("Error:")
    assert "'radius' must be a finite number" in result

    # the previous collection is untouched and still snaps normally
    moved = json.loads(drag(action="move", session_name="plan", element_id="a", x=400, y=300))
    assert (moved["x"], moved["y"]) == (410, 300)


def test_upsert_adds_and_updates() -> None:
    _session_with_tables()
    result = json.loads(elements(action="upsert", session_name="plan", items=[
        {"id": "b", "type": "roundTable", "x": 600, "y": 500, "radius": 50},
        {"id": "c", "type": "text", "x": 0, "y": 0, "text": "Stage"},
    ]))
    assert result == {"added": ["c"], "updated": ["b"]}

    bounds = json.loads(elements(action="bounds", session_name="plan", element_id="b"))
    assert bounds["bounds"]["center_y"] == 500


def test_upsert_existing_only_updates_index() -> None:
    _session_with_tables()
    elements(action="upsert", session_name="plan", items=[
        {"id": "b", "type": "roundTable", "x": 600, "y": 1000, "radius": 50},
    ])
    moved = json.loads(drag(action="move", session_name="plan", element_id="a", x=400, y=303))
    assert moved["snapped_y"] is False


def test_remove_elements() -> None:
    _session_with_tables()
    result = json.loads(elements(action="remove", session_name="plan", element_ids=["b", "zzz"]))
    assert result == {"removed": ["b"], "missing": ["zzz"]}
    assert json.loads(session(action="info", name="plan"))["elements"] == 1


def test_bounds_reports_alignment_points() -> None:
    _session_with_tables()
    data = json.loads(elements(action="bounds", session_name="plan", element_id="a"))
    assert data["bounds"]["visual_left"] == 305
    assert len(data["alignment_points"]) == 6

    snapping(action="configure", session_name="plan", corner_snapping=True)
    data = json.loads(elements(action="bounds", session_name="plan", element_id="a"))
    assert len(data["alignment_points"]) == 10


def test_elements_errors() -> None:
    assert "not found" in elements(action="list", session_name="ghost")
    session(action="create", name="plan")
    assert "not found" in elements(action="bounds", session_name="plan", element_id="zz")
    assert elements(action="upsert", session_name="plan", items=[]).startswith("Error:")
    assert elements(action="remove", session_name="plan").startswith("Error:")


# ===================================================================
# snapping
# ===================================================================

def test_configure_and_toggle() -> None:
    session(action="create", name="plan")
    cfg = json.loads(snapping(
        action="configure", session_name="plan",
        enabled=True, threshold=50, show_guides=False, prioritize_center=False,
    ))
    assert cfg["enable_snapping"] is True
    assert cfg["snap_threshold"] == 20
    assert cfg["show_alignment_guides"] is False
    assert cfg["prioritize_center_alignment"] is False

    cfg = json.loads(snapping(action="toggle", session_name="plan"))
    assert cfg["enable_snapping"] is False
    assert json.loads(snapping(action="get_config", session_name="plan")) == cfg


def test_configure_rejects_bad_types() -> None:
    session(action="create", name="plan")
    assert snapping(action="configure", session_name="plan", threshold="big").startswith("Error:")
    assert snapping(action="configure", session_name="plan", enabled="yes").startswith("Error:")


# ===================================================================
# drag
# ===================================================================

def test_drag_snaps_to_neighbour() -> None:
    _session_with_tables()
    result = json.loads(drag(action="move", session_name="plan", element_id="a", x=400, y=304))
    assert result["y"] == 300
    assert result["snapped_y"] is True
    types = {g["alignment_type"] for g in result["guides"]}
    assert "center-y-to-center-y" in types


def test_drag_disabled_passes_through() -> None:
    _session_with_tables(enabled=False)
    result = json.loads(drag(action="move", session_name="plan", element_id="a", x=401, y=304))
    assert (result["x"], result["y"]) == (401, 304)
    assert result["guides"] == []


def test_drag_hides_guides_when_display_off() -> None:
    _session_with_tables()
    snapping(action="configure", session_name="plan", show_guides=False)
    result = json.loads(drag(action="move", session_name="plan", element_id="a", x=400, y=304))
    assert result["y"] == 300
    assert result["guides"] == []


def test_drag_unknown_element_passes_through() -> None:
    _session_with_tables()
    result = json.loads(drag(action="move", session_name="plan", element_id="zz", x=1, y=2))
    assert (result["x"], result["y"]) == (1, 2)


def test_drag_end_commit_moves_element() -> None:
    _session_with_tables()
    result = json.loads(drag(action="end", session_name="plan", element_id="a", x=410, y=300, commit=True))
    assert (result["x"], result["y"]) == (410, 300)

    data = json.loads(elements(action="bounds", session_name="plan", element_id="a"))
    assert data["bounds"]["center_x"] == 410


def test_drag_end_without_commit() -> None:
    _session_with_tables()
    assert "ended" in drag(action="end", session_name="plan", element_id="a")
    listed = json.loads(elements(action="list", session_name="plan"))
    assert listed[0]["x"] == 400


def test_drag_errors() -> None:
    _session_with_tables()
    assert drag(action="fling", session_name="plan", element_id="a").startswith("Error:")
    assert drag(action="move", session_name="plan").startswith("Error: 'element_id'")
    assert "not found" in drag(action="end", session_name="plan", element_id="zz", commit=True)
    assert "not found" in drag(action="move", session_name="ghost", element_id="a")


def test_sessions_do_not_share_engines() -> None:
    _session_with_tables("one")
    _session_with_tables("two", enabled=False)
    one = json.loads(drag(action="move", session_name="one", element_id="a", x=400, y=304))
    two = json.loads(drag(action="move", session_name="two", element_id="a", x=400, y=304))
    assert one["snapped_y"] is True
    assert two["snapped_y"] is False
