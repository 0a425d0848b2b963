"""
Seatmap Snap MCP Server - alignment snapping for seating layouts via Model Context Protocol.

Exposes 4 tools that let an editor front-end or an LLM agent keep a layout
in memory and ask, move by move, where a dragged element should land.

Tools:
  1. session   - lifecycle: create, delete, list, info
  2. elements  - layout store: load, upsert, remove, list, bounds
  3. snapping  - configuration: configure, toggle, get_config
  4. drag      - gesture: move (detect snap targets), end
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Optional

from mcp.server.fastmcp import FastMCP

from seatmap_snap.alignment import alignment_points_of
from seatmap_snap.models import (
    Element,
    SnapResult,
    element_from_dict,
    element_to_dict,
    with_position,
)
from seatmap_snap.snapping import SnapEngine
from seatmap_snap.validation import (
    ValidationError,
    validate_action,
    validate_bool,
    validate_elements,
    validate_id_list,
    validate_list,
    validate_non_empty_string,
    validate_number,
    _DRAG_ACTIONS,
    _ELEMENT_ACTIONS,
    _SESSION_ACTIONS,
    _SNAPPING_ACTIONS,
)

# ---------------------------------------------------------------------------
# Logging - suppress routine FastMCP INFO messages that editors show
# as warnings (they go to stderr).
# ---------------------------------------------------------------------------
logging.getLogger("mcp.server").setLevel(logging.WARNING)
logger = logging.getLogger("seatmap-snap")

# ---------------------------------------------------------------------------
# MCP Server
# ---------------------------------------------------------------------------
mcp = FastMCP(
    "seatmap-snap",
    instructions=(
        "MCP server for alignment snapping in seating layouts.\n\n"
        "=== ONLY 4 TOOLS - use the 'action' parameter to pick the operation ===\n\n"
        "1. session(action, ...) - create, delete, list, info.\n"
        "2. elements(action, ...) - load, upsert, remove, list, bounds.\n"
        "3. snapping(action, ...) - configure, toggle, get_config.\n"
        "4. drag(action, ...) - move, end.\n\n"
        "=== RULES ===\n"
        "- Snapping is OFF by default: snapping(action='configure', enabled=True).\n"
        "- Call drag(action='move') once per pointer move; apply the returned x/y.\n"
        "- Always finish a gesture with drag(action='end'), commit=True to keep\n"
        "  the final position.\n"
        "- Element coordinates are world coordinates on an infinite canvas.\n"
    ),
)


@dataclass
class EditorSession:
    """One editing session: its element collection plus its snap engine."""
    name: str
    elements: dict[str, Element] = field(default_factory=dict)
    engine: SnapEngine = field(default_factory=SnapEngine)

    def reindex(self) -> None:
        self.engine.rebuild_index(self.elements.values())


# In-memory session registry: name -> EditorSession
# Guarded by _sessions_lock for thread-safety.
_sessions: dict[str, EditorSession] = {}
_sessions_lock = threading.Lock()


def _get_session(name: str) -> Optional[EditorSession]:
    with _sessions_lock:
        return _sessions.get(name)


# ===================================================================
# TOOL 1: session - lifecycle
# ===================================================================

@mcp.tool()
def session(action: str, name: str = "") -> str:
    """Editing session lifecycle.

    Actions:
      create - Create an empty session with snapping disabled. Params: name.
      delete - Drop a session and its elements. Params: name.
      list   - List sessions with element counts. No params needed.
      info   - Element count and snapping configuration. Params: name.

    Returns:
        Result string or JSON depending on action.
    """
    try:
        action = validate_action(action, "session", _SESSION_ACTIONS)
    except ValidationError as exc:
        return f"Error: {exc.message}"

    if action == "list":
        with _sessions_lock:
            listing = [
                {"name": s.name, "elements": len(s.elements)} for s in _sessions.values()
            ]
        return json.dumps(listing, indent=2)

    try:
        name = validate_non_empty_string(name, "name")
    except ValidationError as exc:
        return f"Error: {exc.message}"

    if action == "create":
        with _sessions_lock:
            if name in _sessions:
                return f"Error: session '{name}' already exists."
            s = EditorSession(name=name)
            s.reindex()
            _sessions[name] = s
        logger.info("Session '%s' created", name)
        return f"Session '{name}' created."

    elif action == "delete":
        with _sessions_lock:
            if _sessions.pop(name, None) is None:
                return f"Error: session '{name}' not found."
        logger.info("Session '%s' deleted", name)
        return f"Session '{name}' deleted."

    else:  # info
        s = _get_session(name)
        if not s:
            return f"Error: session '{name}' not found."
        return json.dumps({
            "name": s.name,
            "elements": len(s.elements),
            "indexed": len(s.engine.indexed_ids),
            "config": s.engine.config.to_dict(),
        }, indent=2)


# ===================================================================
# TOOL 2: elements - layout store
# ===================================================================

@mcp.tool()
def elements(
    action: str,
    session_name: str = "",
    items: list[dict[str, Any]] | None = None,
    element_ids: list[str] | None = None,
    element_id: str = "",
) -> str:
    """Element collection operations.

    Actions:
      load    - Replace the whole collection and rebuild the index.
                Params: items (list of element dicts with id, type, x, y and
                shape fields; types: roundTable, rectangleTable, seatingRow,
                segmentedSeatingRow, line, polygon, text).
      upsert  - Add new elements or replace existing ones by id. Params: items.
      remove  - Remove elements. Params: element_ids.
      list    - List all elements as dicts.
      bounds  - Bounds and alignment points of one element. Params: element_id.

    Returns:
        JSON results or confirmation message.
    """
    try:
        action = validate_action(action, "elements", _ELEMENT_ACTIONS)
        validate_non_empty_string(session_name, "session_name")
    except ValidationError as exc:
        return f"Error: {exc.message}"
    s = _get_session(session_name)
    if not s:
        return f"Error: session '{session_name}' not found."

    if action == "load":
        try:
            validated = validate_elements(items or [], "items")
        except ValidationError as exc:
            return f"Error: {exc.message}"
        s.elements = {e["id"]: element_from_dict(e) for e in validated}
        s.reindex()
        logger.info("Session '%s' loaded %d elements", s.name, len(s.elements))
        return f"Loaded {len(s.elements)} element(s) into '{s.name}'."

    elif action == "upsert":
        try:
            validated = validate_elements(items or [], "items")
            validate_list(validated, "items", min_length=1)
        except ValidationError as exc:
            return f"Error: {exc.message}"
        added: list[str] = []
        updated: list[str] = []
        for data in validated:
            element = element_from_dict(data)
            if element.id in s.elements:
                updated.append(element.id)
            else:
                added.append(element.id)
            s.elements[element.id] = element
        if added:
            s.reindex()
        else:
            for eid in updated:
                s.engine.update_element(s.elements[eid])
        return json.dumps({"added": added, "updated": updated})

    elif action == "remove":
        try:
            validate_id_list(element_ids, "element_ids")
        except ValidationError as exc:
            return f"Error: {exc.message}"
        removed = [eid for eid in element_ids if s.elements.pop(eid, None) is not None]
        missing = [eid for eid in element_ids if eid not in removed]
        if removed:
            s.reindex()
        return json.dumps({"removed": removed, "missing": missing})

    elif action == "list":
        return json.dumps([element_to_dict(e) for e in s.elements.values()], indent=2)

    else:  # bounds
        try:
            element_id = validate_non_empty_string(element_id, "element_id")
        except ValidationError as exc:
            return f"Error: {exc.message}"
        element = s.elements.get(element_id)
        if element is None:
            return f"Error: element '{element_id}' not found."
        b = s.engine.cached_bounds(element_id)
        points = alignment_points_of(b, include_corners=s.engine.config.enable_corner_snapping)
        return json.dumps({
            "bounds": b.to_dict(),
            "alignment_points": [p.to_dict() for p in points],
        }, indent=2)


# ===================================================================
# TOOL 3: snapping - configuration
# ===================================================================

@mcp.tool()
def snapping(
    action: str,
    session_name: str = "",
    enabled: bool | None = None,
    threshold: float | None = None,
    show_guides: bool | None = None,
    prioritize_center: bool | None = None,
    corner_snapping: bool | None = None,
) -> str:
    """Snapping configuration.

    Actions:
      configure  - Update any subset of the settings. Params: enabled,
                   threshold (pixels, clamped to 5..20), show_guides,
                   prioritize_center, corner_snapping.
      toggle     - Flip snapping on/off.
      get_config - Current settings.

    Returns:
        JSON of the resulting configuration.
    """
    try:
        action = validate_action(action, "snapping", _SNAPPING_ACTIONS)
        validate_non_empty_string(session_name, "session_name")
    except ValidationError as exc:
        return f"Error: {exc.message}"
    s = _get_session(session_name)
    if not s:
        return f"Error: session '{session_name}' not found."
    engine = s.engine

    if action == "configure":
        try:
            if enabled is not None:
                validate_bool(enabled, "enabled")
            if threshold is not None:
                validate_number(threshold, "threshold")
            if show_guides is not None:
                validate_bool(show_guides, "show_guides")
            if prioritize_center is not None:
                validate_bool(prioritize_center, "prioritize_center")
            if corner_snapping is not None:
                validate_bool(corner_snapping, "corner_snapping")
        except ValidationError as exc:
            return f"Error: {exc.message}"
        if enabled is not None:
            engine.set_enabled(enabled)
        if threshold is not None:
            engine.set_snap_threshold(threshold)
        if show_guides is not None:
            engine.set_show_alignment_guides(show_guides)
        if prioritize_center is not None:
            engine.set_prioritize_center_alignment(prioritize_center)
        if corner_snapping is not None:
            engine.set_corner_snapping(corner_snapping)

    elif action == "toggle":
        engine.toggle_snapping()

    return json.dumps(engine.config.to_dict(), indent=2)


# ===================================================================
# TOOL 4: drag - gesture
# ===================================================================

@mcp.tool()
def drag(
    action: str,
    session_name: str = "",
    element_id: str = "",
    x: float = 0,
    y: float = 0,
    commit: bool = False,
) -> str:
    """Drag gesture handling.

    Actions:
      move - Detect snap targets for element_id at proposed (x, y).
             Returns {x, y, guides, snapped_x, snapped_y}; guides are
             empty when guide display is off.
      end  - Finish the gesture and reset snap state. With commit=True the
             element is moved to (x, y) in the session.

    Returns:
        JSON results or confirmation message.
    """
    try:
        action = validate_action(action, "drag", _DRAG_ACTIONS)
        validate_non_empty_string(session_name, "session_name")
        element_id = validate_non_empty_string(element_id, "element_id")
        x = validate_number(x, "x")
        y = validate_number(y, "y")
    except ValidationError as exc:
        return f"Error: {exc.message}"
    s = _get_session(session_name)
    if not s:
        return f"Error: session '{session_name}' not found."
    element = s.elements.get(element_id)

    if action == "move":
        if element is None:
            # Unknown element: nothing to snap against, position passes through.
            return json.dumps(SnapResult(x=x, y=y).to_dict())
        result = s.engine.detect_snap_targets(element, x, y)
        payload = result.to_dict()
        if not s.engine.config.show_alignment_guides:
            payload["guides"] = []
        return json.dumps(payload)

    else:  # end
        s.engine.end_drag()
        if not commit:
            return f"Drag of '{element_id}' ended."
        if element is None:
            return f"Error: element '{element_id}' not found."
        moved = with_position(element, x, y)
        s.elements[element_id] = moved
        s.engine.update_element(moved)
        return json.dumps(element_to_dict(moved))


# ===================================================================
# Entry point
# ===================================================================

def main() -> None:
    """Run the MCP server."""
    mcp.run()


if __name__ == "__main__":
    main()
