"""
Input validation for seatmap-snap MCP tool parameters.

Provides reusable validators that produce clear error messages for all
parameters received from editor front-ends or LLM callers.
"""

from __future__ import annotations

import math
from typing import Any

from seatmap_snap.models import ElementType


# ---------------------------------------------------------------------------
# Validation result
# ---------------------------------------------------------------------------

class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# ---------------------------------------------------------------------------
# Primitive validators
# ---------------------------------------------------------------------------

def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_finite(value: Any) -> bool:
    return _is_number(value) and math.isfinite(value)


def validate_non_empty_string(value: Any, field_name: str) -> str:
    """Ensure *value* is a non-empty string after stripping whitespace."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"'{field_name}' must be a non-empty string.")
    return value.strip()


def validate_number(value: Any, field_name: str) -> float:
    """Validate a finite coordinate or threshold value."""
    if not _is_number(value):
        raise ValidationError(
            f"'{field_name}' must be a number, got {type(value).__name__}."
        )
    if not math.isfinite(value):
        raise ValidationError(f"'{field_name}' must be finite, got {value}.")
    return float(value)


def validate_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(
            f"'{field_name}' must be true or false, got {type(value).__name__}."
        )
    return value


def validate_list(value: Any, field_name: str, *, min_length: int = 0) -> list:
    """Ensure *value* is a list holding at least *min_length* entries."""
    if not isinstance(value, list):
        raise ValidationError(
            f"'{field_name}' must be a list, got {type(value).__name__}."
        )
    if len(value) < min_length:
        raise ValidationError(
            f"'{field_name}' needs at least {min_length} entry(ies), got {len(value)}."
        )
    return value


def validate_id_list(value: Any, field_name: str) -> list[str]:
    """A non-empty list of element ids."""
    ids = validate_list(value, field_name, min_length=1)
    for i, eid in enumerate(ids):
        if not isinstance(eid, str) or not eid.strip():
            raise ValidationError(f"'{field_name}'[{i}] must be a non-empty element id.")
    return ids


# ---------------------------------------------------------------------------
# Tool actions
# ---------------------------------------------------------------------------

_SESSION_ACTIONS = {"CREATE", "DELETE", "LIST", "INFO"}
_ELEMENT_ACTIONS = {"LOAD", "UPSERT", "REMOVE", "LIST", "BOUNDS"}
_SNAPPING_ACTIONS = {"CONFIGURE", "TOGGLE", "GET_CONFIG"}
_DRAG_ACTIONS = {"MOVE", "END"}

_ELEMENT_TYPES = {t.value for t in ElementType}


def validate_action(value: Any, tool_name: str, allowed: set[str]) -> str:
    """Validate the action parameter for a tool."""
    if not isinstance(value, str) or not value.strip():
        choices = ", ".join(sorted(a.lower() for a in allowed))
        raise ValidationError(
            f"'{tool_name}' requires an 'action' parameter. Valid actions: {choices}."
        )
    normalized = value.strip().upper()
    if normalized not in allowed:
        choices = ", ".join(sorted(a.lower() for a in allowed))
        raise ValidationError(
            f"Unknown {tool_name} action '{value}'. Valid actions: {choices}."
        )
    return value.strip().lower()


# ---------------------------------------------------------------------------
# Element dict validators
# ---------------------------------------------------------------------------

_POSITIVE_FIELDS = ("radius", "width", "height")
_NUMBER_FIELDS = ("rotation", "seat_spacing", "start_x", "start_y", "end_x", "end_y")
_COUNT_FIELDS = ("seats", "seat_count", "up_chairs", "down_chairs", "left_chairs", "right_chairs")
_SEGMENT_KEYS = ("start_x", "start_y", "end_x", "end_y")


def validate_element_dict(e: Any, index: int) -> None:
    """Validate a single element dict from an elements list."""
    where = f"Element at index {index}"
    if not isinstance(e, dict):
        raise ValidationError(f"{where} must be a dict/object.")
    for key in ("id", "type", "x", "y"):
        if key not in e:
            raise ValidationError(f"{where} missing required key '{key}'.")
    if not isinstance(e["id"], str) or not e["id"].strip():
        raise ValidationError(f"{where}: 'id' must be a non-empty string.")
    if e["type"] not in _ELEMENT_TYPES:
        choices = ", ".join(sorted(_ELEMENT_TYPES))
        raise ValidationError(f"{where}: unknown type '{e['type']}'. Valid types: {choices}.")
    for key in ("x", "y"):
        if not _is_finite(e[key]):
            raise ValidationError(f"{where}: '{key}' must be a finite number.")

    for key in _POSITIVE_FIELDS:
        if key in e and (not _is_finite(e[key]) or e[key] <= 0):
            raise ValidationError(f"{where}: '{key}' must be a finite number > 0.")
    for key in _NUMBER_FIELDS:
        if key in e and not _is_finite(e[key]):
            raise ValidationError(f"{where}: '{key}' must be a finite number.")
    for key in _COUNT_FIELDS:
        if key in e and (not isinstance(e[key], int) or isinstance(e[key], bool) or e[key] < 0):
            raise ValidationError(f"{where}: '{key}' must be a non-negative integer.")
    if "label" in e and e["label"] is not None and not isinstance(e["label"], str):
        raise ValidationError(f"{where}: 'label' must be a string.")
    if "text" in e and not isinstance(e["text"], str):
        raise ValidationError(f"{where}: 'text' must be a string.")

    if "segments" in e:
        if not isinstance(e["segments"], list):
            raise ValidationError(f"{where}: 'segments' must be a list.")
        for j, seg in enumerate(e["segments"]):
            if not isinstance(seg, dict):
                raise ValidationError(f"{where}: segment {j} must be a dict/object.")
            for key in _SEGMENT_KEYS:
                if not _is_finite(seg.get(key)):
                    raise ValidationError(f"{where}: segment {j} needs a finite numeric '{key}'.")

    if "points" in e:
        if not isinstance(e["points"], list):
            raise ValidationError(f"{where}: 'points' must be a list.")
        for j, p in enumerate(e["points"]):
            if not isinstance(p, dict) or not _is_finite(p.get("x")) or not _is_finite(p.get("y")):
                raise ValidationError(f"{where}: point {j} must be an object with finite numeric 'x' and 'y'.")


def validate_elements(value: Any, field_name: str = "elements") -> list[dict]:
    """Validate a list of element dicts with unique ids."""
    items = validate_list(value, field_name)
    seen: set[str] = set()
    for i, e in enumerate(items):
        validate_element_dict(e, i)
        if e["id"] in seen:
            raise ValidationError(f"Element at index {i}: duplicate id '{e['id']}'.")
        seen.add(e["id"])
    return items
