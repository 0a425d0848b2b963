"""Tests for input validation of MCP tool parameters."""

import pytest

from seatmap_snap.validation import (
    ValidationError,
    validate_action,
    validate_bool,
    validate_element_dict,
    validate_elements,
    validate_id_list,
    validate_list,
    validate_non_empty_string,
    validate_number,
    _DRAG_ACTIONS,
    _SESSION_ACTIONS,
)


# ===================================================================
# Primitive validators
# ===================================================================

class TestPrimitives:

    def test_non_empty_string_strips(self) -> None:
        assert validate_non_empty_string("  plan  ", "name") == "plan"

    @pytest.mark.parametrize("value", ["", "   ", None, 3])
    def test_non_empty_string_rejects(self, value) -> None:
        with pytest.raises(ValidationError, match="'name' must be a non-empty string"):
            validate_non_empty_string(value, "name")

    def test_number_accepts_int_and_float(self) -> None:
        assert validate_number(3, "x") == 3.0
        assert validate_number(2.5, "x") == 2.5

    @pytest.mark.parametrize("value", [True, "1", None, float("nan"), float("inf")])
    def test_number_rejects(self, value) -> None:
        with pytest.raises(ValidationError, match="'x' must be"):
            validate_number(value, "x")

    def test_bool(self) -> None:
        assert validate_bool(True, "flag") is True
        with pytest.raises(ValidationError, match="must be true or false"):
            validate_bool(1, "flag")

    def test_list(self) -> None:
        assert validate_list([1], "items", min_length=1) == [1]
        with pytest.raises(ValidationError, match="must be a list"):
            validate_list("abc", "items")
        with pytest.raises(ValidationError, match="at least 1"):
            validate_list([], "items", min_length=1)

    def test_id_list(self) -> None:
        assert validate_id_list(["a", "b"], "element_ids") == ["a", "b"]
        with pytest.raises(ValidationError, match="at least 1"):
            validate_id_list([], "element_ids")
        with pytest.raises(ValidationError, match=r"'element_ids'\[1\]"):
            validate_id_list(["a", ""], "element_ids")


class TestActions:

    def test_action_is_case_insensitive(self) -> None:
        assert validate_action(" Move ", "drag", _DRAG_ACTIONS) == "move"

    def test_missing_action_lists_choices(self) -> None:
        with pytest.raises(ValidationError, match="create, delete, info, list"):
            validate_action("", "session", _SESSION_ACTIONS)

    def test_unknown_action(self) -> None:
        with pytest.raises(ValidationError, match="Unknown drag action 'fling'"):
            validate_action("fling", "drag", _DRAG_ACTIONS)


# ===================================================================
# Element dicts
# ===================================================================

class TestElementDicts:

    def test_minimal_element(self) -> None:
        validate_element_dict({"id": "t1", "type": "roundTable", "x": 0, "y": 0}, 0)

    def test_full_segmented_row(self) -> None:
        validate_element_dict({
            "id": "r", "type": "segmentedSeatingRow", "x": 0, "y": 0, "rotation": 10,
            "segments": [{"start_x": 0, "start_y": 0, "end_x": 50, "end_y": 0, "seat_count": 3}],
            "label": "Row A",
        }, 0)

    def test_not_a_dict(self) -> None:
        with pytest.raises(ValidationError, match="must be a dict"):
            validate_element_dict(["t1"], 2)

    @pytest.mark.parametrize("missing", ["id", "type", "x", "y"])
    def test_missing_required_key(self, missing) -> None:
        e = {"id": "t1", "type": "roundTable", "x": 0, "y": 0}
        del e[missing]
        with pytest.raises(ValidationError, match=f"missing required key '{missing}'"):
            validate_element_dict(e, 0)

    def test_unknown_type(self) -> None:
        with pytest.raises(ValidationError, match="unknown type 'stage'"):
            validate_element_dict({"id": "s", "type": "stage", "x": 0, "y": 0}, 0)

    def test_non_finite_position(self) -> None:
        with pytest.raises(ValidationError, match="'x' must be a finite number"):
            validate_element_dict({"id": "s", "type": "text", "x": float("nan"), "y": 0}, 0)

    @pytest.mark.parametrize("key, value", [
        ("radius", 0),
        ("width", -5),
        ("seat_count", -1),
        ("seats", 2.5),
        ("rotation", "90"),
        ("label", 7),
        ("text", None),
    ])
    def test_bad_shape_fields(self, key, value) -> None:
        e = {"id": "e", "type": "roundTable", "x": 0, "y": 0, key: value}
        with pytest.raises(ValidationError, match=f"'{key}'"):
            validate_element_dict(e, 0)

    @pytest.mark.parametrize("key, value", [
        ("radius", float("nan")),
        ("width", float("inf")),
        ("height", float("nan")),
        ("rotation", float("-inf")),
        ("seat_spacing", float("nan")),
        ("start_x", float("inf")),
        ("end_y", float("nan")),
    ])
    def test_non_finite_shape_fields(self, key, value) -> None:
        e = {"id": "e", "type": "roundTable", "x": 0, "y": 0, key: value}
        with pytest.raises(ValidationError, match=f"'{key}' must be a finite number"):
            validate_element_dict(e, 0)

    def test_non_finite_segment_endpoint(self) -> None:
        e = {"id": "r", "type": "segmentedSeatingRow", "x": 0, "y": 0,
             "segments": [{"start_x": 0, "start_y": 0, "end_x": float("nan"), "end_y": 0}]}
        with pytest.raises(ValidationError, match="segment 0 needs a finite numeric 'end_x'"):
            validate_element_dict(e, 0)

    def test_non_finite_polygon_point(self) -> None:
        e = {"id": "p", "type": "polygon", "x": 0, "y": 0,
             "points": [{"x": 0, "y": 0}, {"x": float("inf"), "y": 1}]}
        with pytest.raises(ValidationError, match="point 1"):
            validate_element_dict(e, 0)

    def test_bad_segment(self) -> None:
        e = {"id": "r", "type": "segmentedSeatingRow", "x": 0, "y": 0,
             "segments": [{"start_x": 0, "start_y": 0, "end_x": 5}]}
        with pytest.raises(ValidationError, match="segment 0 needs a finite numeric 'end_y'"):
            validate_element_dict(e, 0)

    def test_bad_polygon_point(self) -> None:
        e = {"id": "p", "type": "polygon", "x": 0, "y": 0, "points": [{"x": 1}]}
        with pytest.raises(ValidationError, match="point 0"):
            validate_element_dict(e, 0)

    def test_duplicate_ids(self) -> None:
        items = [
            {"id": "a", "type": "text", "x": 0, "y": 0},
            {"id": "a", "type": "line", "x": 0, "y": 0},
        ]
        with pytest.raises(ValidationError, match="duplicate id 'a'"):
            validate_elements(items, "items")

    def test_elements_must_be_list(self) -> None:
        with pytest.raises(ValidationError, match="'items' must be a list"):
            validate_elements({"id": "a"}, "items")
