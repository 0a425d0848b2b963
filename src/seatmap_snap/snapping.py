"""
Alignment snapping engine.

While an element is dragged, the engine looks up nearby elements in a
quadtree, pairs the dragged element's alignment points with theirs on
both axes, resolves competing candidates down to at most one per axis,
and returns the corrected position together with guide lines to draw.

Steps for one detection call:
1. Short-circuit when snapping is off, the index is missing, or the call
   falls inside the throttle interval of the previous one.
2. Bounds and alignment points of the dragged element at the proposed
   position.
3. Neighbour query with the visual box grown by twice the threshold.
4. Pairwise matching per axis, with a widened threshold for the snap
   that is already held on that axis (hysteresis).
5. Priority scoring, then conflict filtering: best candidate per
   (axis, target), then the closest candidate per axis.
6. Offsets, guides and hysteresis state per axis.
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Callable, Iterable, Optional

from seatmap_snap.alignment import alignment_points_of, checks_axis
from seatmap_snap.bounds import UnsupportedShapeError, bounds_at_position, bounds_of
from seatmap_snap.models import (
    AlignmentGuide,
    AlignmentMatch,
    AlignmentPoint,
    AlignmentPointType,
    AxisSnapState,
    Element,
    ElementBounds,
    GuideOrientation,
    Rect,
    SnappingConfig,
    SnapResult,
    SnapState,
    alignment_label,
    clamp_threshold,
    is_finite_number,
)
from seatmap_snap.quadtree import DEFAULT_MAX_DEPTH, DEFAULT_MAX_ITEMS, QuadTree, SpatialItem

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Tuning
# ---------------------------------------------------------------------------

WORLD_REGION = Rect(-10000, -10000, 20000, 20000)

DETECTION_INTERVAL = 0.016  # seconds, roughly one display frame
HYSTERESIS_FACTOR = 1.5     # threshold multiplier for a held snap
GUIDE_MARGIN = 50           # guide overhang past the target point
SEARCH_PADDING_FACTOR = 2   # neighbour search grows the box by this × threshold

CENTER_PREFERENCE_RATIO = 0.6
CENTER_BONUS = 5
SAME_TYPE_BONUS = 3
CORNER_PENALTY = 10

_AXES = ("x", "y")


# ---------------------------------------------------------------------------
# Scoring and conflict resolution
# ---------------------------------------------------------------------------

def alignment_priority(
    dragged_type: AlignmentPointType,
    target_type: AlignmentPointType,
    distance: float,
    config: SnappingConfig,
    center_bonus: float = CENTER_BONUS,
    same_type_bonus: float = SAME_TYPE_BONUS,
    corner_penalty: float = CORNER_PENALTY,
) -> float:
    """Score a candidate pairing; lower is better.

    Corner points are only penalised when corner snapping is off, never
    excluded: a lone corner candidate can still win.
    """
    priority = 0.0 if distance == 0 else distance * 10

    if config.prioritize_center_alignment and dragged_type.is_center and target_type.is_center:
        priority -= center_bonus

    if dragged_type is target_type:
        priority -= same_type_bonus

    if not config.enable_corner_snapping and dragged_type.is_corner:
        priority += corner_penalty

    return priority


def _closest(matches: list[AlignmentMatch]) -> AlignmentMatch:
    # min() keeps the first of equal distances, i.e. the better-priority one
    return min(matches, key=lambda m: m.distance)


def _is_center_pairing(match: AlignmentMatch) -> bool:
    return match.dragged_point.type.is_center or match.target_point.type.is_center


def select_best_alignment(
    group: list[AlignmentMatch],
    snap_threshold: float,
    center_ratio: float = CENTER_PREFERENCE_RATIO,
) -> AlignmentMatch:
    """Pick one candidate among several for the same axis and target.

    A center pairing close enough (within ``center_ratio`` of the
    threshold) beats any edge pairing; otherwise the closer one wins.
    """
    if len(group) == 1:
        return group[0]

    centers = [m for m in group if _is_center_pairing(m)]
    edges = [m for m in group if not _is_center_pairing(m)]
    if centers and edges:
        best_center = _closest(centers)
        best_edge = _closest(edges)
        if best_center.distance <= snap_threshold * center_ratio:
            return best_center
        return best_center if best_center.distance < best_edge.distance else best_edge

    return _closest(group)


def filter_conflicting_alignments(
    matches: list[AlignmentMatch],
    snap_threshold: float,
    center_ratio: float = CENTER_PREFERENCE_RATIO,
) -> list[AlignmentMatch]:
    """Reduce priority-sorted *matches* to at most one match per axis."""
    groups: dict[tuple[str, str], list[AlignmentMatch]] = {}
    for match in matches:
        groups.setdefault((match.axis, match.target_id), []).append(match)

    best: dict[str, AlignmentMatch] = {}
    for group in groups.values():
        candidate = select_best_alignment(group, snap_threshold, center_ratio)
        current = best.get(candidate.axis)
        if current is None or (candidate.distance, candidate.priority) < (
            current.distance,
            current.priority,
        ):
            best[candidate.axis] = candidate

    return [best[axis] for axis in _AXES if axis in best]


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

def _is_finite_bounds(bounds: ElementBounds) -> bool:
    return all(is_finite_number(v) for v in (
        bounds.visual_left,
        bounds.visual_top,
        bounds.visual_right,
        bounds.visual_bottom,
        bounds.center_x,
        bounds.center_y,
        bounds.rotation,
        bounds.rotation_origin.x,
        bounds.rotation_origin.y,
    ))


def _spatial_item(bounds: ElementBounds) -> SpatialItem:
    return SpatialItem(
        id=bounds.element_id,
        left=bounds.visual_left,
        top=bounds.visual_top,
        right=bounds.visual_right,
        bottom=bounds.visual_bottom,
    )


class SnapEngine:
    """Snap detection for one editing session.

    Owns the session's snapping configuration, the per-axis hysteresis
    state of the current drag gesture, the spatial index, and the bounds
    cached for each indexed element. Several engines can coexist in one
    process.

    The index is created by the first :meth:`rebuild_index` or
    :meth:`update_element` call; until then detection is a no-op.
    """

    def __init__(
        self,
        config: Optional[SnappingConfig] = None,
        *,
        region: Rect = WORLD_REGION,
        max_items: int = DEFAULT_MAX_ITEMS,
        max_depth: int = DEFAULT_MAX_DEPTH,
        detection_interval: float = DETECTION_INTERVAL,
        hysteresis_factor: float = HYSTERESIS_FACTOR,
        guide_margin: float = GUIDE_MARGIN,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        # each engine owns its config
        self.config = replace(config) if config is not None else SnappingConfig()
        self.config.snap_threshold = clamp_threshold(self.config.snap_threshold)
        self.state = SnapState()
        self.active_guides: list[AlignmentGuide] = []

        self.region = region
        self.max_items = max_items
        self.max_depth = max_depth
        self.detection_interval = detection_interval
        self.hysteresis_factor = hysteresis_factor
        self.guide_margin = guide_margin
        self._clock = clock

        self._index: Optional[QuadTree] = None
        self._bounds_cache: dict[str, ElementBounds] = {}
        self._last_detection: Optional[float] = None

    # -- configuration --------------------------------------------------

    def toggle_snapping(self) -> bool:
        self.set_enabled(not self.config.enable_snapping)
        return self.config.enable_snapping

    def set_enabled(self, enabled: bool) -> None:
        self.config.enable_snapping = enabled
        if not enabled:
            self.active_guides = []
            self.state.reset()

    def set_snap_threshold(self, threshold: float) -> float:
        """Set the threshold, clamped into [5, 20]; returns the stored value."""
        self.config.snap_threshold = clamp_threshold(threshold)
        return self.config.snap_threshold

    def set_show_alignment_guides(self, show: bool) -> None:
        self.config.show_alignment_guides = show

    def set_prioritize_center_alignment(self, prioritize: bool) -> None:
        self.config.prioritize_center_alignment = prioritize

    def set_corner_snapping(self, enabled: bool) -> None:
        self.config.enable_corner_snapping = enabled

    def renderable_guides(self) -> list[AlignmentGuide]:
        """Guides a renderer should draw right now."""
        if not self.config.show_alignment_guides:
            return []
        return list(self.active_guides)

    # -- index maintenance ----------------------------------------------

    @property
    def has_index(self) -> bool:
        return self._index is not None

    @property
    def indexed_ids(self) -> list[str]:
        return list(self._bounds_cache)

    def cached_bounds(self, element_id: str) -> Optional[ElementBounds]:
        return self._bounds_cache.get(element_id)

    def _ensure_index(self) -> QuadTree:
        if self._index is None:
            self._index = QuadTree(self.region, self.max_items, self.max_depth)
        return self._index

    def rebuild_index(self, elements: Iterable[Element]) -> None:
        """Re-index a whole element collection after a structural change.

        Raises:
            UnsupportedShapeError: an element is outside the shape set.
        """
        index = self._ensure_index()
        self._bounds_cache.clear()
        index.clear()
        for element in elements:
            bounds = bounds_of(element)
            if not _is_finite_bounds(bounds):
                logger.warning("Element %r has non-finite geometry; not indexed", element.id)
                continue
            self._bounds_cache[element.id] = bounds
            index.insert(_spatial_item(bounds))
        logger.debug("Spatial index rebuilt with %d elements", len(self._bounds_cache))

    def update_element(self, element: Element) -> None:
        """Re-index one element after it moved or changed shape."""
        index = self._ensure_index()
        bounds = bounds_of(element)
        old = self._bounds_cache.pop(element.id, None)
        if old is not None:
            index.remove(_spatial_item(old))
        if not _is_finite_bounds(bounds):
            logger.warning("Element %r has non-finite geometry; dropped from the index", element.id)
            return
        self._bounds_cache[element.id] = bounds
        index.insert(_spatial_item(bounds))

    def remove_element(self, element_id: str) -> bool:
        old = self._bounds_cache.pop(element_id, None)
        if old is None or self._index is None:
            logger.warning("Element '%s' is not indexed; nothing to remove", element_id)
            return False
        return self._index.remove(_spatial_item(old))

    # -- gesture lifecycle ----------------------------------------------

    def clear_snap_state(self) -> None:
        self.state.reset()

    def end_drag(self) -> None:
        """Forget everything tied to the current drag gesture."""
        self.state.reset()
        self.active_guides = []
        self._last_detection = None

    # -- detection ------------------------------------------------------

    def detect_snap_targets(
        self, element: Element, proposed_x: float, proposed_y: float
    ) -> SnapResult:
        """Return the snapped position and guides for a drag move.

        Never raises: missing context or bad input yields the proposed
        position unchanged with no guides.
        """
        unchanged = SnapResult(x=proposed_x, y=proposed_y)
        if not self.config.enable_snapping or self._index is None:
            return unchanged

        if not (is_finite_number(proposed_x) and is_finite_number(proposed_y)):
            logger.debug("Skipping detection for non-finite position (%r, %r)", proposed_x, proposed_y)
            return unchanged

        now = self._clock()
        if self._last_detection is not None and now - self._last_detection < self.detection_interval:
            return SnapResult(x=proposed_x, y=proposed_y, guides=list(self.active_guides))
        self._last_detection = now

        element_id = getattr(element, "id", None)
        if element_id not in self._bounds_cache:
            logger.debug("Element %r is not indexed; no snapping", element_id)
            return unchanged

        try:
            dragged_bounds = bounds_at_position(element, proposed_x, proposed_y)
        except UnsupportedShapeError as exc:
            logger.warning("Cannot snap element %r: %s", element_id, exc)
            return unchanged
        if not _is_finite_bounds(dragged_bounds):
            logger.debug("Element %r has non-finite geometry; no snapping", element_id)
            return unchanged

        corners = self.config.enable_corner_snapping
        dragged_points = alignment_points_of(dragged_bounds, include_corners=corners)

        search = Rect.search_region(
            dragged_bounds.visual_left,
            dragged_bounds.visual_top,
            dragged_bounds.visual_width,
            dragged_bounds.visual_height,
            self.config.snap_threshold * SEARCH_PADDING_FACTOR,
        )
        nearby = self._index.query(search)

        matches = self._find_alignments(dragged_points, nearby, element_id)
        result = self._resolve(proposed_x, proposed_y, matches, dragged_bounds)
        self.active_guides = list(result.guides)
        return result

    def _effective_threshold(self, axis: str, target_id: str, alignment_type: str) -> float:
        if self.state.axis(axis).holds(target_id, alignment_type):
            return self.config.snap_threshold * self.hysteresis_factor
        return self.config.snap_threshold

    def _find_alignments(
        self,
        dragged_points: list[AlignmentPoint],
        nearby: list[SpatialItem],
        dragged_id: str,
    ) -> list[AlignmentMatch]:
        corners = self.config.enable_corner_snapping
        matches: list[AlignmentMatch] = []

        for item in nearby:
            if item.id == dragged_id:
                continue
            target_bounds = self._bounds_cache.get(item.id)
            if target_bounds is None:
                continue
            target_points = alignment_points_of(target_bounds, include_corners=corners)

            for dp in dragged_points:
                for tp in target_points:
                    label = alignment_label(dp.type, tp.type)
                    for axis in _AXES:
                        if not checks_axis(dp.type, axis):
                            continue
                        if axis == "x":
                            diff, snap_to = abs(dp.x - tp.x), tp.x
                        else:
                            diff, snap_to = abs(dp.y - tp.y), tp.y
                        if diff > self._effective_threshold(axis, tp.element_id, label):
                            continue
                        matches.append(AlignmentMatch(
                            axis=axis,
                            dragged_point=dp,
                            target_point=tp,
                            distance=diff,
                            snap_position=snap_to,
                            priority=alignment_priority(dp.type, tp.type, diff, self.config),
                        ))

        matches.sort(key=lambda m: m.priority)
        return matches

    def _resolve(
        self,
        proposed_x: float,
        proposed_y: float,
        matches: list[AlignmentMatch],
        dragged_bounds: ElementBounds,
    ) -> SnapResult:
        result = SnapResult(x=proposed_x, y=proposed_y)
        chosen = {
            m.axis: m
            for m in filter_conflicting_alignments(matches, self.config.snap_threshold)
        }
        margin = self.guide_margin

        for axis in _AXES:
            best = chosen.get(axis)
            if best is None:
                self.state.set_axis(axis, AxisSnapState())
                continue

            label = best.alignment_type
            self.state.set_axis(axis, AxisSnapState(True, best.target_id, label))
            tp = best.target_point

            if axis == "x":
                result.x = proposed_x + (best.snap_position - best.dragged_point.x)
                result.snapped_x = True
                result.guides.append(AlignmentGuide(
                    type=GuideOrientation.VERTICAL,
                    position=best.snap_position,
                    start=min(dragged_bounds.visual_top, tp.y - margin),
                    end=max(dragged_bounds.visual_bottom, tp.y + margin),
                    source_element=dragged_bounds.element_id,
                    target_element=best.target_id,
                    alignment_type=label,
                ))
            else:
                result.y = proposed_y + (best.snap_position - best.dragged_point.y)
                result.snapped_y = True
                result.guides.append(AlignmentGuide(
                    type=GuideOrientation.HORIZONTAL,
                    position=best.snap_position,
                    start=min(dragged_bounds.visual_left, tp.x - margin),
                    end=max(dragged_bounds.visual_right, tp.x + margin),
                    source_element=dragged_bounds.element_id,
                    target_element=best.target_id,
                    alignment_type=label,
                ))

        return result
