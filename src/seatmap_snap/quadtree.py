"""
Region quadtree over axis-aligned boxes.

Nodes live in a flat arena (a list) and refer to their four children by
index, so the tree never holds nested node objects. An item is stored in
the deepest node whose region fully contains its box; items straddling a
quadrant boundary stay with the ancestor, so every item is stored exactly
once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from seatmap_snap.models import Rect

logger = logging.getLogger(__name__)


DEFAULT_MAX_ITEMS = 10
DEFAULT_MAX_DEPTH = 8


@dataclass
class SpatialItem:
    """An indexed box plus the id of the element it belongs to."""
    id: str
    left: float
    top: float
    right: float
    bottom: float


@dataclass
class _QuadNode:
    region: Rect
    depth: int
    items: list[SpatialItem] = field(default_factory=list)
    # Arena index of the NW child; the four children are allocated
    # contiguously (NW, NE, SW, SE). -1 while the node is a leaf.
    first_child: int = -1

    @property
    def divided(self) -> bool:
        return self.first_child >= 0


class QuadTree:
    """Spatial index supporting insert, remove, update and range queries.

    Args:
        region: World region covered by the root node.
        max_items: Items a node holds before it subdivides.
        max_depth: Depth at which nodes stop subdividing and keep
            accumulating items regardless of ``max_items``.
    """

    def __init__(
        self,
        region: Rect,
        max_items: int = DEFAULT_MAX_ITEMS,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.region = region
        self.max_items = max_items
        self.max_depth = max_depth
        self._nodes: list[_QuadNode] = [_QuadNode(region, 0)]
        self._count = 0

    def __len__(self) -> int:
        return self._count

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    def depth(self) -> int:
        """Depth of the deepest allocated node (0 for a single root)."""
        return max(n.depth for n in self._nodes)

    # -- mutation -------------------------------------------------------

    def insert(self, item: SpatialItem) -> None:
        root = self._nodes[0]
        if not root.region.contains_box(item.left, item.top, item.right, item.bottom):
            # Outside the world region: keep it at the root so it is never lost.
            logger.debug("Item %s lies outside the index region; kept at root", item.id)
            root.items.append(item)
        else:
            self._insert_at(0, item)
        self._count += 1

    def remove(self, item: SpatialItem) -> bool:
        """Remove the entry with ``item.id``.

        The search descends only into children whose region intersects
        the box of *item*, so callers pass the box the entry was inserted
        with (or any box reaching the node that holds it).
        """
        if self._remove_at(0, item):
            self._count -= 1
            return True
        return False

    def update(self, item: SpatialItem, previous: Optional[SpatialItem] = None) -> None:
        """Move an entry: remove it, then insert *item*.

        *previous* is the entry as it was inserted. Without it the old
        entry is located by id over the whole tree.
        """
        if previous is not None:
            self.remove(previous)
        elif self._remove_by_id(0, item.id):
            self._count -= 1
        self.insert(item)

    def clear(self) -> None:
        """Drop every item and subdivision."""
        self._nodes = [_QuadNode(self.region, 0)]
        self._count = 0

    # -- queries --------------------------------------------------------

    def query(self, region: Rect) -> list[SpatialItem]:
        """Return all items whose box intersects *region* (unordered)."""
        out: list[SpatialItem] = []
        self._collect(0, region, out)
        return out

    # -- internals ------------------------------------------------------

    def _children(self, node: _QuadNode) -> range:
        return range(node.first_child, node.first_child + 4)

    def _insert_at(self, index: int, item: SpatialItem) -> bool:
        node = self._nodes[index]
        if not node.region.contains_box(item.left, item.top, item.right, item.bottom):
            return False

        if not node.divided and len(node.items) < self.max_items:
            node.items.append(item)
            return True

        if node.depth >= self.max_depth:
            node.items.append(item)
            return True

        if not node.divided:
            self._subdivide(index)

        for child in self._children(node):
            if self._insert_at(child, item):
                return True

        node.items.append(item)
        return True

    def _subdivide(self, index: int) -> None:
        node = self._nodes[index]
        r = node.region
        w = r.width / 2
        h = r.height / 2
        depth = node.depth + 1

        node.first_child = len(self._nodes)
        self._nodes.extend([
            _QuadNode(Rect(r.x, r.y, w, h), depth),          # NW
            _QuadNode(Rect(r.x + w, r.y, w, h), depth),      # NE
            _QuadNode(Rect(r.x, r.y + h, w, h), depth),      # SW
            _QuadNode(Rect(r.x + w, r.y + h, w, h), depth),  # SE
        ])

        pending = node.items
        node.items = []
        for item in pending:
            if not any(self._insert_at(child, item) for child in self._children(node)):
                node.items.append(item)

    def _remove_at(self, index: int, item: SpatialItem) -> bool:
        node = self._nodes[index]
        for i, held in enumerate(node.items):
            if held.id == item.id:
                del node.items[i]
                return True
        if node.divided:
            for child in self._children(node):
                region = self._nodes[child].region
                if region.intersects_box(item.left, item.top, item.right, item.bottom):
                    if self._remove_at(child, item):
                        return True
        return False

    def _remove_by_id(self, index: int, item_id: str) -> bool:
        node = self._nodes[index]
        for i, held in enumerate(node.items):
            if held.id == item_id:
                del node.items[i]
                return True
        if node.divided:
            return any(self._remove_by_id(child, item_id) for child in self._children(node))
        return False

    def _collect(self, index: int, region: Rect, out: list[SpatialItem]) -> None:
        node = self._nodes[index]
        for item in node.items:
            if region.intersects_box(item.left, item.top, item.right, item.bottom):
                out.append(item)
        if node.divided:
            for child in self._children(node):
                if self._nodes[child].region.intersects(region):
                    self._collect(child, region, out)
