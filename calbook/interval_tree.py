"""
AVL interval tree over event spans.

Each node holds one event keyed by its start instant and tracks the
latest end instant in its subtree, so overlap searches can skip whole
subtrees. Used by the query engine to answer date, range and status
queries without scanning every event.
"""

from datetime import datetime
from typing import Iterable, Optional

from .model import Event


class _Node:
    __slots__ = ['event', 'start', 'end', 'left', 'right', 'parent', 'max_end', 'height']

    def __init__(self, event: Event):
        self.event = event
        self.start: datetime = event.start
        self.end: datetime = event.end
        self.left: Optional['_Node'] = None
        self.right: Optional['_Node'] = None
        self.parent: Optional['_Node'] = None
        self.max_end: datetime = event.end
        self.height: int = 1


class EventIntervalTree:
    """Balanced index of events by [start, end] span."""

    def __init__(self, events: Iterable[Event] = ()):
        self._root: Optional[_Node] = None
        self._nodes: dict[Event, _Node] = {}
        for event in events:
            self.insert(event)

    def __len__(self):
        return len(self._nodes)

    def __contains__(self, event: Event):
        return event in self._nodes

    # --- Balancing ---

    @staticmethod
    def _height(node: Optional[_Node]) -> int:
        return node.height if node else 0

    def _update(self, node: _Node):
        node.height = 1 + max(self._height(node.left), self._height(node.right))
        latest = node.end
        if node.left and node.left.max_end > latest:
            latest = node.left.max_end
        if node.right and node.right.max_end > latest:
            latest = node.right.max_end
        node.max_end = latest

    def _replace_child(self, parent: Optional[_Node], old: _Node, new: Optional[_Node]):
        if parent is None:
            self._root = new
        elif parent.left is old:
            parent.left = new
        else:
            parent.right = new
        if new:
            new.parent = parent

    def _rotate_left(self, node: _Node):
        pivot = node.right
        node.right = pivot.left
        if pivot.left:
            pivot.left.parent = node
        self._replace_child(node.parent, node, pivot)
        pivot.left = node
        node.parent = pivot
        self._update(node)
        self._update(pivot)

    def _rotate_right(self, node: _Node):
        pivot = node.left
        node.left = pivot.right
        if pivot.right:
            pivot.right.parent = node
        self._replace_child(node.parent, node, pivot)
        pivot.right = node
        node.parent = pivot
        self._update(node)
        self._update(pivot)

    def _rebalance(self, node: Optional[_Node]):
        while node:
            self._update(node)
            balance = self._height(node.left) - self._height(node.right)
            if balance > 1:
                if self._height(node.left.left) < self._height(node.left.right):
                    self._rotate_left(node.left)
                self._rotate_right(node)
                node = node.parent
            elif balance < -1:
                if self._height(node.right.right) < self._height(node.right.left):
                    self._rotate_right(node.right)
                self._rotate_left(node)
                node = node.parent
            node = node.parent

    # --- Mutation ---

    def insert(self, event: Event):
        """Add an event; an equal event already in the tree is left as is."""
        if event in self._nodes:
            return
        node = _Node(event)
        self._nodes[event] = node

        parent = None
        current = self._root
        while current:
            parent = current
            current = current.left if node.start < current.start else current.right

        node.parent = parent
        if parent is None:
            self._root = node
        elif node.start < parent.start:
            parent.left = node
        else:
            parent.right = node
        self._rebalance(parent)

    # --- Queries ---

    def overlapping(self, start: datetime, end: datetime) -> list[Event]:
        """Events whose closed span [event.start, event.end] meets [start, end]."""
        found: list[Event] = []

        def _search(node: Optional[_Node]):
            if node is None or start > node.max_end:
                return
            _search(node.left)
            if node.start <= end and node.end >= start:
                found.append(node.event)
            if node.start <= end:
                _search(node.right)

        _search(self._root)
        return found

    def covering(self, instant: datetime) -> list[Event]:
        """Events whose closed span contains instant."""
        return self.overlapping(instant, instant)
