"""Shared fixtures: an in-memory store implementing the harness contract."""

import io
from bisect import bisect_left, insort
from collections import deque
from dataclasses import dataclass

import pytest
from rich.console import Console

from rbtbench.store import Direction, NullPolicy


@dataclass
class Node:
    key: int
    red: bool = False


class PlainStore:
    """
    Sorted-list store without fault injection.

    Not balanced and not a tree; it only honours the calling contract.
    verify() fails when keys are out of order or any node is red.
    """

    def __init__(self):
        self._keys = []
        self._nodes = {}
        self.destroyed = False
        self.messages = []

    @property
    def count(self):
        return len(self._keys)

    @property
    def root(self):
        if not self._keys:
            return None
        return self._nodes[self._keys[(len(self._keys) - 1) // 2]]

    def insert(self, key):
        if key in self._nodes:
            return
        self._nodes[key] = Node(key)
        insort(self._keys, key)

    def delete_key(self, key):
        if self._nodes.pop(key, None) is None:
            return
        del self._keys[bisect_left(self._keys, key)]

    def search(self, key):
        return self._nodes.get(key)

    def verify(self, chatty=False, full=False):
        ok = True
        if self._keys != sorted(self._nodes):
            ok = False
            self.messages.append("keys out of order")
        red = [k for k in self._keys if self._nodes[k].red]
        if red:
            ok = False
            self.messages.append(f"red nodes: {red}")
        return ok

    def _ordered(self, direction):
        keys = self._keys if direction == Direction.ASC else list(reversed(self._keys))
        return [self._nodes[k] for k in keys]

    def in_order(self, callback, context=None, direction=Direction.ASC):
        for node in self._ordered(direction):
            callback(node, context)

    def breadth_first(self, callback, context=None, direction=Direction.ASC):
        # Level order of the balanced tree over the sorted keys
        queue = deque([(0, len(self._keys) - 1)])
        while queue:
            lo, hi = queue.popleft()
            if lo > hi:
                continue
            mid = (lo + hi) // 2
            callback(self._nodes[self._keys[mid]], context)
            children = [(lo, mid - 1), (mid + 1, hi)]
            if direction == Direction.DESC:
                children.reverse()
            queue.extend(children)

    in_order_track = in_order
    breadth_first_track = breadth_first

    def in_order_range(self, callback, context, direction,
                       low, low_inclusive, high, high_inclusive):
        visited = 0
        for node in self._ordered(direction):
            above = node.key >= low if low_inclusive else node.key > low
            below = node.key <= high if high_inclusive else node.key < high
            if above and below:
                callback(node, context)
                visited += 1
        return visited

    def render(self, width, height, null_policy=NullPolicy.NO_NULL):
        lines, line = [], ""
        for key in self._keys:
            cell = f"{key}{'*' if self._nodes[key].red else ''} "
            if len(line) + len(cell) > width:
                lines.append(line.rstrip())
                line = ""
            line += cell
        lines.append(line.rstrip())
        return "\n".join(lines[:height])

    def destroy(self):
        self._keys = []
        self._nodes = {}
        self.destroyed = True


class ListStore(PlainStore):
    """PlainStore with the privileged recolouring hook."""

    def force_red(self, node):
        node.red = True


class BrokenStore(ListStore):
    """Never passes verification."""

    def verify(self, chatty=False, full=False):
        return False


class RemovalBugStore(ListStore):
    """Fails verification once anything has been deleted."""

    def __init__(self):
        super().__init__()
        self.deleted = False

    def delete_key(self, key):
        self.deleted = True
        super().delete_key(key)

    def verify(self, chatty=False, full=False):
        return not self.deleted and super().verify(chatty, full)


class LenientStore(ListStore):
    """Verification that ignores colours."""

    def verify(self, chatty=False, full=False):
        return self._keys == sorted(self._nodes)


class LossyStore(ListStore):
    """Silently drops odd keys."""

    def insert(self, key):
        if key % 2 == 0:
            super().insert(key)


class RecordingFactory:
    """Store factory that remembers every store it built."""

    def __init__(self, cls=ListStore):
        self.cls = cls
        self.created = []

    def __call__(self):
        store = self.cls()
        self.created.append(store)
        return store


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=200)


@pytest.fixture
def out():
    return io.StringIO()


def console_text(console):
    return console.file.getvalue()
