"""Small traversal walkthrough on a 13-key store."""

import sys
from typing import List, Optional, TextIO

from .store import Direction, NullPolicy, OrderedKeyStore

EXAMPLE_KEYS = 13


def _collect(keys: List[int]):
    def callback(node, context=None):
        keys.append(node.key)
        return node
    return callback


def _format(keys: List[int]) -> str:
    return "".join(f" {k}" for k in keys)


def run_example(
    store: OrderedKeyStore,
    width: int = 80,
    height: int = 11,
    out: Optional[TextIO] = None,
) -> dict:
    """
    Insert 0..12 and print the store's traversals.

    Returns:
        Visited keys per traversal and the two range counts
    """
    out = out or sys.stdout

    for key in range(EXAMPLE_KEYS):
        store.insert(key)

    valid = store.verify(chatty=True, full=True)
    out.write(f"{store.render(width, height, NullPolicy.NO_NULL)}\n\n")

    in_order: List[int] = []
    store.in_order(_collect(in_order), None, Direction.ASC)
    out.write(f"In order:{_format(in_order)}\n")

    breadth_first: List[int] = []
    store.breadth_first(_collect(breadth_first), None, Direction.ASC)
    out.write(f"Breadth first:{_format(breadth_first)}\n")

    low_range: List[int] = []
    low_count = store.in_order_range(
        _collect(low_range), None, Direction.ASC, 4, True, 9, False
    )
    out.write(
        f"Between 4 (inclusive) and 9 (exclusive):{_format(low_range)}"
        f", in range: {low_count} nodes\n"
    )

    high_range: List[int] = []
    high_count = store.in_order_range(
        _collect(high_range), None, Direction.DESC, 4, False, 9, True
    )
    out.write(
        f"Between 4 (exclusive) and 9 (inclusive):{_format(high_range)}"
        f", in range: {high_count} nodes\n"
    )

    store.destroy()

    return {
        "valid": valid,
        "in_order": in_order,
        "breadth_first": breadth_first,
        "range_asc": low_range,
        "range_asc_count": low_count,
        "range_desc": high_range,
        "range_desc_count": high_count,
    }
