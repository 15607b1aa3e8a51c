"""
rbtbench store contract

The harness never implements the ordered-key store itself. It drives any
object satisfying the protocols below, built by a zero-argument factory:

    from mytree import RbTree
    store = RbTree()

    store.insert(42)
    node = store.search(42)        # None when absent
    assert store.verify(chatty=True)
    print(store.render(80, 20, NullPolicy.NO_NULL))
    store.destroy()

A factory can be named on the command line as "package.module:attribute".
"""

import importlib
from enum import Enum
from typing import Any, Callable, Optional, Protocol, runtime_checkable


# =============================================================================
# ENUMS
# =============================================================================

class Direction(Enum):
    """Traversal order."""
    ASC = "asc"
    DESC = "desc"


class NullPolicy(Enum):
    """Whether rendering draws empty leaves."""
    NO_NULL = "no_null"
    SHOW_NULL = "show_null"


# =============================================================================
# PROTOCOLS
# =============================================================================

@runtime_checkable
class StoreNode(Protocol):
    """A node handed out by search and traversals."""
    key: int
    red: bool


# callback(node, context) -> node
Callback = Callable[[StoreNode, Any], Optional[StoreNode]]


@runtime_checkable
class OrderedKeyStore(Protocol):
    """Operations the harness calls on a store."""

    @property
    def count(self) -> int: ...

    @property
    def root(self) -> Optional[StoreNode]: ...

    def insert(self, key: int) -> Any: ...

    def delete_key(self, key: int) -> Any: ...

    def search(self, key: int) -> Optional[StoreNode]: ...

    def verify(self, chatty: bool = False, full: bool = False) -> bool: ...

    def in_order(self, callback: Callback, context: Any = None,
                 direction: Direction = Direction.ASC) -> Any: ...

    def breadth_first(self, callback: Callback, context: Any = None,
                      direction: Direction = Direction.ASC) -> Any: ...

    def in_order_track(self, callback: Callback, context: Any = None,
                       direction: Direction = Direction.ASC) -> Any: ...

    def breadth_first_track(self, callback: Callback, context: Any = None,
                            direction: Direction = Direction.ASC) -> Any: ...

    def in_order_range(self, callback: Callback, context: Any,
                       direction: Direction,
                       low: int, low_inclusive: bool,
                       high: int, high_inclusive: bool) -> int: ...

    def render(self, width: int, height: int,
               null_policy: NullPolicy = NullPolicy.NO_NULL) -> str: ...

    def destroy(self) -> Any: ...


@runtime_checkable
class FaultInjectable(Protocol):
    """
    Privileged, test-only mutation.

    Recolors a node in place without any rebalancing. Only the corruption
    stage of the regression suite uses it.
    """

    def force_red(self, node: StoreNode) -> None: ...


StoreFactory = Callable[[], OrderedKeyStore]


def noop_callback(node: StoreNode, context: Any = None) -> StoreNode:
    """Traversal callback that does nothing."""
    return node


# =============================================================================
# LOADING
# =============================================================================

class StoreLoadError(ValueError):
    """Store factory path could not be resolved."""
    pass


def load_store_factory(path: str) -> StoreFactory:
    """
    Import a store factory from "package.module:attribute".

    Args:
        path: Import path; the attribute may be dotted (module:Class.create)

    Returns:
        The callable found at that path
    """
    if not path or ":" not in path:
        raise StoreLoadError(
            f"Invalid store path '{path}': expected 'package.module:factory'"
        )

    module_name, _, attr_path = path.partition(":")
    if not module_name or not attr_path:
        raise StoreLoadError(
            f"Invalid store path '{path}': expected 'package.module:factory'"
        )

    try:
        target = importlib.import_module(module_name)
    except ImportError as e:
        raise StoreLoadError(f"Cannot import '{module_name}': {e}") from e

    for attr in attr_path.split("."):
        try:
            target = getattr(target, attr)
        except AttributeError as e:
            raise StoreLoadError(
                f"'{module_name}' has no attribute '{attr_path}'"
            ) from e

    if not callable(target):
        raise StoreLoadError(f"Store factory '{path}' is not callable")

    return target
