"""Run configuration."""

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Optional

from .interval import MIN_SAMPLES, resolve_interval


# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_WIDTH = 80
DEFAULT_HEIGHT = 20
DEFAULT_TEST_SIZE = 1000
DEFAULT_KEEP_SIZE = 20
DEFAULT_BREAK_SIZE = 0

STORE_ENV_VAR = "RBTBENCH_STORE"


class BenchMode(str, Enum):
    """Benchmark selection. NONE runs the regression suite instead."""
    NONE = "none"
    INSERT = "insert"
    REMOVE = "remove"
    SEARCH = "search"
    INCREMENTAL_SEARCH = "incremental-search"
    DECREMENTAL_SEARCH = "decremental-search"


# Later entries win when several shortcuts are given
MODE_PRECEDENCE = (
    BenchMode.INSERT,
    BenchMode.REMOVE,
    BenchMode.SEARCH,
    BenchMode.INCREMENTAL_SEARCH,
    BenchMode.DECREMENTAL_SEARCH,
)


def select_mode(shortcuts: Iterable[BenchMode], explicit: Optional[BenchMode] = None) -> BenchMode:
    """
    Pick a single mode.

    An explicit mode always wins. Otherwise the shortcut ranked last in
    MODE_PRECEDENCE is used, or NONE when no shortcut was given.
    """
    if explicit is not None:
        return explicit

    chosen = BenchMode.NONE
    given = set(shortcuts)
    for mode in MODE_PRECEDENCE:
        if mode in given:
            chosen = mode
    return chosen


_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_number(text: Optional[str]) -> int:
    """Leading integer of text, 0 when there is none (atoi semantics)."""
    if text is None:
        return 0
    match = _LEADING_INT.match(str(text))
    return int(match.group(1)) if match else 0


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class Configuration:
    """Harness parameters."""
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    test_size: int = DEFAULT_TEST_SIZE
    keep_size: int = DEFAULT_KEEP_SIZE
    break_size: int = DEFAULT_BREAK_SIZE
    mode: BenchMode = BenchMode.NONE
    interval: Optional[int] = None
    seed: Optional[int] = None
    store: Optional[str] = None

    def resolved(self) -> "Configuration":
        """
        Clamp every field into its valid range.

        Non-positive sizes fall back to their defaults, keep size is capped at
        the test size, a break size outside [0, keep size] is dropped to 0 and
        the reporting interval is derived from the test size. An interval that
        was given but is not positive means 1% of the test size.
        """
        width = self.width if self.width > 0 else DEFAULT_WIDTH
        height = self.height if self.height > 0 else DEFAULT_HEIGHT
        test_size = self.test_size if self.test_size > 0 else DEFAULT_TEST_SIZE

        keep_size = self.keep_size if self.keep_size > 0 else DEFAULT_KEEP_SIZE
        keep_size = min(keep_size, test_size)

        break_size = self.break_size
        if break_size < 0 or break_size > keep_size:
            break_size = 0

        requested = self.interval
        if requested is not None and requested <= 0:
            requested = test_size // MIN_SAMPLES

        return replace(
            self,
            width=width,
            height=height,
            test_size=test_size,
            keep_size=keep_size,
            break_size=break_size,
            interval=resolve_interval(test_size, requested or 0),
        )
