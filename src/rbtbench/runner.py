"""
rbtbench benchmark modes

Each mode times one kind of store operation in batches of `interval`
keys and writes one CSV row per batch to the primary output:

    node_count,ns_per_insertion
    1000,412
    2000,455
    ...

Progress and hit counts go to the diagnostic console only, so the CSV
stream can be redirected on its own.
"""

import csv
import sys
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, TextIO

from rich.console import Console

from .config import BenchMode
from .store import OrderedKeyStore
from .timer import DurationTimer
from .workload import Workload


CSV_HEADERS = {
    BenchMode.INSERT: ("node_count", "ns_per_insertion"),
    BenchMode.REMOVE: ("node_count", "ns_per_removal"),
    BenchMode.SEARCH: ("iterations", "ns_per_search"),
    BenchMode.INCREMENTAL_SEARCH: ("node_count", "ns_per_search"),
    BenchMode.DECREMENTAL_SEARCH: ("node_count", "ns_per_search"),
}

# Modes that measure against a fully populated store
PREPOPULATED = (BenchMode.REMOVE, BenchMode.SEARCH, BenchMode.DECREMENTAL_SEARCH)

SEARCH_MODES = (
    BenchMode.SEARCH,
    BenchMode.INCREMENTAL_SEARCH,
    BenchMode.DECREMENTAL_SEARCH,
)


@dataclass
class SampleRow:
    """One CSV sample."""
    count: int
    ns_per_op: int


@dataclass
class BenchmarkResult:
    """Rows emitted by one benchmark run."""
    mode: BenchMode
    rows: List[SampleRow] = field(default_factory=list)
    found: Optional[int] = None


class BenchmarkRunner:
    """Runs a single benchmark mode against one store."""

    def __init__(
        self,
        store: OrderedKeyStore,
        workload: Workload,
        interval: int,
        out: Optional[TextIO] = None,
        console: Optional[Console] = None,
    ):
        if interval < 1:
            raise ValueError(f"Interval must be positive, got {interval}")
        self.store = store
        self.workload = workload
        self.interval = interval
        self.out = out or sys.stdout
        self.console = console or Console(stderr=True)
        self.timer = DurationTimer()
        self.found = 0

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _batches(self):
        """(start, end) pairs covering 0..test_size, last one clamped."""
        size = self.workload.size
        for start in range(0, size, self.interval):
            yield start, min(start + self.interval, size)

    def _search_all(self, keys: Sequence[int]) -> int:
        search = self.store.search
        hits = 0
        for key in keys:
            node = search(key)
            if node is not None and node.key == key:
                hits += 1
        return hits

    def _insert_all(self, keys: Sequence[int]):
        insert = self.store.insert
        for key in keys:
            insert(key)

    def _delete_all(self, keys: Sequence[int]):
        delete_key = self.store.delete_key
        for key in keys:
            delete_key(key)

    def _populate(self):
        size = self.workload.size
        self.console.print(f"Inserting {size} random keys... ", end="")
        self._insert_all(self.workload.insertion)
        self.console.print("done.")

    # =========================================================================
    # BATCH MEASUREMENTS
    # =========================================================================

    def _measure_insert(self, start: int, end: int) -> int:
        keys = self.workload.insertion[start:end]
        self.timer.start()
        self._insert_all(keys)
        return self.timer.stop()

    def _measure_remove(self, start: int, end: int) -> int:
        keys = self.workload.removal[start:end]
        self.timer.start()
        self._delete_all(keys)
        return self.timer.stop()

    def _measure_search(self, start: int, end: int) -> int:
        keys = self.workload.search[start:end]
        self.timer.start()
        self.found += self._search_all(keys)
        return self.timer.stop()

    def _measure_incremental_search(self, start: int, end: int) -> int:
        insertion = self.workload.insertion
        self._insert_all(insertion[start:end])

        # Near-uniform sample of the keys inserted so far
        inserted = end
        sample = [insertion[s % inserted] for s in self.workload.search[start:end]]

        self.timer.start()
        self.found += self._search_all(sample)
        return self.timer.stop()

    def _measure_decremental_search(self, start: int, end: int) -> int:
        keys = self.workload.removal[start:end]
        self.timer.start()
        self.found += self._search_all(keys)
        elapsed = self.timer.stop()
        self._delete_all(keys)
        return elapsed

    # =========================================================================
    # RUN
    # =========================================================================

    def run(self, mode: BenchMode) -> BenchmarkResult:
        """
        Run one benchmark mode.

        Args:
            mode: Access pattern to measure; NONE does nothing

        Returns:
            The emitted rows and, for search modes, the number of hits
        """
        result = BenchmarkResult(mode=mode)
        if mode == BenchMode.NONE:
            return result

        measure = {
            BenchMode.INSERT: self._measure_insert,
            BenchMode.REMOVE: self._measure_remove,
            BenchMode.SEARCH: self._measure_search,
            BenchMode.INCREMENTAL_SEARCH: self._measure_incremental_search,
            BenchMode.DECREMENTAL_SEARCH: self._measure_decremental_search,
        }[mode]

        if mode in PREPOPULATED:
            self._populate()

        size = self.workload.size
        self.found = 0
        self.console.print(
            f"Generating CSV output for {mode.value} of {size} keys "
            f"(interval {self.interval})... ",
            end="",
        )

        writer = csv.writer(self.out, lineterminator="\n")
        writer.writerow(CSV_HEADERS[mode])

        for start, end in self._batches():
            elapsed = measure(start, end)
            row = SampleRow(count=end, ns_per_op=elapsed // self.interval)
            result.rows.append(row)
            writer.writerow((row.count, row.ns_per_op))

        if mode in SEARCH_MODES:
            result.found = self.found
            self.console.print(f"{self.found} found.")
        else:
            self.console.print("done.")

        return result
