"""
rbtbench regression suite

The default run: one fixed sequence of store operations with timings,
two structural checkpoints and an optional corruption step.

    1-2   random insertion, verify
    3-4   random and sequential search
    5-8   in-order / breadth-first traversals, tracked and fast
    9-10  destroy, recreate and repopulate
    11-14 sequential removal and insertion, back to a random tree
    15    random removal down to keep_size keys
    16    table, snapshot, verify
    17    paint break_size random nodes red, verify again
    18    destroy

A failed checkpoint raises VerificationError. Surviving corruption in
stage 17 is only reported.
"""

import random
import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, TextIO

from rich.console import Console

from .config import Configuration
from .report import ReportFormatter
from .store import (
    FaultInjectable,
    NullPolicy,
    OrderedKeyStore,
    StoreFactory,
    noop_callback,
)
from .timer import DurationTimer, per_second
from .workload import Workload, wall_clock_seed


# =============================================================================
# RESULTS
# =============================================================================

@dataclass
class RegressionResult:
    """Outcome of a full regression run."""
    report: ReportFormatter
    stage_counts: Dict[str, int] = field(default_factory=dict)
    random_hits: int = 0
    sequential_hits: int = 0
    painted: int = 0
    corruption_detected: Optional[bool] = None


class VerificationError(Exception):
    """Store failed its own structural self-check."""

    def __init__(self, stage: str, snapshot: str = ""):
        self.stage = stage
        self.snapshot = snapshot
        super().__init__(
            f"Store failed verification after {stage}, "
            f"node {stage} implementation is broken"
        )


# =============================================================================
# SUITE
# =============================================================================

class RegressionSuite:
    """Runs the fixed regression choreography against fresh stores."""

    def __init__(
        self,
        store_factory: StoreFactory,
        workload: Workload,
        config: Configuration,
        out: Optional[TextIO] = None,
        console: Optional[Console] = None,
        rng: Optional[random.Random] = None,
    ):
        self.store_factory = store_factory
        self.workload = workload
        self.config = config
        self.out = out or sys.stdout
        self.console = console or Console(stderr=True)
        self.rng = rng or random.Random(wall_clock_seed())
        self.timer = DurationTimer()
        self.report = ReportFormatter()
        self.store: Optional[OrderedKeyStore] = None
        self.result = RegressionResult(report=self.report)

    # =========================================================================
    # HELPERS
    # =========================================================================

    @property
    def size(self) -> int:
        return self.workload.size

    @contextmanager
    def _step(self, message: str):
        self.console.print(f"{message}... ", end="")
        yield
        self.console.print("done.")

    def _record_count(self, stage: str):
        self.result.stage_counts[stage] = self.store.count

    def _insert(self, keys: Sequence[int]):
        insert = self.store.insert
        for key in keys:
            insert(key)

    def _delete(self, keys: Sequence[int]):
        delete_key = self.store.delete_key
        for key in keys:
            delete_key(key)

    def _search(self, keys: Sequence[int]) -> int:
        search = self.store.search
        found = 0
        for key in keys:
            node = search(key)
            if node is not None and node.key == key:
                found += 1
        return found

    def _snapshot(self) -> str:
        snapshot = self.store.render(
            self.config.width, self.config.height, NullPolicy.NO_NULL
        )
        self.out.write(f"{snapshot}\n\n")
        return snapshot

    def _checkpoint(self, stage: str) -> int:
        """Chatty verification that aborts the run on failure."""
        self.console.print("Verifying store... ", end="")
        self.timer.start()
        valid = self.store.verify(chatty=True)
        elapsed = self.timer.stop()
        if not valid:
            self.console.print("[red]FAILED[/red]")
            raise VerificationError(stage, self._snapshot())
        self.console.print("[green]✓[/green] valid.")
        return elapsed

    def _add_per_key(self, label: str, count: int, elapsed: int):
        self.report.add(f"{label}, count {count}", elapsed // max(count, 1), "ns/key")

    def _add_rate(self, label: str, elapsed: int, unit: str = "nodes/s"):
        self.report.add(f"{label}, rate", per_second(self.size, elapsed), unit)

    # =========================================================================
    # STAGES
    # =========================================================================

    def insert_random(self):
        n = self.size
        with self._step(f"Inserting {n} random keys"):
            self.timer.start()
            self._insert(self.workload.insertion)
            elapsed = self.timer.stop()
        self._add_per_key("Insertion", n, elapsed)
        self._add_rate("Insertion", elapsed)
        self._record_count("insert_random")

    def verify_insertion(self):
        elapsed = self._checkpoint("insertion")
        self.report.add("Verification, rate", per_second(self.size, elapsed), "nodes/s")

    def search_random(self):
        n = self.size
        self.console.print(f"Finding all {n} keys in random order... ", end="")
        self.timer.start()
        found = self._search(self.workload.search)
        elapsed = self.timer.stop()
        self.console.print(f"{found} found.")
        self.result.random_hits = found
        self._add_per_key("Search", n, elapsed)
        self._add_rate("Search", elapsed, "hit/s")

    def search_sequential(self):
        n = self.size
        self.console.print(f"Finding all {n} keys in sequential order... ", end="")
        self.timer.start()
        found = self._search(range(n))
        elapsed = self.timer.stop()
        self.console.print(f"{found} found.")
        self.result.sequential_hits = found
        self._add_per_key("Seq search", n, elapsed)
        self._add_rate("Seq search", elapsed, "hit/s")

    def traverse(self):
        walks = (
            ("in-order traversal with height and black height tracking",
             self.store.in_order_track, "In-order, with tracking"),
            ("in-order traversal without height and black height tracking",
             self.store.in_order, "In-order, fast"),
            ("breadth-first traversal with height and black height tracking",
             self.store.breadth_first_track, "Breadth first, tracking"),
            ("breadth-first traversal without height and black height tracking",
             self.store.breadth_first, "Breadth first, fast"),
        )
        for description, walk, label in walks:
            with self._step(f"Performing {description}"):
                self.timer.start()
                walk(noop_callback, None)
                elapsed = self.timer.stop()
            self._add_rate(label, elapsed)

    def destroy_and_repopulate(self):
        with self._step("Destroying store"):
            self.timer.start()
            self.store.destroy()
            elapsed = self.timer.stop()
        self.store = None
        self._add_rate("Destruction", elapsed)

        self.store = self.store_factory()
        with self._step(f"Re-adding {self.size} keys in random order"):
            self._insert(self.workload.insertion)
        self._record_count("repopulate")

    def sequential_cycle(self):
        n = self.size
        keys = range(n)

        with self._step(f"Removing all {n} keys in sequential order"):
            self.timer.start()
            self._delete(keys)
            elapsed = self.timer.stop()
        self._add_per_key("Seq removal", n, elapsed)
        self._add_rate("Seq removal", elapsed)
        self._record_count("sequential_removal")

        with self._step(f"Re-adding {n} keys in sequential order"):
            self.timer.start()
            self._insert(keys)
            elapsed = self.timer.stop()
        self._add_per_key("Seq insertion", n, elapsed)
        self._add_rate("Seq insertion", elapsed)
        self._record_count("sequential_insertion")

        with self._step(f"Removing all {n} keys in sequential order again"):
            self._delete(keys)
        self._record_count("sequential_removal_again")

        with self._step(f"Re-adding {n} keys in random order"):
            self._insert(self.workload.insertion)
        self._record_count("random_reinsertion")

    def remove_to_keep_size(self):
        n = self.size
        keep = self.config.keep_size
        if keep >= n:
            return

        removed = n - keep
        doomed = [key for key in self.workload.removal if key >= keep]
        with self._step(f"Removing {removed} keys in random order to leave {keep} keys"):
            self.timer.start()
            self._delete(doomed)
            elapsed = self.timer.stop()
        self._add_per_key("Removal", removed, elapsed)
        self._add_rate("Removal", elapsed)
        self._record_count("keep_removal")

    def verify_removal(self):
        self.out.write(f"\nTest results:\n\n{self.report.render()}\n\n")
        self.console.print(f"Final store with {self.store.count} nodes:")
        self._snapshot()
        self._checkpoint("removal")

    def inject_faults(self):
        breaks = self.config.break_size
        if breaks <= 0:
            return

        if not isinstance(self.store, FaultInjectable):
            self.console.print(
                "[yellow]Store has no fault injection support, skipping corruption[/yellow]"
            )
            return

        keep = self.config.keep_size
        painted = 0
        with self._step(f"\nPainting {breaks} random nodes red in attempt to invalidate store"):
            for _ in range(breaks):
                node = self.store.search(self.rng.randrange(keep))
                if node is not None:
                    self.store.force_red(node)
                    painted += 1
        self.result.painted = painted

        self.console.print(f"\nMost likely broken store with {self.store.count} nodes:")
        self._snapshot()

        valid = self.store.verify(chatty=True)
        self.result.corruption_detected = not valid
        if valid:
            self.console.print(
                f"[yellow]Store still valid after painting {painted} nodes red, "
                f"corruption went undetected[/yellow]"
            )
        else:
            self.console.print("[green]✓[/green] Corruption detected by verification.")

    # =========================================================================
    # RUN
    # =========================================================================

    def run(self) -> RegressionResult:
        """
        Run every stage in order.

        Raises:
            VerificationError: The store failed a structural checkpoint
        """
        self.store = self.store_factory()
        try:
            self.insert_random()
            self.verify_insertion()
            self.search_random()
            self.search_sequential()
            self.traverse()
            self.destroy_and_repopulate()
            self.sequential_cycle()
            self.remove_to_keep_size()
            self.verify_removal()
            self.inject_faults()
            self._record_count("final")
        finally:
            self.cleanup()
        return self.result

    def cleanup(self):
        """Destroy the store and drop the key arrays."""
        with self._step("Cleaning up"):
            if self.store is not None:
                self.store.destroy()
                self.store = None
            self.workload.release()
