"""Randomized key workloads."""

import random
import time
from dataclasses import dataclass
from typing import List, Optional


def wall_clock_seed() -> int:
    """Seconds plus microseconds of the current wall-clock time."""
    now = time.time()
    seconds = int(now)
    return seconds + int((now - seconds) * 1_000_000)


@dataclass
class Workload:
    """The three key orders used by one run."""
    insertion: List[int]
    removal: List[int]
    search: List[int]

    @property
    def size(self) -> int:
        return len(self.insertion)

    def release(self):
        self.insertion = []
        self.removal = []
        self.search = []


class WorkloadGenerator:
    """
    Fisher-Yates permutations of [0, n).

    The generator owns its random source. Without one it is seeded once,
    either from `seed` or from the wall clock. Runs are not meant to be
    reproducible unless a seed is given.
    """

    def __init__(self, rng: Optional[random.Random] = None, seed: Optional[int] = None):
        if rng is None:
            rng = random.Random(wall_clock_seed() if seed is None else seed)
        self.rng = rng

    def generate(self, n: int) -> List[int]:
        """Uniformly random permutation of 0..n-1."""
        if n <= 0:
            return []

        keys = list(range(n))
        randrange = self.rng.randrange
        for i in range(n):
            j = randrange(i, n)
            keys[i], keys[j] = keys[j], keys[i]
        return keys

    def workload(self, n: int) -> Workload:
        """Independent insertion, removal and search orders."""
        return Workload(
            insertion=self.generate(n),
            removal=self.generate(n),
            search=self.generate(n),
        )
