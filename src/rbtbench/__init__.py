"""
rbtbench — ordered-key store harness

Generate. Benchmark. Verify. Break.
"""

__version__ = "0.1.0"

from .config import BenchMode, Configuration
from .interval import resolve_interval
from .regression import RegressionResult, RegressionSuite, VerificationError
from .report import ReportFormatter, ReportRow
from .runner import BenchmarkResult, BenchmarkRunner, SampleRow
from .store import (
    Direction,
    FaultInjectable,
    NullPolicy,
    OrderedKeyStore,
    StoreLoadError,
    StoreNode,
    load_store_factory,
)
from .timer import DurationTimer, per_second
from .workload import Workload, WorkloadGenerator

__all__ = [
    "BenchMode",
    "BenchmarkResult",
    "BenchmarkRunner",
    "Configuration",
    "Direction",
    "DurationTimer",
    "FaultInjectable",
    "NullPolicy",
    "OrderedKeyStore",
    "RegressionResult",
    "RegressionSuite",
    "ReportFormatter",
    "ReportRow",
    "SampleRow",
    "StoreLoadError",
    "StoreNode",
    "VerificationError",
    "Workload",
    "WorkloadGenerator",
    "load_store_factory",
    "per_second",
    "resolve_interval",
]
