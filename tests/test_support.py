"""Tests for the timer, report table, store loading and the traversal example."""

import io

import pytest

from rbtbench import (
    DurationTimer,
    FaultInjectable,
    OrderedKeyStore,
    ReportFormatter,
    StoreLoadError,
    load_store_factory,
    per_second,
)
from rbtbench.example import run_example

from conftest import BrokenStore, ListStore, PlainStore


class TestDurationTimer:
    """Monotonic span measurement."""

    def test_start_stop(self):
        timer = DurationTimer()
        timer.start()
        assert timer.running
        elapsed = timer.stop()
        assert elapsed >= 0
        assert timer.elapsed == elapsed
        assert not timer.running

    def test_stop_without_start(self):
        with pytest.raises(RuntimeError, match="not started"):
            DurationTimer().stop()

    def test_no_overlapping_spans(self):
        timer = DurationTimer()
        timer.start()
        with pytest.raises(RuntimeError, match="already running"):
            timer.start()

    def test_context_manager(self):
        with DurationTimer() as timer:
            sum(range(1000))
        assert timer.elapsed > 0

    def test_nested_instances(self):
        """Independent timers can nest."""
        outer, inner = DurationTimer(), DurationTimer()
        outer.start()
        inner.start()
        inner_ns = inner.stop()
        outer_ns = outer.stop()
        assert outer_ns >= inner_ns

    def test_per_second(self):
        assert per_second(1000, 1_000_000_000) == 1000.0
        assert per_second(10, 500_000_000) == 20.0

    def test_per_second_zero_elapsed(self):
        """Zero durations count as one nanosecond."""
        assert per_second(5, 0) == 5_000_000_000.0


class TestReportFormatter:
    """Fixed-width result table."""

    def test_render(self):
        report = ReportFormatter()
        report.add("Insertion, count 1000", 412, "ns/key")
        report.add("Insertion, rate", 2427184.466, "nodes/s")

        lines = report.render().splitlines()

        assert lines[0] == "+---------------------------------+-------------+---------+"
        assert lines[1] == "| Test                            | result      | unit    |"
        assert lines[3] == "| Insertion, count 1000           | 412         | ns/key  |"
        assert lines[4] == "| Insertion, rate                 | 2427184     | nodes/s |"
        assert lines[-1] == lines[0]
        assert len({len(line) for line in lines}) == 1

    def test_empty_report(self):
        """Header and borders only."""
        report = ReportFormatter()
        assert len(report) == 0
        assert len(report.render().splitlines()) == 4

    def test_to_dicts(self):
        report = ReportFormatter()
        report.add("Search, rate", 10.5, "hit/s")
        assert report.to_dicts() == [{"metric": "Search, rate", "value": 10.5, "unit": "hit/s"}]


class TestStoreContract:
    """Protocols and factory loading."""

    def test_fake_store_satisfies_protocol(self):
        assert isinstance(ListStore(), OrderedKeyStore)

    def test_fault_injection_capability(self):
        assert isinstance(ListStore(), FaultInjectable)
        assert not isinstance(PlainStore(), FaultInjectable)

    def test_load_factory(self):
        factory = load_store_factory("collections:OrderedDict")
        assert callable(factory)

    def test_load_dotted_attribute(self):
        factory = load_store_factory("rbtbench.workload:WorkloadGenerator.generate")
        assert factory.__name__ == "generate"

    @pytest.mark.parametrize("path", ["", "collections", "collections:", ":OrderedDict"])
    def test_malformed_path(self, path):
        with pytest.raises(StoreLoadError, match="expected"):
            load_store_factory(path)

    def test_missing_module(self):
        with pytest.raises(StoreLoadError, match="Cannot import"):
            load_store_factory("no_such_module_rbtbench:Tree")

    def test_missing_attribute(self):
        with pytest.raises(StoreLoadError, match="no attribute"):
            load_store_factory("collections:NoSuchTree")

    def test_not_callable(self):
        with pytest.raises(StoreLoadError, match="not callable"):
            load_store_factory("rbtbench.interval:DEFAULT_INTERVAL")


class TestExample:
    """Traversal walkthrough."""

    def test_traversals(self):
        out = io.StringIO()
        store = ListStore()
        outcome = run_example(store, out=out)

        assert outcome["valid"] is True
        assert outcome["in_order"] == list(range(13))
        assert sorted(outcome["breadth_first"]) == list(range(13))
        assert outcome["breadth_first"][0] == 6
        assert outcome["range_asc"] == [4, 5, 6, 7, 8]
        assert outcome["range_asc_count"] == 5
        assert outcome["range_desc"] == [9, 8, 7, 6, 5]
        assert outcome["range_desc_count"] == 5
        assert store.destroyed

    def test_output(self):
        out = io.StringIO()
        run_example(ListStore(), out=out)
        text = out.getvalue()

        assert "In order: 0 1 2 3 4 5 6 7 8 9 10 11 12\n" in text
        assert "Between 4 (inclusive) and 9 (exclusive): 4 5 6 7 8, in range: 5 nodes" in text
        assert "Between 4 (exclusive) and 9 (inclusive): 9 8 7 6 5, in range: 5 nodes" in text

    def test_invalid_store_reported(self):
        outcome = run_example(BrokenStore(), out=io.StringIO())
        assert outcome["valid"] is False
