"""Reporting interval resolution."""

DEFAULT_INTERVAL = 1000
MIN_SAMPLES = 100
MIN_INTERVAL = 2


def resolve_interval(test_size: int, requested: int = 0) -> int:
    """
    Batch size for benchmark sampling.

    Falls back to DEFAULT_INTERVAL when nothing was requested, shrinks to
    1% of the test size when that would give fewer than MIN_SAMPLES rows,
    and never goes below MIN_INTERVAL.
    """
    interval = requested if requested and requested > 0 else DEFAULT_INTERVAL

    if test_size // interval < MIN_SAMPLES:
        interval = test_size // MIN_SAMPLES

    if interval < MIN_INTERVAL:
        interval = MIN_INTERVAL

    return interval
