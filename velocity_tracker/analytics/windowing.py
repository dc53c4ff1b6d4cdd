from typing import List, Sequence

from .types import SprintRecord


def recent_window(records: Sequence[SprintRecord], window_size: int) -> List[SprintRecord]:
    """
    Most recent ``window_size`` records, newest first.

    Sorting uses ``start_date`` only and works on a copy. Records sharing a
    start date keep their input order.
    """
    ordered = sorted(records, key=lambda record: record.start_date, reverse=True)
    return ordered[:max(0, min(window_size, len(ordered)))]


def chronological_window(records: Sequence[SprintRecord], window_size: int) -> List[SprintRecord]:
    """Same records as ``recent_window`` but oldest first, for trend fitting."""
    return list(reversed(recent_window(records, window_size)))
