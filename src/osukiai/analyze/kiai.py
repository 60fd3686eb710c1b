"""
Kiai interval detection and merging.

Kiai state is carried by bit 0 of the effects field on every timing point,
red or green. Intervals open on an off->on transition and close on the next
on->off transition; a span still active after the last point is open-ended.
"""

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

from osukiai.analyze.timing import TimingPoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Interval:
    """A time span. end_ms is None when it runs to the end of the track."""

    start_ms: int
    end_ms: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.end_ms is None


def extract_kiai_intervals(points: Sequence[TimingPoint]) -> List[Interval]:
    """
    Walk sorted timing points and emit raw kiai intervals.

    Args:
        points: Timing points sorted by time

    Returns:
        Raw (unmerged) intervals in time order
    """
    intervals = []
    prev: Optional[bool] = None
    start: Optional[int] = None

    for tp in points:
        kiai = tp.is_kiai

        if prev is None:
            prev = kiai
            if kiai:
                start = tp.time_ms
            continue

        if kiai == prev:
            continue

        if kiai:
            start = tp.time_ms
        else:
            if start is not None:
                intervals.append(Interval(start_ms=start, end_ms=tp.time_ms))
            start = None
        prev = kiai

    if prev and start is not None:
        intervals.append(Interval(start_ms=start, end_ms=None))

    return intervals


def merge_kiai_intervals(
    intervals: Sequence[Interval], threshold_ms: int = 500
) -> List[Interval]:
    """
    Merge intervals whose gap is at most threshold_ms.

    The gap is ``next.start_ms - last.end_ms``; a merge takes the later
    interval's end, which may be None. Input intervals are not modified.

    Args:
        intervals: Raw intervals in time order
        threshold_ms: Largest gap (inclusive) that is bridged. Any int is
                      accepted here; analyze_text() rejects negative values

    Returns:
        Merged intervals
    """
    if not intervals:
        return []

    merged = [intervals[0]]

    for current in intervals[1:]:
        last = merged[-1]

        # NOTE: anything after an open-ended interval is dropped, not merged.
        # Kept for compatibility with existing results even though extending
        # or restarting may be the better behavior.
        if last.end_ms is None:
            logger.debug(
                f"Dropping kiai interval at {current.start_ms}ms after open-ended interval"
            )
            continue

        gap = current.start_ms - last.end_ms
        if gap <= threshold_ms:
            merged[-1] = replace(last, end_ms=current.end_ms)
        else:
            merged.append(current)

    return merged
