"""
BPM Sections from uninherited (red) timing points.

Each red point starts a tempo region that runs until the next red point.
Values are taken verbatim from the file: bpm = 60000 / beatLength, no
rounding or half/double-time normalization.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from osukiai.analyze.timing import TimingPoint

logger = logging.getLogger(__name__)

MS_PER_MINUTE = 60000.0


@dataclass(frozen=True)
class BpmSection:
    """A tempo region. end_ms is None when it runs to the end of the track."""

    start_ms: int
    end_ms: Optional[int]
    bpm: float


def beat_length_to_bpm(beat_length_ms: float) -> float:
    """Convert a beat length in milliseconds to beats per minute."""
    return MS_PER_MINUTE / beat_length_ms


def extract_bpm_sections(points: Sequence[TimingPoint]) -> List[BpmSection]:
    """
    Build contiguous BPM sections from sorted timing points.

    Inherited (green) points are ignored. A red point with a beat length of
    exactly 0 produces no section, but still closes the section before it.

    Args:
        points: Timing points sorted by time

    Returns:
        BPM sections in ascending start order
    """
    reds = [tp for tp in points if tp.is_uninherited]

    sections = []
    for i, tp in enumerate(reds):
        if tp.beat_length_ms == 0.0:
            logger.debug(f"Ignoring red point at {tp.time_ms}ms with zero beat length")
            continue

        end_ms = reds[i + 1].time_ms if i + 1 < len(reds) else None
        sections.append(
            BpmSection(
                start_ms=tp.time_ms,
                end_ms=end_ms,
                bpm=beat_length_to_bpm(tp.beat_length_ms),
            )
        )

    return sections
