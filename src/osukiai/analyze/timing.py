"""
Timing point parsing.

Record layout (comma separated, at least 8 fields):
    time,beatLength,meter,sampleSet,sampleIndex,volume,uninherited,effects

- time and beatLength are mandatory: the line is dropped if either is bad
- the remaining six fields default to 0 when unparsable
- output is stable-sorted by time
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from osukiai.analyze.numbers import parse_float, parse_int

logger = logging.getLogger(__name__)

MIN_TIMING_FIELDS = 8
KIAI_BIT = 1


@dataclass(frozen=True)
class TimingPoint:
    """One parsed [TimingPoints] record."""

    time_ms: int
    beat_length_ms: float
    meter: int = 0
    sample_set: int = 0
    sample_index: int = 0
    volume: int = 0
    uninherited: int = 0  # raw flag, 1 = red line
    effects: int = 0  # bitmask, bit 0 = kiai

    @property
    def is_uninherited(self) -> bool:
        return self.uninherited == 1

    @property
    def is_kiai(self) -> bool:
        return (self.effects & KIAI_BIT) != 0


def parse_timing_point(line: str) -> Optional[TimingPoint]:
    """
    Parse a single timing point line.

    Args:
        line: Stripped line from the [TimingPoints] section

    Returns:
        TimingPoint, or None if the line is malformed
    """
    fields = line.split(",")
    if len(fields) < MIN_TIMING_FIELDS:
        return None

    time_ms = parse_int(fields[0])
    if time_ms is None:
        return None

    beat_length = parse_float(fields[1])
    if beat_length is None:
        return None

    meter, sample_set, sample_index, volume, uninherited, effects = (
        parse_int(field, 0) for field in fields[2:8]
    )

    return TimingPoint(
        time_ms=time_ms,
        beat_length_ms=beat_length,
        meter=meter,
        sample_set=sample_set,
        sample_index=sample_index,
        volume=volume,
        uninherited=uninherited,
        effects=effects,
    )


def parse_timing_points(lines: Iterable[str]) -> List[TimingPoint]:
    """
    Parse [TimingPoints] lines into records sorted by time.

    Args:
        lines: Section lines from extract_section_lines()

    Returns:
        Timing points in ascending time order (file order kept for ties)
    """
    points = []
    skipped = 0

    for line in lines:
        point = parse_timing_point(line)
        if point is None:
            skipped += 1
            logger.debug(f"Skipping malformed timing point: {line!r}")
            continue
        points.append(point)

    if skipped:
        logger.debug(f"Skipped {skipped} malformed timing point line(s)")

    # sorted() is stable
    return sorted(points, key=lambda tp: tp.time_ms)
