"""Last hit object time from the [HitObjects] section."""

import logging
from typing import Optional, Sequence

from osukiai.analyze.numbers import parse_int

logger = logging.getLogger(__name__)

MIN_HIT_OBJECT_FIELDS = 3
TIME_FIELD = 2


def get_last_hit_object_time(lines: Sequence[str]) -> Optional[int]:
    """
    Return the latest hit object time in milliseconds.

    Lines with fewer than three fields or an unparsable time are skipped.
    The running maximum starts at 0, so a section of only negative or
    unparsable times still reports 0.

    Args:
        lines: Section lines from extract_section_lines()

    Returns:
        Latest time, or None when the section has no lines at all
    """
    if not lines:
        return None

    last = 0
    for line in lines:
        fields = line.split(",")
        if len(fields) < MIN_HIT_OBJECT_FIELDS:
            continue

        time_ms = parse_int(fields[TIME_FIELD])
        if time_ms is not None and time_ms > last:
            last = time_ms

    return last
