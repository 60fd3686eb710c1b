"""
Section extraction for the .osu format.

A section starts at a ``[Name]`` header at the beginning of a line and runs
until the next line starting with ``[`` or the end of the text.
"""

import logging
import re
from typing import List

logger = logging.getLogger(__name__)

TIMING_POINTS = "TimingPoints"
HIT_OBJECTS = "HitObjects"

_LINE_BREAK_RE = re.compile(r"\r\n|\n")


def extract_section_lines(text: str, section: str) -> List[str]:
    """
    Return the data lines of one named section.

    Lines are stripped; blank lines and ``//`` comments are dropped. Only the
    first occurrence of the section is read.

    Args:
        text: Full .osu file text
        section: Section name without brackets (case-sensitive)

    Returns:
        Ordered list of lines, empty if the section is absent
    """
    pattern = r"^\[" + re.escape(section) + r"\](.*?)(?=^\[|\Z)"
    match = re.search(pattern, text, re.MULTILINE | re.DOTALL)
    if not match:
        logger.debug(f"Section [{section}] not found")
        return []

    lines = []
    for raw in _LINE_BREAK_RE.split(match.group(1)):
        line = raw.strip()
        if not line or line.startswith("//"):
            continue
        lines.append(line)

    return lines
