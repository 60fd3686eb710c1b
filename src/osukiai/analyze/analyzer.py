"""
Beatmap analysis entry points.

analyze_text() runs the full pipeline on .osu text:
1. Parse [TimingPoints] into sorted records
2. Build BPM sections from red points
3. Build raw kiai intervals and merge small gaps
4. Scan [HitObjects] for the last hit object time
5. Close an open-ended kiai interval at the last hit object
"""

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Tuple, Optional, Union

from osukiai.analyze.bpm import BpmSection, extract_bpm_sections
from osukiai.analyze.hitobjects import get_last_hit_object_time
from osukiai.analyze.kiai import Interval, extract_kiai_intervals, merge_kiai_intervals
from osukiai.analyze.sections import HIT_OBJECTS, TIMING_POINTS, extract_section_lines
from osukiai.analyze.timing import parse_timing_points

logger = logging.getLogger(__name__)

DEFAULT_MERGE_THRESHOLD_MS = 500


@dataclass(frozen=True)
class AnalysisResult:
    """Immutable container for one beatmap analysis."""

    bpm_sections: Tuple[BpmSection, ...] = field(default_factory=tuple)
    kiai_intervals: Tuple[Interval, ...] = field(default_factory=tuple)
    last_hit_object_ms: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable view of the result."""
        return {
            "bpm_sections": [
                {"start_ms": s.start_ms, "end_ms": s.end_ms, "bpm": s.bpm}
                for s in self.bpm_sections
            ],
            "kiai_intervals": [
                {"start_ms": iv.start_ms, "end_ms": iv.end_ms}
                for iv in self.kiai_intervals
            ],
            "last_hit_object_ms": self.last_hit_object_ms,
        }


def analyze_text(
    osu_text: str, merge_threshold_ms: int = DEFAULT_MERGE_THRESHOLD_MS
) -> AnalysisResult:
    """
    Analyze the raw text of a .osu file.

    Args:
        osu_text: Full file contents
        merge_threshold_ms: Largest gap between kiai spans that is merged

    Returns:
        AnalysisResult

    Raises:
        TypeError: If osu_text is None or not a string
        ValueError: If merge_threshold_ms is negative
    """
    if osu_text is None:
        raise TypeError("osu_text must not be None")
    if not isinstance(osu_text, str):
        raise TypeError(f"osu_text must be str, got {type(osu_text).__name__}")
    if merge_threshold_ms < 0:
        raise ValueError(f"merge_threshold_ms must be >= 0, got {merge_threshold_ms}")

    points = parse_timing_points(extract_section_lines(osu_text, TIMING_POINTS))
    bpm_sections = extract_bpm_sections(points)
    kiai_intervals = merge_kiai_intervals(
        extract_kiai_intervals(points), merge_threshold_ms
    )

    last_time = get_last_hit_object_time(extract_section_lines(osu_text, HIT_OBJECTS))

    if last_time is not None:
        kiai_intervals = [
            replace(iv, end_ms=last_time) if iv.end_ms is None else iv
            for iv in kiai_intervals
        ]

    logger.debug(
        f"Analyzed {len(points)} timing points: {len(bpm_sections)} BPM section(s), "
        f"{len(kiai_intervals)} kiai interval(s), last hit object: {last_time}"
    )

    return AnalysisResult(
        bpm_sections=tuple(bpm_sections),
        kiai_intervals=tuple(kiai_intervals),
        last_hit_object_ms=last_time,
    )


def analyze_file(
    file_path: Union[str, Path], merge_threshold_ms: int = DEFAULT_MERGE_THRESHOLD_MS
) -> AnalysisResult:
    """
    Read a .osu file from disk and analyze it.

    Args:
        file_path: Path to the .osu file
        merge_threshold_ms: Largest gap between kiai spans that is merged

    Returns:
        AnalysisResult

    Raises:
        ValueError: If file_path is empty
        FileNotFoundError: If the file does not exist
    """
    if not file_path:
        raise ValueError("file_path is None or empty")

    path = Path(file_path)
    # utf-8-sig drops the BOM some editors write
    text = path.read_text(encoding="utf-8-sig")
    result = analyze_text(text, merge_threshold_ms)

    logger.info(
        f"✅ {path.name}: {len(result.bpm_sections)} BPM section(s), "
        f"{len(result.kiai_intervals)} kiai interval(s)"
    )
    return result


def ms_to_time_string(ms: int) -> str:
    """
    Format milliseconds as ``m:ss.mmm`` (minutes are not padded).

    Raises:
        ValueError: If ms is negative
    """
    if ms < 0:
        raise ValueError(f"ms must be >= 0, got {ms}")

    minutes = ms // 60000
    seconds = (ms % 60000) // 1000
    millis = ms % 1000
    return f"{minutes}:{seconds:02d}.{millis:03d}"
