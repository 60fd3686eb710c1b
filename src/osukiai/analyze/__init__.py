"""
Beatmap Analysis Module: derive tempo and highlight spans from .osu text.

- Pure functions, no I/O except analyze_file()
- Reads only [TimingPoints] and [HitObjects]
- Malformed record lines are skipped, never fatal
"""

from osukiai.analyze.analyzer import (
    DEFAULT_MERGE_THRESHOLD_MS,
    AnalysisResult,
    analyze_file,
    analyze_text,
    ms_to_time_string,
)
from osukiai.analyze.bpm import BpmSection, extract_bpm_sections
from osukiai.analyze.kiai import Interval, extract_kiai_intervals, merge_kiai_intervals
from osukiai.analyze.timing import TimingPoint, parse_timing_points

__all__ = [
    "DEFAULT_MERGE_THRESHOLD_MS",
    "AnalysisResult",
    "BpmSection",
    "Interval",
    "TimingPoint",
    "analyze_file",
    "analyze_text",
    "extract_bpm_sections",
    "extract_kiai_intervals",
    "merge_kiai_intervals",
    "ms_to_time_string",
    "parse_timing_points",
]
