"""Plain-text rendering of analysis results."""

from typing import List, Optional

from osukiai.analyze import AnalysisResult, ms_to_time_string

OPEN_END = "end"


def _format_ms(ms: int) -> str:
    # Timing points may sit before the audio starts
    return "-" + ms_to_time_string(-ms) if ms < 0 else ms_to_time_string(ms)


def _format_end(end_ms: Optional[int]) -> str:
    return _format_ms(end_ms) if end_ms is not None else OPEN_END


def format_report(result: AnalysisResult) -> List[str]:
    """
    Render an analysis result as report lines.

    Example:
        === BPM Sections ===
        Section 1: 0:00.000 ~ end  BPM=120.00
        === Kiai Intervals ===
        Kiai 1: 0:30.000 ~ 0:45.500
        Last hit object: 1:02.000
    """
    lines = ["=== BPM Sections ==="]
    for i, sec in enumerate(result.bpm_sections, start=1):
        lines.append(
            f"Section {i}: {_format_ms(sec.start_ms)} ~ {_format_end(sec.end_ms)}"
            f"  BPM={sec.bpm:.2f}"
        )

    lines.append("=== Kiai Intervals ===")
    for i, iv in enumerate(result.kiai_intervals, start=1):
        lines.append(f"Kiai {i}: {_format_ms(iv.start_ms)} ~ {_format_end(iv.end_ms)}")

    last = result.last_hit_object_ms
    lines.append(f"Last hit object: {_format_ms(last) if last is not None else 'none'}")
    return lines
