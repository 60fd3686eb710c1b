"""Shared fixtures for beatmap analysis tests."""

import io
import zipfile

import pytest


def _build_osu_text(timing_points=None, hit_objects=None, version="Normal", newline="\n"):
    lines = [
        "osu file format v14",
        "",
        "[General]",
        "AudioFilename: audio.mp3",
        "Mode: 0",
        "",
        "[Metadata]",
        "Title:Test Song",
        "Artist:Test Artist",
        f"Version:{version}",
        "",
    ]
    if timing_points is not None:
        lines.append("[TimingPoints]")
        lines.extend(timing_points)
        lines.append("")
    if hit_objects is not None:
        lines.append("[HitObjects]")
        lines.extend(hit_objects)
        lines.append("")
    return newline.join(lines)


@pytest.fixture
def osu_text():
    """Factory building .osu text from timing point and hit object lines."""
    return _build_osu_text


@pytest.fixture
def sample_osu_text():
    """A realistic beatmap: tempo change, green lines and two kiai spans."""
    return _build_osu_text(
        timing_points=[
            "0,500,4,2,0,60,1,0",
            "10000,-100,4,2,0,70,0,1",
            "20000,-100,4,2,0,60,0,0",
            "30000,400,4,2,0,60,1,0",
            "30200,-100,4,2,0,80,0,1",
            "45000,-100,4,2,0,60,0,0",
        ],
        hit_objects=[
            "256,192,1000,1,0,0:0:0:0:",
            "128,96,31000,2,0,B|200:200,1,100",
            "256,192,60000,12,0,62000,0:0:0:0:",
        ],
    )


@pytest.fixture
def make_osz():
    """Factory building .osz archive bytes from {entry name: text}."""

    def _make(entries):
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w") as zf:
            for name, content in entries.items():
                zf.writestr(name, content)
        return buf.getvalue()

    return _make
