"""
.osz archive handling.

A .osz beatmap set is a zip archive holding audio, images and one .osu file
per difficulty. Archives are read in memory; only the .osu entries are ever
written to disk, flattened to their base name.
"""

import io
import logging
import zipfile
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

OSU_SUFFIX = ".osu"

OszSource = Union[bytes, str, Path]


class ArchiveError(Exception):
    """Raised when a .osz archive cannot be read."""
    pass


def _open_archive(osz_data: OszSource) -> zipfile.ZipFile:
    source = io.BytesIO(osz_data) if isinstance(osz_data, (bytes, bytearray)) else osz_data
    try:
        return zipfile.ZipFile(source)
    except (zipfile.BadZipFile, OSError) as e:
        raise ArchiveError(f"Not a valid .osz archive: {e}") from e


def _is_osu_entry(info: zipfile.ZipInfo) -> bool:
    return not info.is_dir() and info.filename.lower().endswith(OSU_SUFFIX)


def _iter_osu_entries(archive: zipfile.ZipFile) -> Iterator[Tuple[zipfile.ZipInfo, str]]:
    for info in archive.infolist():
        if not _is_osu_entry(info):
            continue
        with archive.open(info) as f:
            content = f.read().decode("utf-8-sig", errors="replace")
        yield info, content


def _matches_difficulty(content: str, difficulty: Optional[str]) -> bool:
    return difficulty is None or f"Version:{difficulty}" in content


def _write_entry(info: zipfile.ZipInfo, content_bytes: bytes, output_dir: Path) -> Path:
    # Flatten to the base name so entries like "../x.osu" stay inside output_dir
    destination = output_dir / Path(info.filename).name
    destination.write_bytes(content_bytes)
    return destination


def list_osu_files(osz_data: OszSource) -> List[str]:
    """
    List .osu entry names in archive order.

    Args:
        osz_data: Archive bytes or path to a .osz file

    Returns:
        Entry names (may include directories inside the archive)
    """
    with _open_archive(osz_data) as archive:
        return [info.filename for info in archive.infolist() if _is_osu_entry(info)]


def read_osu_file_content(
    osz_data: OszSource, difficulty: Optional[str] = None
) -> Optional[str]:
    """
    Read one difficulty's .osu text without touching the disk.

    Args:
        osz_data: Archive bytes or path to a .osz file
        difficulty: Difficulty name from the ``Version:`` field; None takes
                    the first .osu entry

    Returns:
        File text, or None if no entry matches
    """
    with _open_archive(osz_data) as archive:
        for info, content in _iter_osu_entries(archive):
            if _matches_difficulty(content, difficulty):
                logger.debug(f"Selected {info.filename} (difficulty={difficulty})")
                return content

    logger.warning(f"No .osu entry found for difficulty: {difficulty}")
    return None


def extract_all_osu_files(osz_data: OszSource, output_dir: Union[str, Path]) -> List[Path]:
    """
    Write every .osu entry of an archive into output_dir.

    Args:
        osz_data: Archive bytes or path to a .osz file
        output_dir: Destination directory (created if missing)

    Returns:
        Paths of the written files, in archive order
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    extracted = []
    with _open_archive(osz_data) as archive:
        for info in archive.infolist():
            if not _is_osu_entry(info):
                continue
            extracted.append(_write_entry(info, archive.read(info), output_dir))

    logger.info(f"Extracted {len(extracted)} .osu file(s) to {output_dir}")
    return extracted


def extract_osu_file_by_difficulty(
    osz_data: OszSource, difficulty: str, output_dir: Union[str, Path]
) -> Optional[Path]:
    """
    Write the .osu entry for one difficulty into output_dir.

    Args:
        osz_data: Archive bytes or path to a .osz file
        difficulty: Difficulty name from the ``Version:`` field
        output_dir: Destination directory (created if missing)

    Returns:
        Path of the written file, or None if no entry matches
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    with _open_archive(osz_data) as archive:
        for info, content in _iter_osu_entries(archive):
            if _matches_difficulty(content, difficulty):
                return _write_entry(info, archive.read(info), output_dir)

    logger.warning(f"No .osu entry found for difficulty: {difficulty}")
    return None
