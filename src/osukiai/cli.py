#!/usr/bin/env python3
"""
Analyze Beatmaps Command

Entrypoint: osukiai

- Local .osu / .osz files or directories of them
- --set-id downloads a beatmap set from osu.direct first
- --search lists beatmap sets matching a query
- Prints a text report per beatmap, or JSON with --json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from osukiai.analyze import AnalysisResult, analyze_file, analyze_text
from osukiai.archive import ArchiveError, read_osu_file_content
from osukiai.config import Config
from osukiai.direct import DirectClient, download_and_analyze
from osukiai.report import format_report

logger = logging.getLogger(__name__)

BEATMAP_FORMATS = {".osu", ".osz"}


def discover_beatmap_files(path: Path) -> List[Path]:
    """
    Expand a path into beatmap files.

    Args:
        path: A .osu/.osz file or a directory searched recursively.

    Returns:
        Sorted list of beatmap file paths.
    """
    if path.is_dir():
        found = [p for p in path.rglob("*") if p.suffix.lower() in BEATMAP_FORMATS]
        logger.info(f"Found {len(found)} beatmap files in {path}")
        return sorted(found)
    return [path]


def analyze_path(
    path: Path, merge_threshold_ms: int, difficulty: Optional[str] = None
) -> AnalysisResult:
    """
    Analyze one .osu file, or one difficulty of a .osz archive.

    Raises:
        ArchiveError: If a .osz has no matching difficulty.
    """
    if path.suffix.lower() == ".osz":
        content = read_osu_file_content(path, difficulty)
        if content is None:
            raise ArchiveError(f"No .osu file for difficulty {difficulty!r} in {path}")
        return analyze_text(content, merge_threshold_ms)
    return analyze_file(path, merge_threshold_ms)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="osukiai",
        description="Report BPM sections and kiai intervals of osu! beatmaps.",
    )
    parser.add_argument("paths", nargs="*", type=Path, help=".osu/.osz files or directories")
    parser.add_argument("--set-id", type=int, help="download and analyze a beatmap set from osu.direct")
    parser.add_argument("--search", metavar="QUERY", help="search osu.direct and list beatmap sets")
    parser.add_argument("--difficulty", help="difficulty name (Version:) to pick from a .osz")
    parser.add_argument("--threshold", type=int, help="kiai merge threshold in ms")
    parser.add_argument("--config", help="path to osukiai.toml")
    parser.add_argument("--json", action="store_true", help="print results as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def _print_results(results: List[Tuple[str, AnalysisResult]], as_json: bool) -> None:
    if as_json:
        print(json.dumps({name: r.to_dict() for name, r in results}, indent=2))
        return

    for name, result in results:
        print(f"# {name}")
        for line in format_report(result):
            print(line)


def _print_search(client: DirectClient, query: str, amount: int, as_json: bool) -> None:
    found = client.search(query, amount=amount)
    if as_json:
        print(json.dumps([
            {"id": r.id, "artist": r.artist, "title": r.title, "creator": r.creator,
             "status": r.status, "bpm": r.bpm, "versions": r.versions}
            for r in found
        ], indent=2))
        return

    for r in found:
        print(f"{r.id}: {r.artist} - {r.title} ({r.creator}) [{r.status}] BPM={r.bpm:g}")
        for version in r.versions:
            print(f"    {version}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main analysis entrypoint."""
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
    )

    if not args.paths and args.set_id is None and args.search is None:
        logger.error("Nothing to do: give beatmap paths, --set-id or --search")
        return 2

    if args.search is not None and (args.paths or args.set_id is not None):
        logger.error("--search cannot be combined with beatmap paths or --set-id")
        return 2

    try:
        config = Config.load(args.config)
        logger.debug(f"Config loaded: {config}")

        threshold = args.threshold
        if threshold is None:
            threshold = config.get("analysis", "merge_threshold_ms", 500)

        if args.search is not None:
            client = DirectClient.from_config(config)
            amount = config.get("direct", "search_amount", 20)
            _print_search(client, args.search, amount, args.json)

        results = []
        for path in args.paths:
            for beatmap in discover_beatmap_files(path):
                results.append((str(beatmap), analyze_path(beatmap, threshold, args.difficulty)))

        if args.set_id is not None:
            client = DirectClient.from_config(config)
            result = download_and_analyze(client, args.set_id, args.difficulty, threshold)
            results.append((f"set {args.set_id}", result))

        if results:
            _print_results(results, args.json)
        return 0

    except KeyboardInterrupt:
        logger.warning("Analysis interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Analysis failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
