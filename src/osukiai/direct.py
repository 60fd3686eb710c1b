"""
osu.direct API client: beatmap set search and .osz download.

Endpoints:
- GET {search_url}?query=&amount=&offset=  -> JSON array of beatmap sets
- GET {download_url}/{set_id}              -> .osz bytes (302 redirects)
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import requests

from osukiai.analyze import DEFAULT_MERGE_THRESHOLD_MS, AnalysisResult, analyze_text
from osukiai.archive import ArchiveError, read_osu_file_content

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_URL = "https://osu.direct/api/v2/search"
DEFAULT_DOWNLOAD_URL = "https://osu.direct/api/d"
CHUNK_SIZE = 65536

ProgressCallback = Callable[[float], None]


class DirectApiError(Exception):
    """Raised when an osu.direct request fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class BeatmapInfo:
    """One difficulty inside a beatmap set."""

    id: int
    version: str
    difficulty_rating: float = 0.0
    mode: str = "osu"
    bpm: float = 0.0
    total_length: int = 0

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "BeatmapInfo":
        return cls(
            id=int(data.get("id", 0)),
            version=data.get("version") or "",
            difficulty_rating=float(data.get("difficulty_rating") or 0.0),
            mode=data.get("mode") or "osu",
            bpm=float(data.get("bpm") or 0.0),
            total_length=int(data.get("total_length") or 0),
        )


@dataclass
class SearchResult:
    """A beatmap set returned by the search endpoint."""

    id: int
    title: str
    artist: str
    creator: str = ""
    status: str = ""
    bpm: float = 0.0
    beatmaps: List[BeatmapInfo] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "SearchResult":
        return cls(
            id=int(data.get("id", 0)),
            title=data.get("title") or "",
            artist=data.get("artist") or "",
            creator=data.get("creator") or "",
            status=data.get("status") or "",
            bpm=float(data.get("bpm") or 0.0),
            beatmaps=[BeatmapInfo.from_json(b) for b in data.get("beatmaps") or []],
        )

    @property
    def versions(self) -> List[str]:
        return [b.version for b in self.beatmaps]


class DirectClient:
    """HTTP client for the osu.direct mirror."""

    def __init__(
        self,
        search_url: str = DEFAULT_SEARCH_URL,
        download_url: str = DEFAULT_DOWNLOAD_URL,
        timeout: float = 60,
        session: Optional[requests.Session] = None,
    ):
        self.search_url = search_url
        self.download_url = download_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config) -> "DirectClient":
        """Build a client from the [direct] config section."""
        return cls(
            search_url=config.get("direct", "search_url", DEFAULT_SEARCH_URL),
            download_url=config.get("direct", "download_url", DEFAULT_DOWNLOAD_URL),
            timeout=config.get("direct", "timeout_seconds", 60),
        )

    def search(self, query: str, amount: int = 20, offset: int = 0) -> List[SearchResult]:
        """
        Search beatmap sets.

        Args:
            query: Free-text query (title, artist, creator...)
            amount: Page size
            offset: Page offset

        Returns:
            List of SearchResult (empty when nothing matches)

        Raises:
            DirectApiError: On HTTP failure or unparsable response
        """
        params = {"query": query or "", "amount": amount, "offset": offset}
        try:
            response = self.session.get(
                self.search_url,
                params=params,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise DirectApiError(f"Search failed: {e}", _status_of(e)) from e

        try:
            payload = response.json()
            results = [SearchResult.from_json(item) for item in payload or []]
        except (ValueError, TypeError, AttributeError) as e:
            raise DirectApiError(f"Failed to parse search results: {e}") from e

        logger.info(f"🔍 Search '{query}': {len(results)} result(s)")
        return results

    def download_beatmap_set(
        self, set_id: int, on_progress: Optional[ProgressCallback] = None
    ) -> bytes:
        """
        Download a beatmap set archive into memory.

        Args:
            set_id: Beatmap set ID
            on_progress: Called with a 0.0-1.0 fraction while downloading

        Returns:
            Raw .osz bytes

        Raises:
            DirectApiError: On HTTP failure
        """
        url = f"{self.download_url}/{set_id}"
        logger.info(f"Starting download: {url}")

        chunks = []
        try:
            with self.session.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                total = _content_length(response)
                downloaded = 0
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if not chunk:
                        continue
                    chunks.append(chunk)
                    downloaded += len(chunk)
                    if on_progress and total:
                        on_progress(min(downloaded / total, 1.0))
        except requests.RequestException as e:
            raise DirectApiError(f"Download failed: {e}", _status_of(e)) from e

        if on_progress:
            on_progress(1.0)

        data = b"".join(chunks)
        logger.info(f"✅ Downloaded beatmap set {set_id}, size: {len(data)} bytes")
        return data

    def download_beatmap_set_to_file(
        self, set_id: int, output_path: Union[str, Path]
    ) -> Path:
        """
        Stream a beatmap set archive to disk.

        Data goes to ``<output_path>.part`` first and is renamed on success;
        the partial file is removed on failure.

        Raises:
            DirectApiError: On HTTP failure
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        temp = output_path.with_name(output_path.name + ".part")
        url = f"{self.download_url}/{set_id}"

        try:
            with self.session.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                with open(temp, "wb") as handle:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            handle.write(chunk)
        except requests.RequestException as e:
            temp.unlink(missing_ok=True)
            raise DirectApiError(f"Download failed: {e}", _status_of(e)) from e
        except BaseException:
            # Interrupts and write errors must not leave a .part file behind
            temp.unlink(missing_ok=True)
            raise

        temp.replace(output_path)
        logger.info(f"✅ Saved beatmap set {set_id} to {output_path}")
        return output_path


def _status_of(error: requests.RequestException) -> Optional[int]:
    response = getattr(error, "response", None)
    return response.status_code if response is not None else None


def _content_length(response) -> int:
    # Missing or garbled headers mean "size unknown"
    try:
        return max(int(response.headers.get("Content-Length") or 0), 0)
    except (TypeError, ValueError):
        return 0


def download_and_analyze(
    client: DirectClient,
    set_id: int,
    difficulty: Optional[str] = None,
    merge_threshold_ms: int = DEFAULT_MERGE_THRESHOLD_MS,
    on_progress: Optional[ProgressCallback] = None,
) -> AnalysisResult:
    """
    Download a beatmap set and analyze one difficulty in memory.

    Args:
        client: DirectClient instance
        set_id: Beatmap set ID
        difficulty: Difficulty name; None analyzes the first .osu entry
        merge_threshold_ms: Kiai merge threshold
        on_progress: Download progress callback

    Returns:
        AnalysisResult

    Raises:
        DirectApiError: If the download fails
        ArchiveError: If the archive holds no matching .osu file
    """
    osz_data = client.download_beatmap_set(set_id, on_progress=on_progress)

    content = read_osu_file_content(osz_data, difficulty)
    if content is None:
        raise ArchiveError(
            f"No .osu file for difficulty {difficulty!r} in beatmap set {set_id}"
        )

    return analyze_text(content, merge_threshold_ms)
