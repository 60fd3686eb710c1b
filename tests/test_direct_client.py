"""
Unit tests for the osu.direct client.

HTTP is replaced with a mocked requests session.
"""

import pytest
import requests
from unittest.mock import MagicMock, Mock
from osukiai.archive import ArchiveError
from osukiai.config import Config
from osukiai.direct import (
    DirectApiError,
    DirectClient,
    SearchResult,
    download_and_analyze,
)


SEARCH_PAYLOAD = [
    {
        "id": 39804,
        "title": "FREEDOM DiVE",
        "artist": "xi",
        "creator": "Nakagawa-Kanon",
        "status": "ranked",
        "bpm": 222.22,
        "covers": {"cover@2x": "https://example.invalid/cover@2x.jpg"},
        "beatmaps": [
            {"id": 129891, "version": "FOUR DIMENSIONS", "difficulty_rating": 7.02,
             "mode": "osu", "bpm": 222.22, "total_length": 257},
            {"id": 129892, "version": "Another", "difficulty_rating": 5.1},
        ],
    },
    {"id": 1, "title": "Minimal", "artist": "Someone"},
]


def _response(json_data=None, chunks=(), headers=None, error=None):
    response = MagicMock()
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    response.json.return_value = json_data
    response.headers = headers or {}
    response.iter_content.return_value = list(chunks)
    if error is not None:
        response.raise_for_status.side_effect = error
    return response


def _http_error(status):
    err_response = Mock(status_code=status)
    return requests.HTTPError(f"{status} Error", response=err_response)


@pytest.fixture
def session():
    """Mocked requests session."""
    return Mock()


@pytest.fixture
def client(session):
    """Client wired to the mocked session."""
    return DirectClient(
        search_url="https://osu.test/api/v2/search",
        download_url="https://osu.test/api/d/",
        timeout=30,
        session=session,
    )


class TestSearch:
    """Test beatmap set search."""

    def test_search_parses_results(self, client, session):
        """JSON array is mapped to SearchResult objects."""
        session.get.return_value = _response(SEARCH_PAYLOAD)

        results = client.search("freedom dive", amount=5, offset=10)

        session.get.assert_called_once_with(
            "https://osu.test/api/v2/search",
            params={"query": "freedom dive", "amount": 5, "offset": 10},
            headers={"Accept": "application/json"},
            timeout=30,
        )
        assert len(results) == 2
        assert isinstance(results[0], SearchResult)
        assert results[0].id == 39804
        assert results[0].versions == ["FOUR DIMENSIONS", "Another"]
        assert results[0].beatmaps[0].difficulty_rating == pytest.approx(7.02)
        assert results[1].beatmaps == []
        assert results[1].bpm == 0.0

    def test_search_empty(self, client, session):
        """Empty array means no results."""
        session.get.return_value = _response([])
        assert client.search("nothing") == []

    def test_search_http_error(self, client, session):
        """HTTP failures raise DirectApiError with the status code."""
        session.get.return_value = _response(error=_http_error(503))
        with pytest.raises(DirectApiError) as exc_info:
            client.search("x")
        assert exc_info.value.status_code == 503

    def test_search_connection_error(self, client, session):
        """Network errors raise DirectApiError without a status code."""
        session.get.side_effect = requests.ConnectionError("offline")
        with pytest.raises(DirectApiError) as exc_info:
            client.search("x")
        assert exc_info.value.status_code is None

    def test_search_bad_json(self, client, session):
        """Undecodable bodies raise DirectApiError."""
        response = _response()
        response.json.side_effect = ValueError("no json")
        session.get.return_value = response
        with pytest.raises(DirectApiError):
            client.search("x")


class TestDownload:
    """Test beatmap set downloads."""

    def test_download_bytes_with_progress(self, client, session):
        """Chunks are joined and progress is reported."""
        session.get.return_value = _response(
            chunks=[b"abcd", b"", b"efgh"], headers={"Content-Length": "8"}
        )
        progress = []

        data = client.download_beatmap_set(123, on_progress=progress.append)

        assert data == b"abcdefgh"
        session.get.assert_called_once_with("https://osu.test/api/d/123", stream=True, timeout=30)
        assert progress == [0.5, 1.0, 1.0]

    def test_download_without_length(self, client, session):
        """Unknown size only reports completion."""
        session.get.return_value = _response(chunks=[b"xy"])
        progress = []
        assert client.download_beatmap_set(5, on_progress=progress.append) == b"xy"
        assert progress == [1.0]

    def test_download_http_error(self, client, session):
        """404 raises DirectApiError."""
        session.get.return_value = _response(error=_http_error(404))
        with pytest.raises(DirectApiError) as exc_info:
            client.download_beatmap_set(999)
        assert exc_info.value.status_code == 404

    def test_download_to_file(self, client, session, tmp_path):
        """Data is written and the partial file renamed."""
        session.get.return_value = _response(chunks=[b"PK", b"data"])
        target = tmp_path / "sets" / "123.osz"

        path = client.download_beatmap_set_to_file(123, target)

        assert path == target
        assert target.read_bytes() == b"PKdata"
        assert not (tmp_path / "sets" / "123.osz.part").exists()

    def test_download_to_file_failure_cleans_up(self, client, session, tmp_path):
        """A failed download leaves no file behind."""
        session.get.return_value = _response(error=_http_error(500))
        target = tmp_path / "123.osz"
        with pytest.raises(DirectApiError):
            client.download_beatmap_set_to_file(123, target)
        assert list(tmp_path.iterdir()) == []

    def test_download_to_file_interrupted_mid_stream(self, client, session, tmp_path):
        """An interrupt after the first chunk removes the partial file."""

        def chunks(**kwargs):
            yield b"PK"
            raise KeyboardInterrupt

        response = _response()
        response.iter_content.side_effect = chunks
        session.get.return_value = response

        with pytest.raises(KeyboardInterrupt):
            client.download_beatmap_set_to_file(1, tmp_path / "1.osz")
        assert list(tmp_path.iterdir()) == []

    def test_download_to_file_write_error_cleans_up(self, client, session, tmp_path):
        """A disk error while writing removes the partial file."""

        def chunks(**kwargs):
            yield b"PK"
            raise OSError("No space left on device")

        response = _response()
        response.iter_content.side_effect = chunks
        session.get.return_value = response

        with pytest.raises(OSError):
            client.download_beatmap_set_to_file(1, tmp_path / "1.osz")
        assert list(tmp_path.iterdir()) == []

    def test_download_garbled_content_length(self, client, session):
        """A non-numeric Content-Length is treated as unknown size."""
        session.get.return_value = _response(
            chunks=[b"abc"], headers={"Content-Length": "lots"}
        )
        progress = []
        assert client.download_beatmap_set(7, on_progress=progress.append) == b"abc"
        assert progress == [1.0]


class TestFromConfig:
    """Test building clients from config."""

    def test_from_config(self):
        """URLs and timeout come from the [direct] section."""
        config = Config({
            "direct": {
                "search_url": "https://mirror.test/search",
                "download_url": "https://mirror.test/d",
                "timeout_seconds": 15,
            }
        })
        client = DirectClient.from_config(config)
        assert client.search_url == "https://mirror.test/search"
        assert client.download_url == "https://mirror.test/d"
        assert client.timeout == 15


class TestDownloadAndAnalyze:
    """Test the download-then-analyze workflow."""

    def test_analyzes_selected_difficulty(self, make_osz, osu_text):
        """The chosen difficulty is analyzed in memory."""
        client = Mock()
        client.download_beatmap_set.return_value = make_osz({
            "a [Easy].osu": osu_text(timing_points=["0,500,4,0,0,50,1,0"], version="Easy"),
            "a [Hard].osu": osu_text(
                timing_points=["0,250,4,0,0,50,1,1"],
                hit_objects=["1,1,9000,1,0"],
                version="Hard",
            ),
        })

        result = download_and_analyze(client, 42, difficulty="Hard")

        client.download_beatmap_set.assert_called_once_with(42, on_progress=None)
        assert result.bpm_sections[0].bpm == 240.0
        assert result.kiai_intervals[0].end_ms == 9000

    def test_missing_difficulty(self, make_osz, osu_text):
        """An unknown difficulty raises ArchiveError."""
        client = Mock()
        client.download_beatmap_set.return_value = make_osz({"a.osu": osu_text(version="Easy")})
        with pytest.raises(ArchiveError):
            download_and_analyze(client, 42, difficulty="Hard")
