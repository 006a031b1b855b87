"""Tests for the yt-dlp downloader."""

import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from playcaster.config import Settings
from playcaster.errors import DownloadError
from playcaster.youtube.downloader import YtDlpDownloader, parse_playlist

PLAYLIST_URL = "https://www.youtube.com/c/mightycarmods"

# Trimmed yt-dlp --dump-single-json output for a channel
SAMPLE_PLAYLIST = {
    "_type": "playlist",
    "id": "UCgJRL30YS6XFxq9Ga8W2J3A",
    "title": "Mighty Car Mods - Videos",
    "uploader": "Mighty Car Mods",
    "webpage_url": PLAYLIST_URL,
    "extractor": "youtube:tab",
    "entries": [
        {
            "id": "QWkUFkXcx9I",
            "title": "Everyone Should do this Simple $10 Car Mod",
            "description": "Do you wanna make your car better?",
            "webpage_url": "https://www.youtube.com/watch?v=QWkUFkXcx9I",
            "duration": 706.0,
            "upload_date": "20220206",
            "release_date": None,
            "thumbnail": "https://i.ytimg.com/vi/QWkUFkXcx9I/maxresdefault.jpg",
            "filesize": None,
            "filesize_approx": 212973334.0,
            "ext": "mp4",
            "like_count": 16399,
        },
        None,
        {
            "id": "b5dS2XSRb2o",
            "title": "We Found the Cheapest Car on Facebook Marketplace",
            "duration": 892,
            "upload_date": "20220130",
        },
    ],
}


@pytest.fixture
def settings():
    """Settings with test values."""
    return Settings(_env_file=None, downloader_path="yt-dlp-test", downloader_timeout_seconds=5)


@pytest.fixture
def downloader(tmp_path, settings):
    """Create a downloader writing into a temporary media directory."""
    return YtDlpDownloader(tmp_path / "mightycarmods", settings)


def create_completed_process(stdout: str, returncode: int = 0, stderr: str = ""):
    """Helper to create a mock subprocess result."""
    result = MagicMock()
    result.stdout = stdout
    result.stderr = stderr
    result.returncode = returncode
    return result


def test_build_command(downloader, tmp_path):
    """The command limits the playlist, fixes the output path and ends with the URL."""
    command = downloader.build_command(PLAYLIST_URL, 10, ["--cookies", "cookies.txt"])

    assert command[0] == "yt-dlp-test"
    assert "--dump-single-json" in command
    assert "--no-overwrites" in command
    assert command[command.index("--playlist-end") + 1] == "10"
    assert command[command.index("--merge-output-format") + 1] == "mp4"
    assert command[command.index("--output") + 1] == str(
        tmp_path / "mightycarmods" / "%(id)s.%(ext)s"
    )
    assert command[-4:] == ["--cookies", "cookies.txt", "--", PLAYLIST_URL]


def test_fetch_parses_playlist(downloader):
    """A successful run yields descriptors in playlist order and metadata."""
    completed = create_completed_process(json.dumps(SAMPLE_PLAYLIST))

    with patch("playcaster.youtube.downloader.subprocess.run", return_value=completed) as mock_run:
        descriptors, metadata = downloader.fetch(PLAYLIST_URL, 30)

    assert [d.id for d in descriptors] == ["QWkUFkXcx9I", "b5dS2XSRb2o"]
    assert descriptors[0].duration == 706.0
    assert descriptors[0].filesize_approx == 212973334.0
    assert descriptors[1].thumbnail is None
    assert metadata.title == "Mighty Car Mods - Videos"
    assert metadata.webpage_url == PLAYLIST_URL

    mock_run.assert_called_once()
    call_args = mock_run.call_args
    assert call_args[0][0][-1] == PLAYLIST_URL
    assert call_args[1]["timeout"] == 5
    assert call_args[1]["capture_output"] is True


def test_fetch_nonzero_exit(downloader):
    """A failing yt-dlp run raises DownloadError with its last error line."""
    completed = create_completed_process(
        "", returncode=1, stderr="WARNING: slow\nERROR: Unable to download webpage"
    )

    with patch("playcaster.youtube.downloader.subprocess.run", return_value=completed):
        with pytest.raises(DownloadError) as exc_info:
            downloader.fetch(PLAYLIST_URL, 30)

    assert "Unable to download webpage" in str(exc_info.value)
    assert exc_info.value.url == PLAYLIST_URL


def test_fetch_missing_executable(downloader):
    """A missing yt-dlp executable raises DownloadError."""
    with patch(
        "playcaster.youtube.downloader.subprocess.run",
        side_effect=FileNotFoundError("yt-dlp-test"),
    ):
        with pytest.raises(DownloadError) as exc_info:
            downloader.fetch(PLAYLIST_URL, 30)

    assert "not found" in str(exc_info.value)


def test_fetch_timeout(downloader):
    """A run exceeding the deadline raises DownloadError."""
    with patch(
        "playcaster.youtube.downloader.subprocess.run",
        side_effect=subprocess.TimeoutExpired(cmd="yt-dlp-test", timeout=5),
    ):
        with pytest.raises(DownloadError) as exc_info:
            downloader.fetch(PLAYLIST_URL, 30)

    assert "timed out" in str(exc_info.value)


def test_fetch_invalid_json(downloader):
    """Output that is not JSON raises DownloadError."""
    completed = create_completed_process("[download] 100%")

    with patch("playcaster.youtube.downloader.subprocess.run", return_value=completed):
        with pytest.raises(DownloadError):
            downloader.fetch(PLAYLIST_URL, 30)


class TestParsePlaylist:
    """Tests for interpreting yt-dlp output."""

    def test_single_video_rejected(self):
        """A single video result is not a playlist."""
        single = {"_type": "video", "id": "QWkUFkXcx9I", "title": "x"}

        with pytest.raises(DownloadError) as exc_info:
            parse_playlist(single, PLAYLIST_URL)

        assert "single video" in str(exc_info.value)

    def test_entry_without_id(self):
        """Entries must have an id."""
        data = {"_type": "playlist", "entries": [{"title": "no id"}]}

        with pytest.raises(DownloadError):
            parse_playlist(data, PLAYLIST_URL)

    def test_no_entries(self):
        """A playlist without entries yields an empty batch."""
        descriptors, metadata = parse_playlist({"_type": "playlist", "title": "Empty"}, PLAYLIST_URL)

        assert descriptors == []
        assert metadata.title == "Empty"

    def test_not_an_object(self):
        """Non-object output is rejected."""
        with pytest.raises(DownloadError):
            parse_playlist(["QWkUFkXcx9I"], PLAYLIST_URL)

    def test_sub_playlists_have_no_duration(self):
        """Channel tab listings parse, with entries lacking durations."""
        data = {
            "_type": "playlist",
            "title": "Mighty Car Mods",
            "entries": [
                {"_type": "playlist", "id": "UCgJRL30YS6XFxq9Ga8W2J3A-videos", "title": "Videos"},
                {"_type": "playlist", "id": "UCgJRL30YS6XFxq9Ga8W2J3A-shorts", "title": "Shorts"},
            ],
        }

        descriptors, _ = parse_playlist(data, PLAYLIST_URL)

        assert [d.duration for d in descriptors] == [None, None]


def test_output_dir_is_path(settings):
    """String output directories are accepted."""
    downloader = YtDlpDownloader("feeds/show", settings)
    assert downloader.output_dir == Path("feeds/show")
