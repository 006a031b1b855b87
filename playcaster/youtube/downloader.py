"""Playlist downloader driving the ``yt-dlp`` executable."""

import json
import logging
import subprocess
from pathlib import Path
from typing import Any, Protocol, Sequence

from pydantic import ValidationError

from playcaster.config import Settings, get_settings
from playcaster.errors import DownloadError
from playcaster.rss.models import MediaDescriptor, PlaylistMetadata

logger = logging.getLogger(__name__)


class Downloader(Protocol):
    """Fetches a playlist, downloading its media and returning its metadata."""

    def fetch(
        self, playlist_url: str, max_items: int, extra_args: Sequence[str] = ()
    ) -> tuple[list[MediaDescriptor], PlaylistMetadata]: ...


class YtDlpDownloader:
    """Downloads playlist media with ``yt-dlp`` and parses its JSON report.

    Media files are written to ``output_dir`` as ``<id>.<ext>``; existing
    files are never downloaded again.
    """

    def __init__(self, output_dir: Path, settings: Settings | None = None):
        """Initialize the downloader.

        Args:
            output_dir: Directory receiving the downloaded media files
            settings: Application settings; the cached settings when omitted
        """
        self.output_dir = Path(output_dir)
        self.settings = settings or get_settings()

    def build_command(
        self, playlist_url: str, max_items: int, extra_args: Sequence[str] = ()
    ) -> list[str]:
        """Build the ``yt-dlp`` command line for a playlist."""
        return [
            self.settings.downloader_path,
            "--dump-single-json",
            "--no-simulate",
            "--no-progress",
            "--no-overwrites",
            "--playlist-end",
            str(max_items),
            "--format",
            self.settings.downloader_format,
            "--merge-output-format",
            self.settings.media_extension,
            "--output",
            str(self.output_dir / "%(id)s.%(ext)s"),
            *extra_args,
            "--",
            playlist_url,
        ]

    def fetch(
        self, playlist_url: str, max_items: int, extra_args: Sequence[str] = ()
    ) -> tuple[list[MediaDescriptor], PlaylistMetadata]:
        """Download a playlist and return its entries and metadata.

        Args:
            playlist_url: URL of the playlist or channel
            max_items: Maximum number of playlist entries to fetch
            extra_args: Additional arguments passed through to ``yt-dlp``

        Returns:
            Tuple of (entries in playlist order, playlist metadata)

        Raises:
            DownloadError: If ``yt-dlp`` fails or does not report a playlist
        """
        command = self.build_command(playlist_url, max_items, extra_args)
        logger.debug("Running %s", command)

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.settings.downloader_timeout_seconds,
                check=False,
            )
        except FileNotFoundError as e:
            raise DownloadError(
                f"downloader executable {self.settings.downloader_path!r} not found",
                playlist_url,
            ) from e
        except subprocess.TimeoutExpired as e:
            raise DownloadError(
                f"downloader timed out after {e.timeout} seconds", playlist_url
            ) from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip().splitlines()
            detail = stderr[-1] if stderr else "no error output"
            raise DownloadError(
                f"downloader exited with status {result.returncode}: {detail}",
                playlist_url,
            )

        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise DownloadError(f"downloader output is not valid JSON: {e}", playlist_url) from e

        return parse_playlist(data, playlist_url)


def parse_playlist(
    data: Any, playlist_url: str
) -> tuple[list[MediaDescriptor], PlaylistMetadata]:
    """Split a ``yt-dlp`` playlist report into entries and playlist metadata.

    Raises:
        DownloadError: If the report is not a playlist or an entry is malformed
    """
    if not isinstance(data, dict):
        raise DownloadError("downloader output is not a JSON object", playlist_url)
    if data.get("_type") != "playlist":
        raise DownloadError(
            "this URL points to a single video, not a playlist", playlist_url
        )

    entries = data.get("entries") or []
    if not isinstance(entries, list):
        raise DownloadError("playlist entries are not a list", playlist_url)

    descriptors: list[MediaDescriptor] = []
    for index, entry in enumerate(entries):
        # yt-dlp reports entries it could not extract as null
        if entry is None:
            logger.warning("Skipping playlist entry %d, the downloader reported nothing", index)
            continue
        try:
            descriptors.append(MediaDescriptor.model_validate(entry))
        except ValidationError as e:
            raise DownloadError(f"playlist entry {index} is malformed: {e}", playlist_url) from e

    try:
        metadata = PlaylistMetadata.model_validate(data)
    except ValidationError as e:
        raise DownloadError(f"playlist metadata is malformed: {e}", playlist_url) from e

    logger.info(
        "Fetched playlist %r with %d entries", metadata.title or playlist_url, len(descriptors)
    )
    return descriptors, metadata
