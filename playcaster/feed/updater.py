"""Update pipeline: fetch a playlist and fold it into a podcast channel."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from playcaster.config import Settings, get_settings
from playcaster.errors import PathError, StorageError, UrlError
from playcaster.rss.models import FeedChannel
from playcaster.rss.store import FeedStore
from playcaster.youtube.downloader import Downloader, YtDlpDownloader

from .builder import build_item
from .merger import merge_channel, resolve_title
from .metadata import sync_channel_artwork
from .retention import apply_retention
from .urls import validate_http_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedPaths:
    """On-disk layout derived from the feed file path."""

    feed_file: Path
    feed_name: str
    media_dir: Path


def resolve_feed_paths(feed_file: Path | str) -> FeedPaths:
    """Derive the feed name and media directory from a feed file path.

    ``feeds/show.rss`` stores its media in ``feeds/show/``.

    Raises:
        PathError: If the path has no parent directory, base name or extension
    """
    path = Path(feed_file)
    if not path.name or path.name in (".", ".."):
        raise PathError(path, "missing a file name")
    if not path.suffix:
        raise PathError(path, "missing a file extension")
    if not path.stem:
        raise PathError(path, "missing a base name")

    parent = path.parent
    if str(parent) == str(path):
        raise PathError(path, "missing a parent directory")

    return FeedPaths(feed_file=path, feed_name=path.stem, media_dir=parent / path.stem)


class FeedUpdater:
    """Runs one update pass for a single feed.

    The updater never writes the feed document; the caller persists the
    returned channel once the whole pass has succeeded.
    """

    def __init__(
        self,
        feed_file: Path | str,
        base_url: str,
        *,
        playlist_url: str | None = None,
        store: FeedStore | None = None,
        downloader: Downloader | None = None,
        settings: Settings | None = None,
    ):
        """Validate the feed layout and set up collaborators.

        Raises:
            PathError: If the feed file path is unusable
            UrlError: If the base or playlist URL is malformed
        """
        self.paths = resolve_feed_paths(feed_file)
        self.base_url = validate_http_url(base_url)
        self.playlist_url = validate_http_url(playlist_url) if playlist_url else None
        self.settings = settings or get_settings()
        self.store = store or FeedStore()
        self.downloader = downloader or YtDlpDownloader(self.paths.media_dir, self.settings)

    def load(self) -> FeedChannel | None:
        """Load the persisted channel, if there is one."""
        return self.store.load(self.paths.feed_file)

    def resolve_playlist_url(self, existing: FeedChannel | None) -> str:
        """Configured playlist URL, falling back to the persisted channel link.

        Raises:
            UrlError: If neither is available
        """
        if self.playlist_url:
            return self.playlist_url
        if existing is not None and existing.link:
            return validate_http_url(existing.link)
        raise UrlError(
            None,
            f"a playlist URL is required, {self.paths.feed_file} has no link to reuse",
        )

    def update(
        self,
        limit: int,
        keep: int | None = None,
        downloader_args: Sequence[str] = (),
    ) -> FeedChannel:
        """Fetch the playlist and return the updated channel.

        Args:
            limit: Maximum number of playlist entries to fetch
            keep: Maximum number of items to keep, or None to keep everything
            downloader_args: Extra arguments passed to the downloader

        Returns:
            The merged channel, ready to be saved

        Raises:
            PlaycasterError: Any failure; nothing is persisted
        """
        existing = self.load()
        playlist_url = self.resolve_playlist_url(existing)
        logger.info(
            "Updating %s from %s (limit %d, keep %s)",
            self.paths.feed_file,
            playlist_url,
            limit,
            keep if keep is not None else "all",
        )

        try:
            self.paths.media_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(self.paths.media_dir, str(e)) from e

        descriptors, metadata = self.downloader.fetch(playlist_url, limit, downloader_args)

        channel_title = resolve_title(metadata, playlist_url)
        new_items = [
            build_item(
                descriptor,
                channel_title,
                self.base_url,
                self.paths.feed_name,
                self.settings.media_extension,
                self.settings.media_mime_type,
            )
            for descriptor in descriptors
        ]

        channel = merge_channel(
            existing,
            new_items,
            metadata,
            playlist_url=playlist_url,
            generator=self.settings.generator,
        )
        channel = apply_retention(
            channel, keep, self.paths.media_dir, self.settings.media_extension
        )
        return sync_channel_artwork(channel)
