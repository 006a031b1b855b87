"""Exceptions raised by the Playcaster feed update pipeline."""

from pathlib import Path
from typing import Sequence


class PlaycasterError(Exception):
    """Base class for every error a feed update can raise."""


class PathError(PlaycasterError):
    """The feed file path cannot be used to derive the feed layout."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Invalid feed path {str(self.path)!r}: {reason}")


class StorageError(PlaycasterError):
    """Reading or writing the feed document failed."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Storage error for {self.path}: {reason}")


class FeedFormatError(PlaycasterError):
    """The persisted feed document is not a feed we can read."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Could not parse feed {self.path}: {reason}")


class UrlError(PlaycasterError):
    """A base or playlist URL is malformed, or an enclosure URL could not be built."""

    def __init__(self, url: str | None, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid URL {url!r}: {reason}")


class DownloadError(PlaycasterError):
    """The downloader failed or returned data of an unexpected shape."""

    def __init__(self, reason: str, url: str | None = None):
        self.reason = reason
        self.url = url
        message = f"Download failed for {url}: {reason}" if url else f"Download failed: {reason}"
        super().__init__(message)


class AllItemsInvalidError(PlaycasterError):
    """Every freshly fetched item has an unknown (zero) duration.

    This usually means the playlist URL points at a page of sub-playlists
    (for example a channel's tab list) rather than at videos.
    """

    def __init__(self, ids: Sequence[str]):
        self.ids = list(ids)
        super().__init__(
            "All fetched items have a zero duration, the URL may point to a list "
            f"of playlists rather than videos: {', '.join(self.ids)}"
        )
