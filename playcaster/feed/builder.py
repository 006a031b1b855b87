"""Build feed items from raw downloader descriptors."""

import math
import re
from datetime import datetime, timezone

from playcaster.errors import DownloadError
from playcaster.rss.models import Enclosure, FeedItem, MediaDescriptor

from .urls import enclosure_url

_SOURCE_DATE = re.compile(r"\d{8}")


def read_duration(value: object) -> int:
    """Return a duration in whole seconds, or 0 when it is missing or not numeric.

    A zero duration means the media could not be confirmed to have content.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if not math.isfinite(value) or value < 0:
        return 0
    return int(value)


def parse_source_date(item_id: str, value: str) -> datetime:
    """Parse a ``YYYYMMDD`` date as UTC midnight.

    Raises:
        DownloadError: If the value is not an eight digit calendar date
    """
    if not _SOURCE_DATE.fullmatch(value):
        raise DownloadError(f"item {item_id} has a malformed date {value!r}")
    try:
        return datetime.strptime(value, "%Y%m%d").replace(tzinfo=timezone.utc)
    except ValueError as e:
        raise DownloadError(f"item {item_id} has a malformed date {value!r}") from e


def read_publish_date(descriptor: MediaDescriptor) -> datetime | None:
    """Upload date first, then release date; None when neither is present."""
    for value in (descriptor.upload_date, descriptor.release_date):
        if value is not None:
            return parse_source_date(descriptor.id, value)
    return None


def read_length(descriptor: MediaDescriptor) -> int:
    """Exact file size if known, else the rounded approximate size, else 0."""
    if descriptor.filesize is not None:
        return descriptor.filesize
    if descriptor.filesize_approx is not None:
        return round(descriptor.filesize_approx)
    return 0


def build_item(
    descriptor: MediaDescriptor,
    channel_title: str,
    base_url: str,
    feed_name: str,
    media_extension: str = "mp4",
    mime_type: str = "video/mp4",
) -> FeedItem:
    """Map one downloader descriptor onto a feed item.

    Args:
        descriptor: Raw playlist entry from the downloader
        channel_title: Title credited as the item's author
        base_url: Base URL the media files are served from
        feed_name: Base name of the feed file, used as a URL path segment
        media_extension: Extension of the downloaded media files
        mime_type: MIME type of the downloaded media files

    Returns:
        The normalized FeedItem

    Raises:
        DownloadError: If a date field is present but malformed
        UrlError: If the enclosure URL cannot be built
    """
    return FeedItem(
        id=descriptor.id,
        title=descriptor.title or "",
        description=descriptor.description or "",
        link=descriptor.webpage_url or "",
        publish_date=read_publish_date(descriptor),
        enclosure=Enclosure(
            url=enclosure_url(base_url, feed_name, descriptor.id, media_extension),
            length=read_length(descriptor),
            mime_type=mime_type,
        ),
        artwork_url=descriptor.thumbnail or None,
        duration_seconds=read_duration(descriptor.duration),
        author=channel_title,
    )
