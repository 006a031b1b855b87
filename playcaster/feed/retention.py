"""Retention policy: keep the newest items and delete the media of the rest."""

import logging
from pathlib import Path
from typing import Sequence

from playcaster.rss.models import FeedChannel, FeedItem

logger = logging.getLogger(__name__)


def split_retained(
    items: Sequence[FeedItem], keep: int | None
) -> tuple[tuple[FeedItem, ...], tuple[FeedItem, ...]]:
    """Split items into the first ``keep`` and the evicted remainder.

    Raises:
        ValueError: If keep is negative
    """
    if keep is None:
        return tuple(items), ()
    if keep < 0:
        raise ValueError(f"keep must not be negative: {keep}")
    return tuple(items[:keep]), tuple(items[keep:])


def media_file_path(media_dir: Path, item_id: str, extension: str) -> Path:
    """Path of the downloaded media file backing an item."""
    return Path(media_dir) / f"{item_id}.{extension}"


def apply_retention(
    channel: FeedChannel,
    keep: int | None,
    media_dir: Path,
    media_extension: str = "mp4",
) -> FeedChannel:
    """Truncate a channel to ``keep`` items and delete evicted media files.

    Deleting a media file is best effort: failures are logged and the item
    stays evicted.
    """
    kept, evicted = split_retained(channel.items, keep)
    if not evicted:
        return channel

    logger.info("Evicting %d items beyond the newest %d", len(evicted), keep)
    media_root = Path(media_dir).resolve()
    for item in evicted:
        path = media_file_path(media_dir, item.id, media_extension)
        if not path.resolve().is_relative_to(media_root):
            logger.warning("Not deleting %s for item %s: outside %s", path, item.id, media_dir)
            continue
        try:
            path.unlink()
            logger.info("Deleted media file %s", path)
        except OSError as e:
            logger.warning("Could not delete media file %s: %s", path, e)

    return channel.model_copy(update={"items": kept})
