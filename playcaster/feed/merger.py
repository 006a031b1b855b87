"""Merge freshly fetched items into a persisted podcast channel."""

import logging
from typing import Iterable, Sequence

from playcaster.errors import AllItemsInvalidError
from playcaster.rss.models import FeedChannel, FeedItem, PlaylistMetadata

logger = logging.getLogger(__name__)

# Presentation defaults for a personal feed kept out of public directories
DEFAULT_CATEGORY = "TV & Film"
DEFAULT_EXPLICIT = "No"
DEFAULT_BLOCK = "Yes"


def dedupe_items(items: Iterable[FeedItem]) -> tuple[FeedItem, ...]:
    """Drop items whose id was already seen, keeping first occurrences in order."""
    seen: set[str] = set()
    unique: list[FeedItem] = []
    for item in items:
        if item.id in seen:
            continue
        seen.add(item.id)
        unique.append(item)
    return tuple(unique)


def check_batch_durations(items: Sequence[FeedItem]) -> None:
    """Reject a non-empty batch in which no item has a known duration.

    Raises:
        AllItemsInvalidError: If every item has ``duration_seconds == 0``
    """
    if items and all(item.duration_seconds == 0 for item in items):
        raise AllItemsInvalidError([item.id for item in items])


def resolve_title(metadata: PlaylistMetadata, playlist_url: str) -> str:
    """Playlist title, falling back to the playlist URL."""
    return metadata.title or playlist_url


def new_channel(title: str) -> FeedChannel:
    """Create an empty channel with default presentation metadata."""
    return FeedChannel(
        title=title,
        description=f"Playcaster podcast feed for {title}",
        author=title,
        category=DEFAULT_CATEGORY,
        explicit=DEFAULT_EXPLICIT,
        block=DEFAULT_BLOCK,
    )


def merge_channel(
    existing: FeedChannel | None,
    new_items: Sequence[FeedItem],
    metadata: PlaylistMetadata,
    *,
    playlist_url: str,
    generator: str,
) -> FeedChannel:
    """Combine a fresh batch of items with a previously persisted channel.

    This function:
    1. Rejects a batch where every item has an unknown duration
    2. Puts the fresh batch ahead of the persisted items
    3. Deduplicates by id, so a fresh copy replaces a persisted one
    4. Creates channel metadata when there is no persisted channel
    5. Refreshes the channel link and generator

    Args:
        existing: Previously persisted channel, or None for a new feed
        new_items: Items built from the current fetch, in fetch order
        metadata: Playlist-level metadata from the current fetch
        playlist_url: Configured playlist URL, used when metadata lacks one
        generator: Generator string identifying this tool and version

    Returns:
        A new FeedChannel; ``existing`` is left untouched

    Raises:
        AllItemsInvalidError: If the fresh batch only has zero durations
    """
    check_batch_durations(new_items)

    base = existing if existing is not None else new_channel(
        resolve_title(metadata, playlist_url)
    )
    previous = base.items
    items = dedupe_items([*new_items, *previous])

    added = len({item.id for item in new_items} - {item.id for item in previous})
    logger.info(
        "Merged %d fetched items into %d persisted items: %d new, %d total",
        len(new_items),
        len(previous),
        added,
        len(items),
    )

    return base.model_copy(
        update={
            "items": items,
            "link": metadata.webpage_url or playlist_url,
            "generator": generator,
        }
    )
