"""Feed update engine: item building, merging, retention and metadata sync."""

from .builder import build_item
from .merger import dedupe_items, merge_channel
from .metadata import sync_channel_artwork
from .retention import apply_retention
from .updater import FeedPaths, FeedUpdater, resolve_feed_paths

__all__ = [
    "FeedPaths",
    "FeedUpdater",
    "apply_retention",
    "build_item",
    "dedupe_items",
    "merge_channel",
    "resolve_feed_paths",
    "sync_channel_artwork",
]
