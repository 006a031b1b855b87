"""Feed document models and storage."""

from .models import Enclosure, FeedChannel, FeedItem, MediaDescriptor, PlaylistMetadata
from .store import FeedStore

__all__ = [
    "Enclosure",
    "FeedChannel",
    "FeedItem",
    "FeedStore",
    "MediaDescriptor",
    "PlaylistMetadata",
]
