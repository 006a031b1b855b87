"""Pydantic models for feed documents and downloader output."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class Enclosure(BaseModel):
    """The downloadable media file attached to a feed item."""

    model_config = ConfigDict(frozen=True)

    url: str
    length: int = 0
    mime_type: str = "video/mp4"


class FeedItem(BaseModel):
    """Represents a single episode in a podcast feed."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str = ""
    link: str = ""
    publish_date: datetime | None = None
    enclosure: Enclosure
    artwork_url: str | None = None
    duration_seconds: int = 0
    author: str | None = None


class FeedChannel(BaseModel):
    """A podcast feed: channel metadata plus its items, freshest first."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str = ""
    link: str = ""
    generator: str = ""
    author: str | None = None
    category: str | None = None
    explicit: str | None = None
    block: str | None = None
    artwork_url: str | None = None
    items: tuple[FeedItem, ...] = ()


class MediaDescriptor(BaseModel):
    """Raw fields of one playlist entry as reported by the downloader."""

    model_config = ConfigDict(extra="ignore")

    id: str
    title: str | None = None
    description: str | None = None
    webpage_url: str | None = None
    duration: Any = None
    upload_date: str | None = None
    release_date: str | None = None
    thumbnail: str | None = None
    filesize: int | None = None
    filesize_approx: float | None = None


class PlaylistMetadata(BaseModel):
    """Playlist-level fields reported alongside the entries."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    title: str | None = None
    webpage_url: str | None = None
    uploader: str | None = None
