"""Reading and writing podcast feed documents (RSS 2.0 with iTunes tags)."""

import logging
import os
import re
import tempfile
import xml.etree.ElementTree as ET
from datetime import timezone
from email.utils import format_datetime, parsedate_to_datetime
from pathlib import Path

from pydantic import ValidationError

from playcaster.errors import FeedFormatError, StorageError

from .models import Enclosure, FeedChannel, FeedItem

logger = logging.getLogger(__name__)

ITUNES_NS = "http://www.itunes.com/dtds/podcast-1.0.dtd"

# XML namespaces for reading feeds
NAMESPACES = {"itunes": ITUNES_NS}

ET.register_namespace("itunes", ITUNES_NS)

# Code points outside the XML 1.0 Char production
_XML_ILLEGAL = re.compile(r"[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


def _itunes(tag: str) -> str:
    return f"{{{ITUNES_NS}}}{tag}"


def xml_safe(value: str) -> str:
    """Drop characters that cannot appear in an XML 1.0 document.

    ElementTree escapes markup characters but writes control characters as
    is, which would leave a document no parser accepts.
    """
    return _XML_ILLEGAL.sub("", value)


def format_duration(seconds: int) -> str:
    """Format a duration as ``HH:MM:SS``."""
    hours, remainder = divmod(max(seconds, 0), 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02}:{minutes:02}:{secs:02}"


def parse_duration(value: str | None) -> int:
    """Parse an ``itunes:duration`` value (``HH:MM:SS``, ``MM:SS`` or seconds).

    Unparseable values count as an unknown duration (0).
    """
    if not value:
        return 0
    parts = value.strip().split(":")
    if len(parts) > 3:
        return 0
    total = 0
    try:
        for part in parts:
            total = total * 60 + int(float(part))
    except ValueError:
        logger.debug("Ignoring unparseable duration %r", value)
        return 0
    return max(total, 0)


def _text(parent: ET.Element, path: str) -> str | None:
    elem = parent.find(path, NAMESPACES)
    if elem is None:
        return None
    return elem.text or ""


def _href(parent: ET.Element, path: str) -> str | None:
    elem = parent.find(path, NAMESPACES)
    if elem is None:
        return None
    return elem.attrib.get("href") or None


def _parse_item(elem: ET.Element, path: Path) -> FeedItem:
    guid = (_text(elem, "guid") or "").strip()
    if not guid:
        raise FeedFormatError(path, "item without a guid")

    publish_date = None
    pub_date_str = _text(elem, "pubDate")
    if pub_date_str:
        try:
            publish_date = parsedate_to_datetime(pub_date_str.strip())
        except (TypeError, ValueError) as e:
            raise FeedFormatError(
                path, f"item {guid} has an invalid pubDate {pub_date_str!r}"
            ) from e
        if publish_date.tzinfo is None:
            publish_date = publish_date.replace(tzinfo=timezone.utc)

    enclosure_elem = elem.find("enclosure")
    if enclosure_elem is None or not enclosure_elem.attrib.get("url"):
        raise FeedFormatError(path, f"item {guid} has no enclosure")
    try:
        length = int(enclosure_elem.attrib.get("length") or 0)
    except ValueError as e:
        raise FeedFormatError(path, f"item {guid} has an invalid enclosure length") from e

    return FeedItem(
        id=guid,
        title=_text(elem, "title") or "",
        description=_text(elem, "description") or "",
        link=_text(elem, "link") or "",
        publish_date=publish_date,
        enclosure=Enclosure(
            url=enclosure_elem.attrib["url"],
            length=length,
            mime_type=enclosure_elem.attrib.get("type") or "video/mp4",
        ),
        artwork_url=_href(elem, "itunes:image"),
        duration_seconds=parse_duration(_text(elem, "itunes:duration")),
        author=_text(elem, "itunes:author"),
    )


def parse_channel(data: bytes | str, path: Path | str = "<memory>") -> FeedChannel:
    """Parse a feed document into a FeedChannel.

    Raises:
        FeedFormatError: If the document is not well-formed or lacks a channel
    """
    path = Path(path)
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise FeedFormatError(path, str(e)) from e

    channel_elem = root if root.tag == "channel" else root.find("channel")
    if channel_elem is None:
        raise FeedFormatError(path, "document has no <channel> element")

    category_elem = channel_elem.find("itunes:category", NAMESPACES)
    artwork_url = _href(channel_elem, "itunes:image") or _text(channel_elem, "image/url")

    try:
        return FeedChannel(
            title=_text(channel_elem, "title") or "",
            description=_text(channel_elem, "description") or "",
            link=_text(channel_elem, "link") or "",
            generator=_text(channel_elem, "generator") or "",
            author=_text(channel_elem, "itunes:author"),
            category=category_elem.attrib.get("text") if category_elem is not None else None,
            explicit=_text(channel_elem, "itunes:explicit"),
            block=_text(channel_elem, "itunes:block"),
            artwork_url=artwork_url or None,
            items=tuple(_parse_item(item, path) for item in channel_elem.findall("item")),
        )
    except ValidationError as e:
        raise FeedFormatError(path, str(e)) from e


def build_document(channel: FeedChannel) -> ET.Element:
    """Build the ``<rss>`` element tree for a channel."""
    rss = ET.Element("rss", attrib={"version": "2.0"})
    channel_elem = ET.SubElement(rss, "channel")

    def _set(parent: ET.Element, tag: str, value: str | None) -> None:
        if value:
            ET.SubElement(parent, tag).text = xml_safe(value)

    def _attr(parent: ET.Element, tag: str, **attrib: str) -> None:
        ET.SubElement(parent, tag, attrib={k: xml_safe(v) for k, v in attrib.items()})

    _set(channel_elem, "title", channel.title)
    _set(channel_elem, "link", channel.link)
    # RSS 2.0 requires a description, even an empty one
    ET.SubElement(channel_elem, "description").text = xml_safe(channel.description)
    _set(channel_elem, "generator", channel.generator)
    _set(channel_elem, _itunes("author"), channel.author)
    _set(channel_elem, _itunes("subtitle"), channel.title)
    _set(channel_elem, _itunes("summary"), channel.description)
    _set(channel_elem, _itunes("explicit"), channel.explicit)
    if channel.category:
        _attr(channel_elem, _itunes("category"), text=channel.category)
    _set(channel_elem, _itunes("block"), channel.block)
    if channel.artwork_url:
        _attr(channel_elem, _itunes("image"), href=channel.artwork_url)

    for item in channel.items:
        entry = ET.SubElement(channel_elem, "item")
        guid = ET.SubElement(entry, "guid", attrib={"isPermaLink": "false"})
        guid.text = xml_safe(item.id)
        _set(entry, "title", item.title)
        _set(entry, "link", item.link)
        _set(entry, "description", item.description)
        if item.publish_date is not None:
            ET.SubElement(entry, "pubDate").text = format_datetime(
                item.publish_date.astimezone(timezone.utc)
            )
        _attr(
            entry,
            "enclosure",
            url=item.enclosure.url,
            length=str(item.enclosure.length),
            type=item.enclosure.mime_type,
        )
        _set(entry, _itunes("author"), item.author)
        _set(entry, _itunes("subtitle"), item.title)
        _set(entry, _itunes("summary"), item.description)
        if item.artwork_url:
            _attr(entry, _itunes("image"), href=item.artwork_url)
        ET.SubElement(entry, _itunes("duration")).text = format_duration(item.duration_seconds)
        ET.SubElement(entry, _itunes("explicit")).text = "No"

    return rss


class FeedStore:
    """Loads and saves feed documents on the local filesystem."""

    def load(self, path: Path) -> FeedChannel | None:
        """Load a persisted channel.

        Returns:
            The channel, or None if no feed document exists yet

        Raises:
            StorageError: If the file exists but cannot be read
            FeedFormatError: If the file is not a valid feed
        """
        path = Path(path)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            logger.info("No existing feed at %s, a new one will be created", path)
            return None
        except OSError as e:
            raise StorageError(path, str(e)) from e

        channel = parse_channel(data, path)
        logger.info("Loaded feed %s with %d items", path, len(channel.items))
        return channel

    def dumps(self, channel: FeedChannel, pretty: bool = True) -> str:
        """Serialize a channel to an XML string."""
        return self._serialize(channel, pretty).decode("utf-8")

    def save(self, path: Path, channel: FeedChannel, pretty: bool = True) -> None:
        """Write a channel to disk, replacing any previous document atomically.

        Raises:
            StorageError: If the document cannot be written
        """
        path = Path(path)
        data = self._serialize(channel, pretty)
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                "wb", dir=path.parent, prefix=f".{path.name}.", delete=False
            ) as handle:
                tmp_name = handle.name
                handle.write(data)
            # feeds are served by a web server, not just read by their owner
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(path, str(e)) from e
        logger.info("Wrote feed %s with %d items", path, len(channel.items))

    @staticmethod
    def _serialize(channel: FeedChannel, pretty: bool) -> bytes:
        tree = ET.ElementTree(build_document(channel))
        if pretty:
            ET.indent(tree, space="  ")
        data = ET.tostring(tree.getroot(), encoding="utf-8", xml_declaration=True)
        return data + b"\n" if pretty else data
