"""Tests for the retention policy."""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from playcaster.feed import apply_retention
from playcaster.feed.retention import media_file_path, split_retained
from playcaster.rss.models import Enclosure, FeedChannel, FeedItem


def make_item(item_id: str) -> FeedItem:
    """Helper to create a FeedItem for testing."""
    return FeedItem(
        id=item_id,
        title=f"Video {item_id}",
        enclosure=Enclosure(url=f"http://localhost/feed/{item_id}.mp4"),
        duration_seconds=60,
    )


def make_channel(*item_ids: str) -> FeedChannel:
    return FeedChannel(
        title="Show",
        link="https://www.youtube.com/c/show",
        artwork_url="https://img/show.jpg",
        items=tuple(make_item(i) for i in item_ids),
    )


def touch_media(media_dir: Path, *item_ids: str) -> None:
    media_dir.mkdir(parents=True, exist_ok=True)
    for item_id in item_ids:
        (media_dir / f"{item_id}.mp4").write_bytes(b"video")


class TestSplitRetained:
    """Tests for split_retained."""

    def test_no_keep(self):
        """Without a keep count nothing is evicted."""
        items = [make_item("a"), make_item("b")]
        kept, evicted = split_retained(items, None)
        assert [i.id for i in kept] == ["a", "b"]
        assert evicted == ()

    def test_keep_splits_at_position(self):
        """Items past position keep are evicted, in order."""
        items = [make_item(i) for i in "abcde"]
        kept, evicted = split_retained(items, 2)
        assert [i.id for i in kept] == ["a", "b"]
        assert [i.id for i in evicted] == ["c", "d", "e"]

    def test_keep_larger_than_list(self):
        """A keep count above the list size evicts nothing."""
        kept, evicted = split_retained([make_item("a")], 5)
        assert len(kept) == 1
        assert evicted == ()

    def test_negative_keep(self):
        """A negative keep count is rejected."""
        with pytest.raises(ValueError):
            split_retained([make_item("a")], -1)


class TestApplyRetention:
    """Tests for apply_retention."""

    def test_no_keep_returns_channel_unchanged(self, tmp_path):
        """Without a keep count the channel is returned as is."""
        channel = make_channel("a", "b", "c")
        assert apply_retention(channel, None, tmp_path) is channel

    def test_bound_and_deletion(self, tmp_path):
        """Only keep items remain and evicted media files are deleted."""
        media_dir = tmp_path / "show"
        touch_media(media_dir, "a", "b", "c", "d")
        channel = make_channel("a", "b", "c", "d")

        result = apply_retention(channel, 2, media_dir)

        assert [i.id for i in result.items] == ["a", "b"]
        assert (media_dir / "a.mp4").exists()
        assert (media_dir / "b.mp4").exists()
        assert not (media_dir / "c.mp4").exists()
        assert not (media_dir / "d.mp4").exists()

    def test_other_fields_untouched(self, tmp_path):
        """Eviction only changes the item list."""
        channel = make_channel("a", "b", "c")

        result = apply_retention(channel, 1, tmp_path)

        assert result.title == channel.title
        assert result.link == channel.link
        assert result.artwork_url == channel.artwork_url

    def test_missing_media_file_is_not_an_error(self, tmp_path, caplog):
        """A media file that is already gone is logged and skipped."""
        channel = make_channel("a", "b", "c")

        with caplog.at_level(logging.WARNING, logger="playcaster.feed.retention"):
            result = apply_retention(channel, 1, tmp_path / "missing")

        assert [i.id for i in result.items] == ["a"]
        assert "Could not delete media file" in caplog.text

    def test_deletion_failure_keeps_item_evicted(self, tmp_path):
        """Permission errors while deleting do not restore the item."""
        touch_media(tmp_path, "a", "b")
        channel = make_channel("a", "b")

        with patch.object(Path, "unlink", side_effect=PermissionError("denied")):
            result = apply_retention(channel, 1, tmp_path)

        assert [i.id for i in result.items] == ["a"]

    def test_custom_extension(self, tmp_path):
        """The media extension is configurable."""
        (tmp_path / "b.webm").write_bytes(b"video")
        channel = make_channel("a", "b")

        apply_retention(channel, 1, tmp_path, media_extension="webm")

        assert not (tmp_path / "b.webm").exists()

    def test_keep_zero_evicts_everything(self, tmp_path):
        """A keep count of zero empties the channel and its media directory."""
        touch_media(tmp_path, "a", "b")

        result = apply_retention(make_channel("a", "b"), 0, tmp_path)

        assert result.items == ()
        assert list(tmp_path.iterdir()) == []

    def test_never_deletes_outside_media_dir(self, tmp_path, caplog):
        """Item ids that escape the media directory are evicted without deleting."""
        media_dir = tmp_path / "show"
        touch_media(media_dir, "a")
        outside = tmp_path / "x.mp4"
        outside.write_bytes(b"not ours")
        channel = make_channel("a", "../x")

        with caplog.at_level(logging.WARNING, logger="playcaster.feed.retention"):
            result = apply_retention(channel, 1, media_dir)

        assert [i.id for i in result.items] == ["a"]
        assert outside.exists()
        assert "outside" in caplog.text

    def test_media_file_path(self, tmp_path):
        """Media files are named after the item id."""
        assert media_file_path(tmp_path, "QWkUFkXcx9I", "mp4") == tmp_path / "QWkUFkXcx9I.mp4"
