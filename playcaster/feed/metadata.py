"""Keep channel-level metadata in step with the items it contains."""

from playcaster.rss.models import FeedChannel


def sync_channel_artwork(channel: FeedChannel) -> FeedChannel:
    """Use the first item artwork as the channel artwork, if any item has one."""
    for item in channel.items:
        if item.artwork_url:
            if item.artwork_url == channel.artwork_url:
                return channel
            return channel.model_copy(update={"artwork_url": item.artwork_url})
    return channel
