"""Command-line interface for Playcaster."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from playcaster import __version__
from playcaster.config import get_settings
from playcaster.errors import PlaycasterError
from playcaster.feed.updater import FeedUpdater
from playcaster.logging import setup_logging
from playcaster.rss.store import FeedStore

logger = logging.getLogger(__name__)


def _bounded_int(value: str, minimum: int) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}")
    if number < minimum:
        raise argparse.ArgumentTypeError(f"must be at least {minimum}: {number}")
    return number


def _positive_int(value: str) -> int:
    return _bounded_int(value, 1)


def _non_negative_int(value: str) -> int:
    return _bounded_int(value, 0)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="playcaster",
        description="Turn any playlist into a podcast feed",
        usage="%(prog)s [options] feed_file base_url [-- yt-dlp arguments...]",
        epilog="Arguments after -- are passed to yt-dlp unchanged.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("feed_file", type=Path, help="Path to the channel's RSS feed file")
    parser.add_argument(
        "base_url", help="Base URL of the server which will serve the feed items"
    )
    parser.add_argument(
        "--playlist-url",
        help=(
            "Playlist URL to download videos from. Required when creating a new "
            "feed, or when the feed's link does not already point to the playlist"
        ),
    )
    parser.add_argument(
        "--limit",
        type=_positive_int,
        default=settings.default_limit,
        help="Maximum number of videos to download for the channel (default: %(default)s)",
    )
    parser.add_argument(
        "--keep",
        type=_non_negative_int,
        help=(
            "Maximum number of videos to keep for the channel; older videos are "
            "deleted when the feed updates. Should be at least --limit"
        ),
    )
    parser.add_argument(
        "--no-write-feed",
        action="store_true",
        help="Print the updated feed to stdout instead of writing it to disk",
    )
    parser.add_argument(
        "--no-pretty",
        action="store_true",
        help="Write terse XML rather than the default pretty-printed version",
    )
    parser.add_argument("--log-level", help="Logging level (default: from settings)")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse the command line; arguments after ``--`` are kept for yt-dlp."""
    argv = list(sys.argv[1:] if argv is None else argv)
    downloader_arguments: list[str] = []
    if "--" in argv:
        split = argv.index("--")
        argv, downloader_arguments = argv[:split], argv[split + 1 :]

    args = build_parser().parse_args(argv)
    args.downloader_arguments = downloader_arguments
    return args


def run(args: argparse.Namespace) -> None:
    """Update one feed and write or print the result."""
    if args.keep is not None and args.keep < args.limit:
        logger.warning(
            "--keep %d is lower than --limit %d, newly downloaded videos may be deleted right away",
            args.keep,
            args.limit,
        )

    logger.info("Starting up...")
    updater = FeedUpdater(args.feed_file, args.base_url, playlist_url=args.playlist_url)

    logger.info("Updating channel... (this can take a pretty long time)")
    channel = updater.update(args.limit, args.keep, args.downloader_arguments)

    store = FeedStore()
    if args.no_write_feed:
        sys.stdout.write(store.dumps(channel, pretty=not args.no_pretty))
    else:
        store.save(args.feed_file, channel, pretty=not args.no_pretty)

    logger.info("Done!")


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the ``playcaster`` command."""
    args = parse_args(argv)
    setup_logging(args.log_level)
    logger.debug("%s", args)

    try:
        run(args)
    except PlaycasterError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
