"""Playlist downloading through yt-dlp."""

from .downloader import Downloader, YtDlpDownloader, parse_playlist

__all__ = ["Downloader", "YtDlpDownloader", "parse_playlist"]
