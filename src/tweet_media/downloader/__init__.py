"""Downloader module for media files."""

from .media_downloader import MediaDownloader, suggest_filename, file_extension

__all__ = [
    "MediaDownloader",
    "suggest_filename",
    "file_extension",
]
