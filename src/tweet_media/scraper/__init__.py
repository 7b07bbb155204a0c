"""Scraper module for acquiring raw post content."""

from .fetcher import HttpFetcher, DEFAULT_USER_AGENT
from .sources import (
    ContentSource,
    UrlSource,
    GuestApiSource,
    AcquiredContent,
    acquire,
    default_sources,
    syndication_token,
)

__all__ = [
    "HttpFetcher",
    "DEFAULT_USER_AGENT",
    "ContentSource",
    "UrlSource",
    "GuestApiSource",
    "AcquiredContent",
    "acquire",
    "default_sources",
    "syndication_token",
]
