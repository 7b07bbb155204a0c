"""Shared fixtures."""

import json

import pytest

from tweet_media.errors import FetchError


class FakeFetcher:
    """In-memory fetcher: maps URL to a body or to a FetchError."""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []

    async def fetch(self, url, headers=None, timeout=None, method="GET"):
        self.calls.append((method, url, dict(headers or {})))
        response = self.responses.get(url)
        if response is None:
            raise FetchError(url, FetchError.HTTP_STATUS, status=404)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


@pytest.fixture
def video_payload():
    """Status JSON with one video carrying three variants."""
    return json.dumps({
        "id_str": "12345",
        "extended_entities": {
            "media": [{
                "type": "video",
                "media_url_https": "https://pbs.twimg.com/ext_tw_video_thumb/1/pu/img/x.jpg",
                "video_info": {
                    "variants": [
                        {"content_type": "video/mp4", "bitrate": 320000, "url": "A"},
                        {"content_type": "video/mp4", "bitrate": 832000, "url": "B"},
                        {"content_type": "application/x-mpegURL", "bitrate": 0, "url": "C"},
                    ]
                },
            }]
        },
    })


@pytest.fixture
def photo_payload():
    return json.dumps({
        "id_str": "12345",
        "extended_entities": {
            "media": [{
                "type": "photo",
                "media_url_https": "https://pbs.twimg.com/media/X?format=jpg&name=small",
            }]
        },
    })
