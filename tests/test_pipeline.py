"""Tests for the end-to-end extraction pipeline."""

import asyncio

import pytest

from tweet_media.errors import AcquisitionFailed, FetchError, InvalidReference, NoMediaFound
from tweet_media.extractor import MediaExtractor, MediaKind, extract_media
from tweet_media.scraper import UrlSource
from tweet_media.validator import LivenessProbe, ProbeResult

from conftest import FakeFetcher


POST_URL = "https://x.com/someone/status/12345?s=20"


def _sources():
    return [
        UrlSource("first", "https://one.example/{post_id}"),
        UrlSource("second", "https://two.example/{post_id}"),
        UrlSource("third", "https://three.example/{post_id}", base_url="https://three.example"),
    ]


class StubProbe(LivenessProbe):
    def __init__(self, live):
        super().__init__()
        self.live = set(live)

    async def probe(self, url):
        return ProbeResult(url=url, live=url in self.live)


class TestExtractFromContent:
    """Tests for extraction over pre-fetched content."""

    def test_video_json(self, video_payload):
        result = MediaExtractor(fetcher=FakeFetcher()).extract_from_content(video_payload, post_id="12345")
        assert result.count() == 1
        assert result.videos[0].url == "B"
        assert result.videos[0].bitrate == 832000

    def test_photo_json(self, photo_payload):
        result = MediaExtractor(fetcher=FakeFetcher()).extract_from_content(photo_payload, post_id="12345")
        assert result.photos[0].url.endswith("name=orig")
        assert "name=small" not in result.photos[0].url

    def test_pattern_fallback(self):
        page = '<img src="https://pbs.twimg.com/media/ABC.jpg"><p>hi</p>'
        result = MediaExtractor(fetcher=FakeFetcher()).extract_from_content(page, post_id="1")
        assert result.urls() == ["https://pbs.twimg.com/media/ABC.jpg?name=orig"]

    def test_structured_wins_over_patterns(self, photo_payload):
        # A CDN URL elsewhere in the body is not added when JSON entities exist
        text = photo_payload[:-1] + ', "card": "https://pbs.twimg.com/media/OTHER.jpg"}'
        result = MediaExtractor(fetcher=FakeFetcher()).extract_from_content(text, post_id="12345")
        assert result.urls() == ["https://pbs.twimg.com/media/X?format=jpg&name=orig"]

    def test_no_media(self):
        with pytest.raises(NoMediaFound) as excinfo:
            MediaExtractor(fetcher=FakeFetcher()).extract_from_content(
                "<html><body>nothing here</body></html>", post_id="1", source="nitter"
            )
        assert excinfo.value.post_id == "1"
        assert excinfo.value.source == "nitter"

    def test_idempotent(self, video_payload, photo_payload):
        extractor = MediaExtractor(fetcher=FakeFetcher())
        text = video_payload + photo_payload  # not valid JSON: embedded search
        first = extractor.extract_from_content(text, post_id="12345")
        second = extractor.extract_from_content(text, post_id="12345")
        assert set(first.descriptors) == set(second.descriptors)
        assert first.count() == 2


class TestExtract:
    """Tests for MediaExtractor.extract."""

    @pytest.mark.asyncio
    async def test_third_candidate_used_alone(self, video_payload):
        fetcher = FakeFetcher({
            "https://one.example/12345": FetchError(
                "https://one.example/12345", FetchError.TIMEOUT, message="Timeout"
            ),
            # second answers 404 (not registered)
            "https://three.example/12345": video_payload,
        })
        result = await MediaExtractor(fetcher=fetcher, sources=_sources()).extract(POST_URL)

        assert result.source == "third"
        assert result.post_id == "12345"
        assert result.urls() == ["B"]
        assert [d.kind for d in result] == [MediaKind.VIDEO]
        assert [(f.source, f.kind) for f in result.source_failures] == [
            ("first", "timeout"),
            ("second", "http_status"),
        ]

    @pytest.mark.asyncio
    async def test_first_adequate_source_not_mixed(self, photo_payload, video_payload):
        fetcher = FakeFetcher({
            "https://one.example/12345": photo_payload,
            "https://two.example/12345": video_payload,
        })
        result = await MediaExtractor(fetcher=fetcher, sources=_sources()).extract(POST_URL)
        assert result.source == "first"
        assert [d.kind for d in result] == [MediaKind.PHOTO]
        assert len(fetcher.calls) == 1

    @pytest.mark.asyncio
    async def test_invalid_reference(self):
        fetcher = FakeFetcher()
        with pytest.raises(InvalidReference):
            await MediaExtractor(fetcher=fetcher, sources=_sources()).extract("https://x.com/home")
        assert fetcher.calls == []

    @pytest.mark.asyncio
    async def test_acquisition_failed_is_distinct(self):
        with pytest.raises(AcquisitionFailed) as excinfo:
            await MediaExtractor(fetcher=FakeFetcher(), sources=_sources()).extract(POST_URL)
        assert len(excinfo.value.failures) == 3
        assert not isinstance(excinfo.value, NoMediaFound)

    @pytest.mark.asyncio
    async def test_no_media_found_is_distinct(self):
        fetcher = FakeFetcher({"https://one.example/12345": "<html>" + "nothing " * 20 + "</html>"})
        with pytest.raises(NoMediaFound) as excinfo:
            await MediaExtractor(fetcher=fetcher, sources=_sources()).extract(POST_URL)
        assert excinfo.value.source == "first"

    @pytest.mark.asyncio
    async def test_base_url_from_source(self):
        page = '<html><body>' + ' ' * 60 + '<img src="/pic/media%2FQ.png"></body></html>'
        fetcher = FakeFetcher({"https://three.example/12345": page})
        result = await MediaExtractor(fetcher=fetcher, sources=_sources()).extract(POST_URL)
        assert result.urls() == ["https://three.example/pic/media%2FQ.png"]

    @pytest.mark.asyncio
    async def test_probe_filters_result(self):
        text = (
            "https://pbs.twimg.com/media/LIVE.jpg https://pbs.twimg.com/media/DEAD.jpg"
            + " " * 50
        )
        fetcher = FakeFetcher({"https://one.example/12345": text})
        probe = StubProbe(live={"https://pbs.twimg.com/media/LIVE.jpg?name=orig"})

        result = await MediaExtractor(fetcher=fetcher, sources=_sources(), probe=probe).extract(POST_URL)

        assert result.urls() == ["https://pbs.twimg.com/media/LIVE.jpg?name=orig"]
        assert result.is_partial
        assert [d.url for d in result.dropped] == ["https://pbs.twimg.com/media/DEAD.jpg?name=orig"]

    @pytest.mark.asyncio
    async def test_guess_when_empty(self):
        fetcher = FakeFetcher({"https://one.example/12345": "<html>" + "nothing " * 20 + "</html>"})
        gif = "https://video.twimg.com/tweet_video/12345.mp4"
        extractor = MediaExtractor(
            fetcher=fetcher,
            sources=_sources(),
            probe=StubProbe(live={gif}),
            guess_when_empty=True,
        )
        result = await extractor.extract(POST_URL)
        assert result.urls() == [gif]
        assert result.gifs[0].kind == MediaKind.GIF

    @pytest.mark.asyncio
    async def test_guess_needs_probe(self):
        fetcher = FakeFetcher({"https://one.example/12345": "<html>" + "nothing " * 20 + "</html>"})
        extractor = MediaExtractor(fetcher=fetcher, sources=_sources(), guess_when_empty=True)
        with pytest.raises(NoMediaFound):
            await extractor.extract(POST_URL)

    @pytest.mark.asyncio
    async def test_deadline(self):
        class SlowFetcher(FakeFetcher):
            async def fetch(self, url, headers=None, timeout=None, method="GET"):
                await asyncio.sleep(5)
                return ""

        extractor = MediaExtractor(fetcher=SlowFetcher(), sources=_sources(), deadline=0.01)
        with pytest.raises(AcquisitionFailed) as excinfo:
            await extractor.extract(POST_URL)
        assert excinfo.value.failures[0].kind == "timeout"

    @pytest.mark.asyncio
    async def test_deadline_during_liveness_check_keeps_result(self, video_payload):
        class SlowLiveness(StubProbe):
            async def filter(self, result):
                await asyncio.sleep(5)
                return result

        fetcher = FakeFetcher({"https://one.example/12345": video_payload})
        extractor = MediaExtractor(
            fetcher=fetcher,
            sources=_sources(),
            probe=SlowLiveness(live=set()),
            deadline=0.05,
        )
        result = await extractor.extract(POST_URL)

        assert result.source == "first"
        assert result.urls() == ["B"]
        assert not result.is_partial

    @pytest.mark.asyncio
    async def test_extract_media_helper(self, video_payload):
        fetcher = FakeFetcher({"https://one.example/12345": video_payload})
        result = await extract_media(POST_URL, fetcher=fetcher, sources=_sources())
        assert result.urls() == ["B"]
