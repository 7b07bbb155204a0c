"""Guessed CDN URL patterns for a post.

These are best-effort guesses and only make sense together with a
liveness probe.
"""

from typing import Iterator


GUESS_TEMPLATES = [
    "https://video.twimg.com/tweet_video/{post_id}.{fmt}",
    "https://video.twimg.com/ext_tw_video/{post_id}/pu/vid/{resolution}/{post_id}.{fmt}",
    "https://video.twimg.com/amplify_video/{post_id}/vid/{resolution}/{post_id}.{fmt}",
]

DEFAULT_RESOLUTIONS = ("1280x720", "720x1280", "640x360", "480x270")
DEFAULT_FORMATS = ("mp4",)


def expand_template(template: str, post_id: str, resolution: str, fmt: str) -> str:
    """Fill a URL template with a post ID, resolution and file format."""
    return template.format(post_id=post_id, resolution=resolution, fmt=fmt)


def guess_candidate_urls(
    post_id: str,
    resolutions=DEFAULT_RESOLUTIONS,
    formats=DEFAULT_FORMATS,
    templates=None,
) -> Iterator[str]:
    """Yield every guessed URL for a post, once each, in a fixed order."""
    seen = set()
    for template in templates or GUESS_TEMPLATES:
        for resolution in resolutions:
            for fmt in formats:
                url = expand_template(template, post_id, resolution, fmt)
                if url not in seen:
                    seen.add(url)
                    yield url
