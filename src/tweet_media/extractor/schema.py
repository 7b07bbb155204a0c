"""Models for the subset of the platform's media JSON that we consume."""

import logging
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError


logger = logging.getLogger(__name__)


class VideoVariant(BaseModel):
    """One encoded rendition of a video."""

    url: str
    content_type: Optional[str] = Field(None, description="e.g. video/mp4")
    bitrate: Optional[int] = Field(None, ge=0)


class VideoInfo(BaseModel):
    variants: list[VideoVariant] = Field(default_factory=list)


class MediaEntity(BaseModel):
    """An entry of extended_entities.media (or syndication mediaDetails)."""

    type: str
    media_url_https: Optional[str] = None
    media_url: Optional[str] = None
    video_info: Optional[VideoInfo] = None

    @property
    def image_url(self) -> Optional[str]:
        return self.media_url_https or self.media_url


def parse_entities(raw: Any) -> list[MediaEntity]:
    """
    Decode a list of raw media entries.

    Entries that do not fit the schema are skipped rather than failing
    the whole list.
    """
    if not isinstance(raw, list):
        return []

    entities = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        try:
            entities.append(MediaEntity.model_validate(item))
        except ValidationError as e:
            logger.debug("Skipping malformed media entry: %s", e.errors()[0].get("msg"))
    return entities
