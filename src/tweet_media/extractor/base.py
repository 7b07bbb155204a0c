from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional


class MediaKind(str, Enum):
    """Kinds of media attached to a post."""

    PHOTO = "photo"
    VIDEO = "video"
    GIF = "gif"


@dataclass(frozen=True)
class MediaDescriptor:
    url: str
    kind: MediaKind
    bitrate: Optional[int] = None  # videos and gifs only


@dataclass
class ExtractionResult:
    """Media found for one post, in discovery order."""

    post_id: Optional[str] = None
    source: Optional[str] = None  # content source the body came from
    descriptors: list[MediaDescriptor] = field(default_factory=list)

    # Removed by liveness probing
    dropped: list[MediaDescriptor] = field(default_factory=list)

    # Sources tried before the one that answered
    source_failures: list = field(default_factory=list)

    def add(self, descriptor: MediaDescriptor) -> bool:
        """Append a descriptor unless its url is already present."""
        if any(d.url == descriptor.url for d in self.descriptors):
            return False
        self.descriptors.append(descriptor)
        return True

    def extend(self, descriptors) -> None:
        for descriptor in descriptors:
            self.add(descriptor)

    def count(self) -> int:
        return len(self.descriptors)

    def is_empty(self) -> bool:
        return not self.descriptors

    @property
    def is_partial(self) -> bool:
        return bool(self.dropped)

    @property
    def photos(self) -> list[MediaDescriptor]:
        return self._of_kind(MediaKind.PHOTO)

    @property
    def videos(self) -> list[MediaDescriptor]:
        return self._of_kind(MediaKind.VIDEO)

    @property
    def gifs(self) -> list[MediaDescriptor]:
        return self._of_kind(MediaKind.GIF)

    def urls(self) -> list[str]:
        return [d.url for d in self.descriptors]

    def _of_kind(self, kind: MediaKind) -> list[MediaDescriptor]:
        return [d for d in self.descriptors if d.kind == kind]

    def __len__(self) -> int:
        return len(self.descriptors)

    def __iter__(self) -> Iterator[MediaDescriptor]:
        return iter(self.descriptors)
