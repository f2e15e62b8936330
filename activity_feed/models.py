"""Data models for the activity journal feed."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class SourceKind(str, Enum):
    """Kind of upstream activity an item describes."""

    CODE_COMMIT = "code-commit"
    MOVIE_REVIEW = "movie-review"
    EPISODE_REVIEW = "episode-review"
    PHOTO_UPLOAD = "photo-upload"


@dataclass(frozen=True)
class NormalizedItem:
    """Source-agnostic description of the most recent upstream activity."""

    source_kind: SourceKind
    title: str
    description: str
    link: str
    unique_id: str
    published_at: datetime  # timezone-aware, UTC
    extra: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # Freeze the mapping so the item stays immutable once created
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))


@dataclass(frozen=True)
class FeedEntry:
    """Represents a single rendered RSS item."""

    title: str
    description: str
    link: str
    guid: str
    pub_date: str
    content_type: str
    extra_tags: tuple[tuple[str, str], ...] = ()

    def is_blank(self) -> bool:
        """True when the entry carries no usable content."""
        return not any(
            value and value.strip()
            for value in (self.title, self.description, self.link, self.guid)
        )
