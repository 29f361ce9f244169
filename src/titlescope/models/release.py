"""Data models for parsed torrent releases."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from titlescope.models.mixins import EpisodeCodeMixin, SizeMixin

UNKNOWN_TITLE = "Unknown"


class ReleaseType(str, Enum):
    """Release kinds produced by the release-name parser."""

    MOVIE = "movie"
    SERIES = "series"
    EPISODE = "episode"
    APP = "app"
    GAME = "game"
    MUSIC = "music"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str | None) -> ReleaseType:
        """Map a raw type string to a member, falling back to OTHER."""
        if not value:
            return cls.OTHER
        try:
            return cls(value.lower())
        except ValueError:
            return cls.OTHER


class ReleaseState:
    """Torrent states the engine looks at. Any other string is passed through."""

    ERROR = "error"
    MISSING_FILES = "missingFiles"

    INCOMPLETE = frozenset({ERROR, MISSING_FILES})


SERIES_TYPES = frozenset({ReleaseType.SERIES.value, ReleaseType.EPISODE.value})


class Release(EpisodeCodeMixin, SizeMixin, BaseModel):
    """A single parsed torrent entry."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    hash: str
    name: str = ""
    title: str | None = None
    type: str = ReleaseType.OTHER.value
    year: int | None = None
    season: int | None = Field(default=None, alias="series")
    episode: int | None = None
    resolution: str | None = None
    source: str | None = None
    codec: tuple[str, ...] = ()
    audio: tuple[str, ...] = ()
    hdr: tuple[str, ...] = ()
    edition: tuple[str, ...] = ()
    group: str | None = None
    size: int = Field(default=0, ge=0)
    state: str = ""
    added_on: int = Field(default=0, alias="addedOn")
    category: str = ""
    tags: str = ""
    tracker: str | None = None

    @field_validator("codec", "audio", "hdr", "edition", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        if value is None:
            return ()
        return value

    @field_validator("type", mode="before")
    @classmethod
    def _default_type(cls, value: Any) -> Any:
        return value or ReleaseType.OTHER.value

    @property
    def release_type(self) -> ReleaseType:
        """Enumerated type; unrecognized raw types land in OTHER."""
        return ReleaseType.parse(self.type)

    @property
    def is_series_like(self) -> bool:
        """Check if this release is a series pack or a single episode."""
        return self.type in SERIES_TYPES

    @property
    def display_key(self) -> str:
        """Grouping key: title, else raw name, else a placeholder."""
        return self.title or self.name or UNKNOWN_TITLE

    @property
    def is_complete(self) -> bool:
        """Check if the torrent is in a healthy state."""
        return self.state not in ReleaseState.INCOMPLETE


class TitlesResponse(BaseModel):
    """Payload returned by the titles endpoint."""

    titles: list[Release] = Field(default_factory=list)
    total: int = 0

    @field_validator("titles", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return value or []
