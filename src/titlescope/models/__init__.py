"""Shared models and mixins."""

from titlescope.models.mixins import EpisodeCodeMixin, SizeMixin
from titlescope.models.release import (
    SERIES_TYPES,
    UNKNOWN_TITLE,
    Release,
    ReleaseState,
    ReleaseType,
    TitlesResponse,
)

__all__ = [
    "EpisodeCodeMixin",
    "SizeMixin",
    "Release",
    "ReleaseState",
    "ReleaseType",
    "TitlesResponse",
    "SERIES_TYPES",
    "UNKNOWN_TITLE",
]
