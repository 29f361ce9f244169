"""Mixin classes for Pydantic models.

Provides reusable properties for common model patterns.
"""

from __future__ import annotations


class EpisodeCodeMixin:
    """Mixin providing an episode_code property.

    Requires the model to have optional season and episode fields. Either
    number may be missing on a parsed release, so the code degrades to the
    part that is known.

    Example:
        ```python
        class Episode(EpisodeCodeMixin, BaseModel):
            season: int | None = None
            episode: int | None = None

        Episode(season=1, episode=5).episode_code  # "S01E05"
        Episode(season=2).episode_code  # "S02"
        ```
    """

    season: int | None
    episode: int | None

    @property
    def episode_code(self) -> str:
        """Get the episode code in S01E05 format ("" when neither is known)."""
        parts = []
        if self.season is not None:
            parts.append(f"S{self.season:02d}")
        if self.episode is not None:
            parts.append(f"E{self.episode:02d}")
        return "".join(parts)


class SizeMixin:
    """Mixin for models carrying a byte size."""

    size: int

    @property
    def size_gb(self) -> float:
        """Size in GiB."""
        return self.size / (1024**3)
