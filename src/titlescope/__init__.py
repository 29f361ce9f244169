"""titlescope - rank, deduplicate and browse parsed torrent releases."""

from titlescope._version import __version__

__all__ = ["__version__"]
