"""Torrent manager web API integration."""

from titlescope.qui.client import (
    InstanceActions,
    QuiClient,
    QuiConnectionError,
    QuiError,
    QuiNotFoundError,
    QuiRateLimitError,
)

__all__ = [
    "QuiClient",
    "InstanceActions",
    "QuiError",
    "QuiConnectionError",
    "QuiNotFoundError",
    "QuiRateLimitError",
]
