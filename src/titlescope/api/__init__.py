"""Shared API client infrastructure."""

from titlescope.api.base import (
    APIConnectionError,
    APIError,
    APINotFoundError,
    APIRateLimitError,
    BaseAPIClient,
)
from titlescope.api.helpers import filters_param, safe_json

__all__ = [
    "APIError",
    "APIConnectionError",
    "APINotFoundError",
    "APIRateLimitError",
    "BaseAPIClient",
    "filters_param",
    "safe_json",
]
