"""Helper functions for API clients."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx

    from titlescope.titles.filters import TitleFilter


def safe_json(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body.

    Returns:
        The decoded object, or an empty dict for an empty, invalid or
        non-object body.
    """
    if not response.content:
        return {}
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def filters_param(title_filter: TitleFilter | None) -> dict[str, str]:
    """Encode a filter as the ``filters`` query parameter.

    Args:
        title_filter: Filter to send, or None.

    Returns:
        ``{"filters": "<json>"}``, or an empty dict when nothing is constrained.
    """
    if title_filter is None or title_filter.is_empty:
        return {}
    return {"filters": json.dumps(title_filter.to_params(), separators=(",", ":"))}
