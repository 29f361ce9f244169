"""Client for the torrent manager's web API.

Supplies the flat release collection for an instance and forwards torrent
actions. Authentication is handled outside this client.
"""

from __future__ import annotations

from collections.abc import Iterable

import httpx
from pydantic import ValidationError

from titlescope.api import (
    APIConnectionError,
    APIError,
    APINotFoundError,
    APIRateLimitError,
    BaseAPIClient,
    filters_param,
)
from titlescope.models import TitlesResponse
from titlescope.titles.actions import TorrentAction, normalize_hashes, parse_action
from titlescope.titles.filters import TitleFilter


class QuiError(APIError):
    """Base exception for torrent manager API errors."""

    pass


class QuiConnectionError(QuiError, APIConnectionError):
    """The torrent manager could not be reached."""

    pass


class QuiNotFoundError(QuiError, APINotFoundError):
    """Instance or torrent not found."""

    pass


class QuiRateLimitError(QuiError, APIRateLimitError):
    """Rate limit exceeded."""

    def __init__(self, retry_after: int | None = None) -> None:
        super().__init__(retry_after=retry_after)


class QuiClient(BaseAPIClient):
    """Client for the titles and torrent action endpoints of one server."""

    DEFAULT_TIMEOUT = 30.0

    _error_cls = QuiError
    _connection_error_cls = QuiConnectionError
    _not_found_cls = QuiNotFoundError
    _rate_limit_cls = QuiRateLimitError
    _error_message_key = "error"
    _api_name = "qui"

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Server URL, e.g. http://localhost:7476. Read from config if not given.
            timeout: Request timeout in seconds. Read from config if not given.
        """
        super().__init__()

        if base_url is None or timeout is None:
            from titlescope.config import get_config

            cfg = get_config()
            base_url = base_url or cfg.qui.url
            timeout = timeout if timeout is not None else cfg.qui.timeout

        if not base_url:
            raise QuiError("Server URL not provided. Configure url in the [qui] section.")

        self.base_url = base_url.rstrip("/")
        self._timeout = timeout

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self._timeout,
                headers={"Accept": "application/json"},
            )
        return self._client

    def get_titles(self, instance_id: int, title_filter: TitleFilter | None = None) -> TitlesResponse:
        """Fetch the parsed release collection of an instance.

        Args:
            instance_id: Torrent client instance ID.
            title_filter: Optional server-side filter.

        Returns:
            The releases and their count.

        Raises:
            QuiError: If the request fails or the payload is malformed.
        """
        response = self._request(
            "GET",
            f"/api/instances/{instance_id}/titles",
            params=filters_param(title_filter),
        )
        data = self._handle_response(response)

        try:
            return TitlesResponse.model_validate(data)
        except ValidationError as e:
            raise QuiError(f"Malformed titles response: {e}") from e

    def torrent_action(self, instance_id: int, torrent_hash: str, action: str | TorrentAction) -> None:
        """Apply an action to a single torrent."""
        resolved = parse_action(action)
        response = self._request(
            "POST", f"/api/instances/{instance_id}/torrents/{torrent_hash}/{resolved.value}"
        )
        self._handle_response(response)

    def bulk_action(
        self, instance_id: int, hashes: Iterable[str], action: str | TorrentAction
    ) -> None:
        """Apply an action to several torrents in one request."""
        resolved = parse_action(action)
        response = self._request(
            "POST",
            f"/api/instances/{instance_id}/torrents/bulk/{resolved.value}",
            json={"hashes": normalize_hashes(hashes)},
        )
        self._handle_response(response)

    def set_category(self, instance_id: int, torrent_hash: str, category: str) -> None:
        """Change the category of a single torrent."""
        response = self._request(
            "POST",
            f"/api/instances/{instance_id}/torrents/{torrent_hash}/category",
            json={"category": category},
        )
        self._handle_response(response)

    def for_instance(self, instance_id: int) -> InstanceActions:
        """Action handler bound to one instance."""
        return InstanceActions(self, instance_id)


class InstanceActions:
    """Adapts :class:`QuiClient` to the engine's action handler hook."""

    def __init__(self, client: QuiClient, instance_id: int) -> None:
        self.client = client
        self.instance_id = instance_id

    def perform(self, action: TorrentAction, hashes: list[str]) -> None:
        """Send one request per torrent, or a bulk request for several."""
        if len(hashes) == 1:
            self.client.torrent_action(self.instance_id, hashes[0], action)
        else:
            self.client.bulk_action(self.instance_id, hashes, action)

    def change_category(self, hashes: list[str], category: str) -> None:
        """Change the category of each torrent."""
        for torrent_hash in hashes:
            self.client.set_category(self.instance_id, torrent_hash, category)
