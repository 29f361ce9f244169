"""HTTP client plumbing shared by the service clients.

Subclasses pick their own exception classes; this module maps transport
failures and HTTP status codes onto them.
"""

from __future__ import annotations

from typing import Any, Self

import httpx

from titlescope.api.helpers import safe_json


class APIError(Exception):
    """Any failure talking to a remote service."""

    pass


class APIConnectionError(APIError):
    """The server could not be reached or timed out."""

    pass


class APINotFoundError(APIError):
    """The server answered 404."""

    pass


class APIRateLimitError(APIError):
    """The server answered 429.

    Attributes:
        retry_after: Seconds to wait before retrying, when the server said.
    """

    def __init__(self, retry_after: int | None = None, message: str | None = None) -> None:
        self.retry_after = retry_after
        super().__init__(message or f"Rate limit exceeded. Retry after {retry_after}s")


class BaseAPIClient:
    """Lazily created ``httpx.Client`` plus status-code to exception mapping.

    Subclasses implement ``_get_client`` and may override:
        - _error_cls, _connection_error_cls, _not_found_cls, _rate_limit_cls
        - _error_message_key: JSON key holding the server's error text
        - _api_name: Service name used in messages
    """

    _error_cls: type[APIError] = APIError
    _connection_error_cls: type[APIConnectionError] = APIConnectionError
    _not_found_cls: type[APINotFoundError] = APINotFoundError
    _rate_limit_cls: type[APIRateLimitError] = APIRateLimitError
    _error_message_key: str = "error"
    _api_name: str = "API"

    def __init__(self) -> None:
        self._client: httpx.Client | None = None

    def close(self) -> None:
        """Release the underlying connection pool."""
        client, self._client = self._client, None
        if client is not None:
            client.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _get_client(self) -> httpx.Client:
        raise NotImplementedError

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request. Timeouts and transport failures raise the connection error."""
        try:
            return self._get_client().request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise self._connection_error_cls(f"{self._api_name} request timed out") from e
        except httpx.TransportError as e:
            raise self._connection_error_cls(f"Cannot reach {self._api_name}: {e}") from e

    def _handle_response(self, response: httpx.Response) -> dict[str, Any]:
        """Return the decoded body of a 2xx response, raise for anything else."""
        status = response.status_code
        if 200 <= status < 300:
            return safe_json(response)

        if status == 404:
            raise self._not_found_cls(f"{self._api_name}: resource not found")

        if status == 429:
            header = response.headers.get("Retry-After")
            raise self._rate_limit_cls(int(header) if header and header.isdigit() else None)

        detail = safe_json(response).get(self._error_message_key) or response.text or "Unknown error"
        raise self._error_cls(f"{self._api_name} API error ({status}): {detail}")
