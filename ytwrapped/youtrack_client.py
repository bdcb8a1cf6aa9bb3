"""Async YouTrack API client with error classification and offset pagination."""

import logging
from types import TracebackType
from typing import Any, Self, TYPE_CHECKING, cast
from collections.abc import AsyncIterator, Mapping

import httpx

from ytwrapped.errors import AuthError, ProtocolError, TransportError

if TYPE_CHECKING:
    from ytwrapped.models import Credential

LOGGER = logging.getLogger(__name__)

PAGE_SIZE = 100
_AUTH_FAILURE_STATUSES = frozenset({401, 403})
_UNEXPECTED_PAYLOAD_MESSAGE = "Unexpected response payload type"


class YouTrackClient:
    """High-level asynchronous client for reading from the YouTrack REST API."""

    def __init__(
        self,
        credential: "Credential",
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Configure the HTTP client with bearer authentication.

        No timeout is applied by default: a stalled request stalls the run.
        """
        self._credential = credential
        headers = {
            "User-Agent": "ytwrapped/0.1",
            "Accept": "application/json",
            "Authorization": f"Bearer {credential.token.get_secret_value()}",
        }
        self._client = httpx.AsyncClient(
            base_url=f"{credential.base_url}/api",
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        """Return the YouTrack instance URL without the API suffix."""
        return self._credential.base_url

    async def __aenter__(self) -> Self:
        """Enter the async context manager and return the client."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Ensure the underlying HTTP client is closed when exiting the context."""
        del exc_type, exc, tb
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
    ) -> httpx.Response:
        """Perform a single HTTP request and classify failures."""
        LOGGER.debug("%s %s params=%s", method, path, dict(params or {}))
        try:
            response = await self._client.request(method, path, params=params)
        except httpx.TransportError as exc:
            message = f"Could not connect to YouTrack at {self._credential.base_url}: {exc}"
            raise TransportError(message) from exc
        status_code = response.status_code
        LOGGER.debug("%s %s -> %s", method, path, status_code)
        if status_code in _AUTH_FAILURE_STATUSES:
            raise AuthError(f"YouTrack API returned {status_code}: {response.text}", status_code=status_code)
        if not response.is_success:
            raise ProtocolError(
                f"YouTrack API error ({status_code}): {response.text}",
                status_code=status_code,
                body=response.text,
            )
        return response

    async def get_json(self, path: str, *, params: Mapping[str, Any] | None = None) -> Any:
        """Issue a GET request and return the decoded JSON payload."""
        response = await self.request("GET", path, params=params)
        return self.parse_json(response)

    async def paginate(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
    ) -> AsyncIterator[list[dict[str, Any]]]:
        """Yield successive pages of a `$top`/`$skip` paginated collection.

        Pages are requested one after another starting at offset 0. Iteration
        stops at the first empty page or after the first page shorter than
        PAGE_SIZE.
        """
        skip = 0
        while True:
            current_params: dict[str, Any] = dict(params or {})
            current_params.update({"$top": PAGE_SIZE, "$skip": skip})
            payload = await self.get_json(path, params=current_params)
            if not isinstance(payload, list):
                raise ProtocolError(_UNEXPECTED_PAYLOAD_MESSAGE, body=str(payload))
            page = cast("list[dict[str, Any]]", payload)
            if not page:
                break
            yield page
            if len(page) < PAGE_SIZE:
                break
            skip += PAGE_SIZE

    def parse_json(self, response: httpx.Response) -> Any:
        """Decode a JSON response or raise a ProtocolError on failure."""
        try:
            return response.json()
        except ValueError as exc:
            content_type = response.headers.get("Content-Type", "unknown")
            message = (
                "YouTrack API returned an invalid JSON payload "
                f"(status {response.status_code}, content-type {content_type})"
            )
            raise ProtocolError(message, status_code=response.status_code, body=response.text) from exc
