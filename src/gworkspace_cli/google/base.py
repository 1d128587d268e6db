"""Shared plumbing for authenticated Google REST calls."""

from __future__ import annotations

import logging
from typing import Any, Protocol
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)


class GoogleApiError(RuntimeError):
    """Raised when a Google API call fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Keep the HTTP status alongside the message."""
        super().__init__(message)
        self.status_code = status_code


class TokenSource(Protocol):
    """Anything able to hand out bearer tokens."""

    async def get_token(self) -> str:
        """Return a valid access token."""
        raise NotImplementedError

    def invalidate(self) -> None:
        """Drop a token the server rejected."""
        raise NotImplementedError


def path_segment(value: str) -> str:
    """Quote ``value`` for use as a single URL path segment."""
    return quote(value, safe="")


def error_detail(response: httpx.Response) -> str:
    """Extract the human readable error from a Google error response."""
    try:
        payload = response.json()
    except ValueError:
        return response.text
    if not isinstance(payload, dict):
        return response.text
    error = payload.get("error")
    if isinstance(error, dict):
        return str(error.get("message") or error)
    description = payload.get("error_description")
    return f"{error}: {description}" if description else str(error or payload)


class GoogleApiClient:
    """Base class issuing bearer-authenticated requests against one API."""

    API_BASE = ""

    def __init__(self, tokens: TokenSource, *, timeout: float = 30.0) -> None:
        """Initialize the client with a token source."""
        self._tokens = tokens
        self._timeout = timeout

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send a request, refreshing the token once if it was rejected."""
        url = f"{self.API_BASE}{path}"
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await self._send(client, method, url, params, json_body)
            if response.status_code == 401:
                logger.warning("Access token rejected, refreshing and retrying")
                self._tokens.invalidate()
                response = await self._send(client, method, url, params, json_body)

        if response.is_error:
            logger.error("%s %s failed: %s", method, url, response.status_code)
            logger.debug("Response: %s", response.text)
            raise GoogleApiError(
                f"{method} {path} failed ({response.status_code}): {error_detail(response)}",
                status_code=response.status_code,
            )
        return response

    async def _send(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        params: dict[str, Any] | None,
        json_body: dict[str, Any] | None,
    ) -> httpx.Response:
        token = await self._tokens.get_token()
        try:
            return await client.request(
                method,
                url,
                params=params,
                json=json_body,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as exc:
            raise GoogleApiError(f"{method} {url} failed: {exc}") from exc

    async def _get_json(self, path: str, **params: Any) -> dict[str, Any]:
        response = await self._request("GET", path, params=params or None)
        return response.json()


__all__ = ["GoogleApiClient", "GoogleApiError", "TokenSource", "error_detail", "path_segment"]
