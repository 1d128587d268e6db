"""OAuth 2.0 credentials, token files, and access token refresh."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlencode

import httpx

from gworkspace_cli.core.config import GoogleSettings

from .base import error_detail

logger = logging.getLogger(__name__)

TOKEN_GITIGNORE_PATTERN = ".gworkspace/*.local.*"


class AuthError(RuntimeError):
    """Raised when credentials or tokens are missing or rejected."""


@dataclass(frozen=True, slots=True)
class ClientCredentials:
    """OAuth client identifiers from the Google Cloud console."""

    client_id: str
    client_secret: str


def load_client_credentials(path: Path) -> ClientCredentials:
    """Read an OAuth client file.

    Accepts the ``{"installed": {...}}`` and ``{"web": {...}}`` layouts
    downloaded from the console as well as a flat object.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise AuthError(f"Credentials not found at {path}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise AuthError(f"Unable to read credentials from {path}: {exc}") from exc

    creds = data.get("installed") or data.get("web") or data
    client_id = creds.get("client_id")
    client_secret = creds.get("client_secret")
    if not client_id or not client_secret:
        raise AuthError(f"Missing client_id or client_secret in {path}")
    return ClientCredentials(client_id=client_id, client_secret=client_secret)


def find_token_path(candidates: Iterable[Path]) -> Path | None:
    """Return the first candidate that exists, in priority order."""
    for candidate in candidates:
        if candidate.is_file():
            logger.debug("Using token file %s", candidate)
            return candidate
    return None


def load_refresh_token(path: Path) -> str:
    """Return the refresh token stored in ``path``."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise AuthError(f"Failed to load token from {path}: {exc}") from exc
    refresh_token = data.get("refresh_token")
    if not refresh_token:
        raise AuthError(f"Token file {path} has no refresh_token")
    return refresh_token


def save_token(path: Path, tokens: dict[str, Any]) -> Path:
    """Persist the long-lived parts of a token response."""
    refresh_token = tokens.get("refresh_token")
    if not refresh_token:
        raise AuthError(
            "No refresh token received. This can happen if the app was already "
            "authorized: remove its access at https://myaccount.google.com/permissions "
            "and run auth again."
        )
    payload = {
        "refresh_token": refresh_token,
        "scope": tokens.get("scope"),
        "token_type": tokens.get("token_type"),
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    logger.info("Token saved to %s", path)
    return path


def ensure_gitignore(root: Path, pattern: str = TOKEN_GITIGNORE_PATTERN) -> bool:
    """Make sure ``pattern`` is ignored in ``root/.gitignore``.

    Returns ``True`` when the file was created or changed.
    """
    gitignore = root / ".gitignore"
    entry = f"# gworkspace tokens (per-project auth)\n{pattern}\n"
    if not gitignore.exists():
        gitignore.write_text(entry, encoding="utf-8")
        logger.info("Created %s with %s", gitignore, pattern)
        return True

    content = gitignore.read_text(encoding="utf-8")
    if pattern in content:
        return False
    separator = "\n" if content.endswith("\n") else "\n\n"
    gitignore.write_text(content + separator + entry, encoding="utf-8")
    logger.info("Added %s to %s", pattern, gitignore)
    return True


class GoogleOAuthClient:
    """Authorization code and refresh token exchanges against Google."""

    OAUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"

    def __init__(
        self,
        credentials: ClientCredentials,
        *,
        redirect_uri: str,
        scopes: list[str],
        timeout: float = 30.0,
    ) -> None:
        """Initialize the client with OAuth identifiers."""
        self._credentials = credentials
        self._redirect_uri = redirect_uri
        self._scopes = scopes
        self._timeout = timeout

    def get_authorization_url(self, state: str | None = None) -> str:
        """Generate OAuth 2.0 authorization URL for user consent."""
        params = {
            "client_id": self._credentials.client_id,
            "redirect_uri": self._redirect_uri,
            "response_type": "code",
            "scope": " ".join(self._scopes),
            "access_type": "offline",  # Get refresh token
            "prompt": "consent",  # Force consent to get refresh token
        }
        if state:
            params["state"] = state
        return f"{self.OAUTH_URL}?{urlencode(params)}"

    async def exchange_code_for_tokens(self, code: str) -> dict[str, Any]:
        """Exchange authorization code for access and refresh tokens."""
        tokens = await self._post_token(
            {
                "code": code,
                "client_id": self._credentials.client_id,
                "client_secret": self._credentials.client_secret,
                "redirect_uri": self._redirect_uri,
                "grant_type": "authorization_code",
            }
        )
        logger.info("Successfully exchanged authorization code for tokens")
        return tokens

    async def refresh_access_token(self, refresh_token: str) -> dict[str, Any]:
        """Refresh the access token using the refresh token."""
        logger.debug("Refreshing access token")
        return await self._post_token(
            {
                "client_id": self._credentials.client_id,
                "client_secret": self._credentials.client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            }
        )

    async def _post_token(self, data: dict[str, str]) -> dict[str, Any]:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                response = await client.post(self.TOKEN_URL, data=data)
            except httpx.HTTPError as exc:
                raise AuthError(f"Token request failed: {exc}") from exc

        if response.status_code != 200:
            logger.error("Token request failed: %s", response.status_code)
            logger.debug("Response: %s", response.text)
            raise AuthError(
                f"Token request rejected ({response.status_code}): {error_detail(response)}"
            )
        return response.json()


class AccessTokenProvider:
    """Refresh an access token on first use and reuse it afterwards."""

    def __init__(self, oauth_client: GoogleOAuthClient, refresh_token: str) -> None:
        """Bind the provider to a refresh token."""
        self._oauth_client = oauth_client
        self._refresh_token = refresh_token
        self._access_token: str | None = None

    async def get_token(self) -> str:
        """Return a bearer token, refreshing it if none is cached."""
        if self._access_token is None:
            tokens = await self._oauth_client.refresh_access_token(self._refresh_token)
            access_token = tokens.get("access_token")
            if not access_token:
                raise AuthError("Token response did not contain an access_token")
            self._access_token = access_token
        return self._access_token

    def invalidate(self) -> None:
        """Forget the cached access token."""
        self._access_token = None


def build_oauth_client(settings: GoogleSettings) -> GoogleOAuthClient:
    """Create an OAuth client from the configured credentials file."""
    credentials = load_client_credentials(settings.resolved_credentials_path())
    return GoogleOAuthClient(
        credentials,
        redirect_uri=settings.redirect_uri,
        scopes=settings.scopes,
        timeout=settings.timeout_seconds,
    )


def build_token_provider(settings: GoogleSettings) -> AccessTokenProvider:
    """Locate the token file and return a provider for API calls."""
    oauth_client = build_oauth_client(settings)
    token_path = find_token_path(settings.token_candidates())
    if token_path is None:
        raise AuthError(
            "Token not found. Run: gworkspace auth\n"
            f"Token will be saved to: {settings.project_token_path}"
        )
    return AccessTokenProvider(oauth_client, load_refresh_token(token_path))


__all__ = [
    "AccessTokenProvider",
    "AuthError",
    "ClientCredentials",
    "GoogleOAuthClient",
    "TOKEN_GITIGNORE_PATTERN",
    "build_oauth_client",
    "build_token_provider",
    "ensure_gitignore",
    "find_token_path",
    "load_client_credentials",
    "load_refresh_token",
    "save_token",
]
