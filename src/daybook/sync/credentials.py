"""Bearer credentials for cloud providers.

Each provider adapter owns one :class:`CredentialCache`. The cache hands
out the current access token while it is unexpired and asks its
:class:`TokenSource` for a new one otherwise. Token acquisition itself
(OAuth consent, refresh tokens) happens outside daybook; sources only
fetch an already-issued bearer token.
"""

from __future__ import annotations

import asyncio
import urllib.parse
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Protocol, runtime_checkable

from loguru import logger

from daybook.core.exceptions import APIError, AuthenticationError

from .http import HttpResponse, http_request

# Treat tokens this close to expiry as already expired
EXPIRY_LEEWAY = timedelta(seconds=60)


@dataclass(frozen=True)
class AccessToken:
    """A bearer token. ``expires_at=None`` means it does not expire."""

    token: str
    expires_at: datetime | None = None

    def is_fresh(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return True
        now = now or datetime.now(timezone.utc)
        return self.expires_at - EXPIRY_LEEWAY > now


@runtime_checkable
class TokenSource(Protocol):
    """Blocking fetch of a bearer token. Raises AuthenticationError on failure."""

    def fetch(self) -> AccessToken: ...


class StaticTokenSource:
    """A token supplied up front (secrets file, env var)."""

    def __init__(self, token: str | None, expires_at: datetime | None = None):
        self._token = token
        self._expires_at = expires_at

    def fetch(self) -> AccessToken:
        if not self._token:
            raise AuthenticationError("No access token configured")
        return AccessToken(self._token, self._expires_at)


def _parse_expiry(value) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


class ConnectorTokenSource:
    """Fetch a provider token from a hosted connections API.

    Calls ``https://{hostname}/api/v2/connection?include_secrets=true&connector_names={connector}``
    and reads ``settings.access_token`` (or ``settings.oauth.credentials.access_token``)
    and ``settings.expires_at`` from the first item.

    Args:
        hostname: Connections API host.
        identity_token: Token identifying this deployment to the API.
        connector_name: e.g. ``"google-drive"`` or ``"onedrive"``.
        identity_header: Header carrying ``identity_token``.
    """

    def __init__(
        self,
        hostname: str | None,
        identity_token: str | None,
        connector_name: str,
        identity_header: str = "X_REPLIT_TOKEN",
        transport=http_request,
    ):
        self.hostname = hostname
        self.identity_token = identity_token
        self.connector_name = connector_name
        self.identity_header = identity_header
        self._transport = transport

    def fetch(self) -> AccessToken:
        if not self.hostname or not self.identity_token:
            raise AuthenticationError(f"{self.connector_name} integration not available")

        query = urllib.parse.urlencode({"include_secrets": "true", "connector_names": self.connector_name})
        url = f"https://{self.hostname}/api/v2/connection?{query}"
        try:
            resp: HttpResponse = self._transport(
                "GET",
                url,
                headers={"Accept": "application/json", self.identity_header: self.identity_token},
            )
            data = resp.json() if resp.ok else {}
        except (APIError, ValueError) as e:
            raise AuthenticationError(f"{self.connector_name} connection lookup failed: {e}") from e

        items = data.get("items") if isinstance(data, dict) else None
        settings = ((items[0] or {}).get("settings") or {}) if items else {}
        oauth_credentials = (settings.get("oauth") or {}).get("credentials") or {}
        token = settings.get("access_token") or oauth_credentials.get("access_token")
        if not token:
            raise AuthenticationError(f"{self.connector_name} not connected")

        # A token without a stated expiry is re-fetched on every use
        expires_at = _parse_expiry(settings.get("expires_at")) or datetime.now(timezone.utc)
        return AccessToken(token, expires_at)


class CredentialCache:
    """Per-provider token cache with explicit refresh.

    Args:
        source: Where fresh tokens come from.
        name: Provider name, for log messages.
    """

    def __init__(self, source: TokenSource, name: str = "provider"):
        self.source = source
        self.name = name
        self._token: AccessToken | None = None

    @property
    def cached(self) -> AccessToken | None:
        return self._token

    async def get_token(self) -> str:
        """Current bearer token, refreshing when missing or expired.

        Raises:
            AuthenticationError: A fresh token could not be obtained.
        """
        if self._token is not None and self._token.is_fresh():
            return self._token.token
        return await self.refresh()

    async def refresh(self) -> str:
        """Discard the cached token and fetch a new one."""
        self._token = None
        try:
            token = await asyncio.to_thread(self.source.fetch)
        except AuthenticationError:
            raise
        except Exception as e:
            raise AuthenticationError(f"{self.name}: credential fetch failed: {e}") from e
        logger.debug(f"Refreshed {self.name} credentials")
        self._token = token
        return token.token

    def invalidate(self) -> None:
        self._token = None
