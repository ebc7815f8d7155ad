"""Bearer token acquisition for guest and organization sessions."""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TypeVar

from pydantic import BaseModel, Field

from src.config import CommerceConfig
from src.services.commerce.client import SFCCClient, get_sfcc_client
from src.services.commerce.errors import AuthError, BackendError

logger = logging.getLogger(__name__)

# Tokens are refreshed this many seconds before the backend expires them.
EXPIRY_SKEW_SECONDS = 30
DEFAULT_EXPIRES_IN = 1800

T = TypeVar("T")


class AuthMode(str, Enum):
    GUEST = "guest"
    ORGANIZATION = "organization"


class BearerToken(BaseModel):
    """Access token plus the moment it stops being usable."""

    access_token: str
    mode: AuthMode
    expires_at: float = Field(default=0.0)

    def is_fresh(self, now: float | None = None) -> bool:
        current = time.time() if now is None else now
        return current < self.expires_at - EXPIRY_SKEW_SECONDS


class AuthProvider:
    """Exchanges client credentials for bearer tokens.

    When ``config.token_cache_enabled`` is set, one token per mode is kept in
    process memory until shortly before it expires. Otherwise every call
    performs a fresh exchange.
    """

    def __init__(self, config: CommerceConfig, client: SFCCClient) -> None:
        self._config = config
        self._client = client
        self._tokens: dict[AuthMode, BearerToken] = {}

    @property
    def default_mode(self) -> AuthMode:
        return AuthMode(self._config.auth_mode)

    async def get_token(self, mode: AuthMode | str | None = None) -> BearerToken:
        """Return a bearer token for ``mode`` (the configured mode by default)."""

        resolved = AuthMode(mode) if mode is not None else self.default_mode
        if self._config.token_cache_enabled:
            cached = self._tokens.get(resolved)
            if cached is not None and cached.is_fresh():
                logger.debug("Using cached %s token", resolved.value)
                return cached

        token = await self._exchange(resolved)
        if self._config.token_cache_enabled:
            self._tokens[resolved] = token
        return token

    def invalidate(self, mode: AuthMode | str | None = None) -> None:
        """Forget cached tokens for one mode, or for all modes."""
        if mode is None:
            self._tokens.clear()
        else:
            self._tokens.pop(AuthMode(mode), None)

    async def authorized(
        self,
        call: Callable[[str], Awaitable[T]],
        mode: AuthMode | str | None = None,
    ) -> T:
        """Run ``call`` with an access token, re-authenticating once on a 401.

        A rejected token is dropped from the cache so the retry exchanges
        credentials again. A second rejection propagates.
        """

        token = await self.get_token(mode)
        try:
            return await call(token.access_token)
        except BackendError as exc:
            if not exc.is_unauthorized:
                raise
            logger.warning("Backend rejected %s token; re-authenticating", token.mode.value)
            self.invalidate(token.mode)

        token = await self.get_token(token.mode)
        return await call(token.access_token)

    async def _exchange(self, mode: AuthMode) -> BearerToken:
        if not self._config.credentials_configured:
            raise AuthError("Commerce client credentials are not configured")

        logger.debug("Requesting %s access token", mode.value)
        try:
            if mode is AuthMode.GUEST:
                response = await self._client.request_guest_token()
            else:
                response = await self._client.request_organization_token()
        except BackendError as exc:
            logger.error(
                "Token exchange failed: %s",
                exc,
                extra={"mode": mode.value, "status_code": exc.status_code},
            )
            raise AuthError("Failed to retrieve access token") from exc

        if not response.access_token:
            raise AuthError("Failed to retrieve access token")

        expires_in = response.expires_in or DEFAULT_EXPIRES_IN
        logger.info("Acquired %s token", mode.value, extra={"expires_in": expires_in})
        return BearerToken(
            access_token=response.access_token,
            mode=mode,
            expires_at=time.time() + expires_in,
        )


_auth_provider: AuthProvider | None = None


def get_auth_provider() -> AuthProvider:
    """Return the process-wide auth provider."""

    global _auth_provider
    if _auth_provider is None:
        client = get_sfcc_client()
        _auth_provider = AuthProvider(client.config, client)
    return _auth_provider
