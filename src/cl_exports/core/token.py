"""Access token refresh ahead of expiry.

Commerce Layer access tokens are short lived. Before each authenticated
poll the refresher checks the expiry claim against a fixed security
margin; when the token is about to expire it waits for the issuer clock
to settle, fetches a new token and hands back the replacement.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from cl_exports.exceptions import AuthRefreshError
from cl_exports.logging import get_logger
from cl_exports.schemas import AccessToken, Credentials

if TYPE_CHECKING:
    from cl_exports.api.auth import AuthClient

logger = get_logger(__name__)

Clock = Callable[[], float]
"""Returns the current time in epoch seconds."""

Sleeper = Callable[[float], Awaitable[None]]
"""Awaits for the given number of seconds."""


class TokenRefresher:
    """Keeps an access token valid across a long-running poll loop.

    Usage:
        refresher = TokenRefresher(credentials, auth_client)
        token = await refresher.ensure_valid(token)
        # token is safe to use for the next call

    The refresher owns no token state: it receives the current token and
    returns either the same object or its replacement.
    """

    def __init__(
        self,
        credentials: Credentials,
        auth: AuthClient,
        *,
        security_margin: int = 2,
        on_refresh: Callable[[AccessToken], None] | None = None,
        clock: Clock = time.time,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        """Initialize the refresher.

        Args:
            credentials: Application credentials used to request new tokens
            auth: Client for the token endpoint
            security_margin: Seconds before expiry at which a refresh is forced
            on_refresh: Called with every new token (e.g. to reconfigure
                        the API client's bearer)
            clock: Source of the current epoch time
            sleep: Awaitable sleep used for the settle delay

        Raises:
            ValueError: If security_margin is not positive
        """
        if security_margin <= 0:
            raise ValueError("security_margin must be a positive number of seconds")
        self._credentials = credentials
        self._auth = auth
        self._margin = security_margin
        self._on_refresh = on_refresh
        self._clock = clock
        self._sleep = sleep

    @property
    def security_margin(self) -> int:
        """Seconds before expiry at which a refresh is forced."""
        return self._margin

    def is_expiring(self, token: AccessToken) -> bool:
        """Check whether the token expires within the security margin."""
        now_ms = self._clock() * 1000
        return (token.claims.exp - self._margin) * 1000 <= now_ms

    async def ensure_valid(self, token: AccessToken) -> AccessToken:
        """Return a token that is safe for the next authenticated call.

        Args:
            token: Current access token

        Returns:
            The same token when it is not close to expiry, otherwise a
            freshly issued one.

        Raises:
            AuthRefreshError: If the token endpoint call fails
        """
        if not self.is_expiring(token):
            return token

        settle = self._margin + 1
        logger.info(
            "Access token expires at {}, refreshing after {}s",
            token.claims.expires_at.isoformat(),
            settle,
        )
        await self._sleep(settle)

        try:
            refreshed = await self._auth.get_access_token(self._credentials)
        except Exception as e:
            raise AuthRefreshError(f"Unable to refresh access token: {e}") from e

        logger.debug("New access token expires at {}", refreshed.claims.expires_at.isoformat())
        if self._on_refresh is not None:
            self._on_refresh(refreshed)
        return refreshed
