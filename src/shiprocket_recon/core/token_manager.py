"""Token management for Shiprocket API authentication."""

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from shiprocket_recon.core.exceptions import AuthError
from shiprocket_recon.core.logger import setup_logger

logger = setup_logger(__name__)

# Shiprocket tokens are valid for 10 days (240 hours)
TOKEN_LIFETIME_SECONDS = 10 * 24 * 60 * 60


@dataclass
class AuthToken:
    """Bearer credential with its absolute expiry (epoch seconds)."""

    token: str
    expires_at: float


class TokenManager:
    """Caches the Shiprocket bearer token and re-authenticates on expiry.

    `authenticate_fn` performs the credential exchange and returns the raw
    token string. `clock` returns epoch seconds and is injectable so expiry
    can be tested deterministically.
    """

    def __init__(
        self,
        authenticate_fn: Callable[[], Awaitable[str]],
        clock: Callable[[], float] = time.time,
        lifetime_seconds: int = TOKEN_LIFETIME_SECONDS,
    ):
        self._authenticate_fn = authenticate_fn
        self._clock = clock
        self.lifetime_seconds = lifetime_seconds
        self._token: Optional[AuthToken] = None
        self._lock = asyncio.Lock()

    @property
    def current(self) -> Optional[AuthToken]:
        return self._token

    def is_valid(self, token: Optional[AuthToken] = None) -> bool:
        """Check if a token exists and has not reached its expiry."""
        token = token if token is not None else self._token
        return token is not None and self._clock() < token.expires_at

    async def get_valid_token(self) -> str:
        """Return the cached token, authenticating first if it is missing or expired."""
        if self.is_valid():
            return self._token.token
        return await self.authenticate()

    async def authenticate(self) -> str:
        """
        Exchange credentials for a new token.

        Single-flight: callers that queue on the lock while another login is in
        progress receive the token that login produced.

        Raises:
            AuthError: If the credential exchange fails
        """
        stale = self._token
        async with self._lock:
            if self._token is not stale and self.is_valid():
                logger.debug("Reusing token obtained by concurrent login")
                return self._token.token

            logger.info("Authenticating with Shiprocket")
            try:
                raw_token = await self._authenticate_fn()
            except AuthError:
                self._token = None
                raise
            except Exception as e:
                self._token = None
                raise AuthError(f"Shiprocket authentication failed: {e}") from e

            if not raw_token:
                self._token = None
                raise AuthError("Shiprocket authentication returned no token")

            self._token = AuthToken(
                token=raw_token,
                expires_at=self._clock() + self.lifetime_seconds,
            )
            logger.info("Shiprocket token acquired")
            return raw_token

    def invalidate(self, token: Optional[str] = None) -> None:
        """Drop the cached token so the next request logs in again.

        With `token`, only drop the cache if it still holds that token; a
        request rejected with an old token must not discard a newer login.
        """
        if self._token is None:
            return
        if token is not None and self._token.token != token:
            logger.debug("Rejected token already replaced, keeping cached token")
            return
        logger.info("Invalidating cached Shiprocket token")
        self._token = None
