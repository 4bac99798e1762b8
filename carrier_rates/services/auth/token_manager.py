"""
Client-credentials token management with in-memory caching.

Tokens live only in memory on the provider instance; one provider is shared
by every request made against a carrier. Concurrent callers that find no
usable token share a single refresh instead of each hitting the token endpoint.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .oauth import OAuthClient

logger = logging.getLogger(__name__)

REFRESH_BUFFER_MS = 60000


def _now_ms() -> float:
    return time.time() * 1000


@dataclass(frozen=True)
class CachedToken:
    access_token: str
    expires_at_ms: float


class ClientCredentialsAuthProvider:
    """
    Hands out `Authorization` header values backed by a cached OAuth token.
    """

    def __init__(self, oauth_client: OAuthClient, now: Optional[Callable[[], float]] = None):
        self.oauth_client = oauth_client
        self._now = now or _now_ms
        self._cached: Optional[CachedToken] = None
        self._refresh_task: Optional[asyncio.Task] = None

    @property
    def cached_token(self) -> Optional[CachedToken]:
        return self._cached

    def invalidate(self):
        """Drop the cached token so the next call fetches a new one"""
        self._cached = None
        logger.info("Cleared cached access token")

    async def get_authorization_header(self) -> str:
        """
        Get a valid `Bearer` header value, refreshing if necessary

        Raises:
            AuthError: If the token endpoint rejects the credentials
        """
        cached = self._cached
        if cached and self._now() + REFRESH_BUFFER_MS < cached.expires_at_ms:
            logger.debug("Using cached access token from memory")
            return f"Bearer {cached.access_token}"

        # No await between the check and the assignment, so concurrent
        # callers on the same loop always see the same task.
        if self._refresh_task is None:
            logger.info("No valid access token in memory, refreshing...")
            self._refresh_task = asyncio.ensure_future(self._refresh())

        # shield: a cancelled waiter must not cancel the shared refresh
        return await asyncio.shield(self._refresh_task)

    async def _refresh(self) -> str:
        try:
            token = await self.oauth_client.acquire_token()
            self._cached = CachedToken(
                access_token=token.access_token,
                expires_at_ms=self._now() + token.expires_in_seconds * 1000 - REFRESH_BUFFER_MS,
            )
            logger.info(f"Successfully refreshed access token (expires in {token.expires_in_seconds}s)")
            return f"Bearer {token.access_token}"
        except Exception as e:
            logger.error(f"Token refresh failed: {str(e)}")
            raise
        finally:
            self._refresh_task = None
