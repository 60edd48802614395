"""Shared upload-token handle for concurrent workers."""

from typing import Awaitable, Callable

from common.logging_config import get_logger
from common.types import UploadCredential

logger = get_logger(__name__)


class CredentialStore:
    """
    Holds the current upload credential.

    Workers read current at each attempt. refresh() fetches a new token and
    swaps the whole value in; two workers refreshing at once both succeed and
    the last one to finish wins.
    """

    def __init__(self, fetch: Callable[[], Awaitable[UploadCredential]], initial: UploadCredential):
        self._fetch = fetch
        self._current = initial
        self.refresh_count = 0

    @classmethod
    async def create(cls, fetch: Callable[[], Awaitable[UploadCredential]]) -> 'CredentialStore':
        """Fetch the first credential and wrap it in a store."""
        return cls(fetch, await fetch())

    @property
    def current(self) -> UploadCredential:
        return self._current

    async def refresh(self) -> UploadCredential:
        """Fetch a fresh credential and replace the current one."""
        credential = await self._fetch()
        age = self._current.age(now=credential.fetched_at)
        self._current = credential
        self.refresh_count += 1
        logger.info(f"Upload token refreshed after {age:.1f}s (refresh #{self.refresh_count})")
        return credential
