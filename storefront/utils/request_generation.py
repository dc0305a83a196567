"""
Request-generation tokens for discarding stale responses.

A page that reloads content (e.g. search-as-you-type) starts a new request
before the previous one has answered. Each request takes a token from
`begin()`; a result is only delivered if its token is still the latest.
"""
import itertools
import logging
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StaleResultError(Exception):
    """A newer request started while this one was still in flight."""

    def __init__(self, token: int, latest: int):
        super().__init__(f"Result for request {token} superseded by request {latest}")
        self.token = token
        self.latest = latest


class RequestGeneration:
    def __init__(self):
        self._counter = itertools.count(1)
        self._latest = 0

    @property
    def latest(self) -> int:
        return self._latest

    def begin(self) -> int:
        self._latest = next(self._counter)
        return self._latest

    def is_current(self, token: int) -> bool:
        return token == self._latest

    async def run_latest(self, factory: Callable[[], Awaitable[T]]) -> T:
        token = self.begin()
        result = await factory()
        if not self.is_current(token):
            logger.debug("Discarding stale result for request %d (latest %d)", token, self._latest)
            raise StaleResultError(token, self._latest)
        return result
