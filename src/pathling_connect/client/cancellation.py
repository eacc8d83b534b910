"""
Cooperative Cancellation

A CancelTokenSource hands out a CancelToken that requests can watch. Calling
cancel() wakes every request waiting on the token; the request resolves to
None instead of a result or an error.
"""

import asyncio
from typing import Optional


class CancelToken:
    """Read side of a cancellation: observed by in-flight requests."""

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()

    def _set(self, reason: Optional[str]) -> None:
        self.reason = reason
        self._event.set()


class CancelTokenSource:
    """Write side of a cancellation: owned by whoever started the request."""

    def __init__(self):
        self.token = CancelToken()

    def cancel(self, reason: Optional[str] = None) -> None:
        if not self.token.cancelled:
            self.token._set(reason)

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled


class RequestCancelled(Exception):
    """Raised inside the client when a token fires; never escapes it."""
    pass
