"""
Cooperative cancellation for long-running browser flows.
"""
from __future__ import annotations

import asyncio
from typing import Optional

from core.exceptions import OperationCancelledException


class CancellationToken:
    """asyncio.Event backed token threaded through every suspension point."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "Operation cancelled") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledException(self.reason or "Operation cancelled")

    async def sleep(self, seconds: float) -> None:
        """Sleep for `seconds`, waking early and raising if cancelled."""
        self.raise_if_cancelled()
        if seconds <= 0:
            return
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return
        self.raise_if_cancelled()


async def pause(seconds: float, cancel: Optional[CancellationToken] = None) -> None:
    """Sleep through the token when one is given, plain asyncio.sleep otherwise."""
    if cancel is None:
        await asyncio.sleep(max(0.0, seconds))
    else:
        await cancel.sleep(seconds)
