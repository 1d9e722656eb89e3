"""
Fire-and-forget delivery of booking notifications.

A notification never affects the booking that triggered it: failures are
logged here and go no further.
"""

import asyncio
from typing import Awaitable, Set

from src.platform.logging.loguru_io import Logger


class NotificationDispatcher:
    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task] = set()

    def dispatch(self, notification: Awaitable[None], *, description: str) -> None:
        task = asyncio.ensure_future(self._run(notification, description=description))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, notification: Awaitable[None], *, description: str) -> None:
        try:
            await notification
        except Exception as e:
            Logger.base.exception(f'📧 [NOTIFY] {description} failed: {e}')

    async def drain(self) -> None:
        """Wait for in-flight notifications (shutdown, tests)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    @property
    def in_flight(self) -> int:
        return len(self._tasks)
