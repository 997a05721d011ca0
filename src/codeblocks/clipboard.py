"""Copy-to-clipboard with a self-reverting acknowledgment.

The renderer never touches the system clipboard.  The embedding
application supplies an async ``writer`` (browser bridge, pyperclip
wrapper, test double) and ``CopyAction`` handles the UI state around
it:

  - on success ``copied`` flips to True and a timer scheduled on the
    running loop flips it back after ``ack_seconds``;
  - a second copy inside the window cancels the pending timer and
    starts a fresh one, so an old timer can never clear a new
    acknowledgment early;
  - a failed write is logged and leaves ``copied`` False.  Nothing is
    retried or raised to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from config import settings

logger = logging.getLogger(__name__)

ClipboardWriter = Callable[[str], Awaitable[None]]


class CopyAction:
    def __init__(
        self,
        text: str,
        writer: ClipboardWriter,
        *,
        ack_seconds: float | None = None,
    ) -> None:
        self.text = text
        self._writer = writer
        self._ack_seconds = settings.copy_ack_seconds if ack_seconds is None else ack_seconds
        self._copied = False
        self._timer: asyncio.TimerHandle | None = None

    @property
    def copied(self) -> bool:
        return self._copied

    async def copy(self) -> bool:
        """Write ``text`` to the clipboard.  Returns True on success."""
        try:
            await self._writer(self.text)
        except Exception:
            logger.warning("Failed to copy code to clipboard", exc_info=True)
            return False
        self._acknowledge()
        return True

    def trigger(self) -> asyncio.Task[bool]:
        """Fire-and-forget form of :meth:`copy` for UI event handlers."""
        return asyncio.get_running_loop().create_task(self.copy())

    def cancel(self) -> None:
        """Drop any pending acknowledgment (e.g. when the block unmounts)."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._copied = False

    def _acknowledge(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._copied = True
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._ack_seconds, self._expire)

    def _expire(self) -> None:
        self._copied = False
        self._timer = None
