"""
Per-room turn timers.
"""

import asyncio
import logging
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


class TimerSupervisor:
    """
    At most one outstanding turn timer per room.

    arm() always cancels the room's previous timer first, so re-arming is
    safe from any handler. Handles come from loop.call_later and are
    cancellable until they fire.
    """

    def __init__(self):
        self.timers: Dict[str, asyncio.TimerHandle] = {}

    def arm(
        self,
        room_id: str,
        seconds: Optional[float],
        on_expire: Callable[[], None]
    ) -> Optional[asyncio.TimerHandle]:
        """
        (Re)arm the room's timer.

        Args:
            room_id: Room the timer belongs to
            seconds: Delay; None or <= 0 means no limit and nothing is armed
            on_expire: Called from the event loop when the timer fires

        Returns:
            The scheduled handle, or None when unlimited
        """
        self.cancel(room_id)
        if not seconds or seconds <= 0:
            return None

        def fire():
            # Drop our own entry before running so on_expire may re-arm
            if self.timers.get(room_id) is handle:
                del self.timers[room_id]
            on_expire()

        loop = asyncio.get_running_loop()
        handle = loop.call_later(seconds, fire)
        self.timers[room_id] = handle
        return handle

    def cancel(self, room_id: str) -> bool:
        """Cancel the room's outstanding timer. Returns True if one was pending."""
        handle = self.timers.pop(room_id, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def is_armed(self, room_id: str) -> bool:
        return room_id in self.timers

    def cancel_all(self):
        for room_id in list(self.timers):
            self.cancel(room_id)
        logger.info("All turn timers cancelled")
