"""
Clock Module

Time source used by the registration polling loop. Kept behind a small
interface so tests can drive the loop with virtual time.
"""

import threading
import time
from typing import Optional


class SystemClock:
    """Wall clock backed by time.monotonic"""

    def now(self) -> float:
        """Current time in seconds"""
        return time.monotonic()

    def sleep(self, seconds: float, cancel_event: Optional[threading.Event] = None) -> bool:
        """
        Suspend for the given number of seconds

        Args:
            seconds: Duration to wait
            cancel_event: Optional event that interrupts the wait when set

        Returns:
            True if the full interval elapsed, False if the wait was cancelled
        """
        if cancel_event is None:
            time.sleep(seconds)
            return True
        return not cancel_event.wait(seconds)
