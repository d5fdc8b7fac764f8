"""
Minimum spacing between calls to a quota-limited service.

One RateLimiter instance guards one external service (the search API, the
SMTP server). Callers are serialized through the instance lock, so two
pipelines sharing a client still respect the quota.
"""

import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Sleep before each call until `min_interval` seconds have passed since
    the previous one.

    Usage:
        limiter = RateLimiter(1.1)
        limiter.wait()
        response = requests.get(url)

        # or
        response = limiter.call(requests.get, url)
    """

    def __init__(
        self,
        min_interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if min_interval < 0:
            raise ValueError("min_interval must be >= 0")
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last_call: Optional[float] = None

    def wait(self) -> float:
        """
        Block until the next call is allowed, then stamp the call time.

        Returns the number of seconds slept (0 if no wait).
        """
        with self._lock:
            slept = 0.0
            if self._last_call is not None:
                elapsed = self._clock() - self._last_call
                deficit = self.min_interval - elapsed
                if deficit > 0:
                    logger.debug("Rate limit: sleeping %.2fs", deficit)
                    self._sleep(deficit)
                    slept = deficit
            self._last_call = self._clock()
            return slept

    def call(self, func: Callable, *args, **kwargs):
        """Wait for a slot, then call func(*args, **kwargs)."""
        self.wait()
        return func(*args, **kwargs)
