# bizscout/pacing.py
import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Pacer:
    """
    Fixed politeness delay between processed items.

    The crawler and the enrichment pipeline call wait() after every item,
    success or failure. This is the only backpressure against external sites,
    so it stays an explicit knob (delay_s) instead of a hard-coded sleep.
    Tests pass delay_s=0 or a recording sleep.
    """

    def __init__(self, delay_s: float, sleep: Optional[Callable[[float], None]] = None):
        self.delay_s = max(0.0, float(delay_s))
        self._sleep = sleep or time.sleep
        self.waits = 0

    def wait(self) -> None:
        self.waits += 1
        if self.delay_s <= 0:
            return
        logger.debug("pacer sleeping %.1fs", self.delay_s)
        self._sleep(self.delay_s)
