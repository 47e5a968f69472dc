"""Process-wide uid generator state.

Holds the last issued (timestamp, discriminator) pair behind a lock so that
concurrent callers never receive the same pair. Policies:

- same second: discriminator is incremented
- clock moved backwards: the last timestamp is kept and the discriminator is
  incremented, so uids from one process are strictly increasing
- discriminator overflow: the next second is borrowed; when the timestamp
  field is already saturated nothing is issued (ERROR log, OverflowError)
  and the state is left as is, so no uid is ever handed out twice
- clock read failure: treated as "no time has passed"
"""

import logging
import secrets
import threading
import time
from typing import Callable, Optional

from auid.config import settings

logger = logging.getLogger(__name__)

TIMESTAMP_BITS = 40
DISCRIMINATOR_BITS = 24
TIMESTAMP_MAX = (1 << TIMESTAMP_BITS) - 1
DISCRIMINATOR_MAX = (1 << DISCRIMINATOR_BITS) - 1

# Random starts stay in the lower half of the field to leave room for a counter.
_RANDOM_START_BITS = DISCRIMINATOR_BITS - 1


class UidGenerator:
    """Issues (timestamp, discriminator) pairs, strictly increasing per instance."""

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        epoch: int = 0,
        random_discriminator: bool = True,
    ):
        self.epoch = epoch
        self.random_discriminator = random_discriminator
        self._clock = clock
        self._lock = threading.Lock()
        self._last_timestamp = -1
        self._last_discriminator = 0

    def _read_clock(self) -> int:
        """Whole seconds since the epoch, clamped to the timestamp field."""
        try:
            now = self._clock()
        except OSError as e:
            logger.warning(f"Clock read failed, reusing last timestamp: {e}")
            return max(self._last_timestamp, 0)
        elapsed = int(now) - self.epoch
        return min(max(elapsed, 0), TIMESTAMP_MAX)

    def _fresh_discriminator(self) -> int:
        if self.random_discriminator:
            return secrets.randbits(_RANDOM_START_BITS)
        return 0

    def next_parts(self) -> tuple[int, int]:
        """Return the next (timestamp, discriminator) pair."""
        with self._lock:
            now = self._read_clock()

            if now > self._last_timestamp:
                timestamp = now
                discriminator = self._fresh_discriminator()
            else:
                if now < self._last_timestamp:
                    logger.warning(
                        f"Clock moved backwards by {self._last_timestamp - now}s, "
                        f"holding timestamp at {self._last_timestamp}"
                    )
                timestamp = self._last_timestamp
                discriminator = self._last_discriminator + 1
                if discriminator > DISCRIMINATOR_MAX:
                    if timestamp >= TIMESTAMP_MAX:
                        logger.error(f"Uid space exhausted at timestamp {timestamp}")
                        raise OverflowError("uid space exhausted: no seconds left to borrow")
                    logger.debug(f"Discriminator exhausted for {timestamp}, borrowing next second")
                    timestamp += 1
                    discriminator = self._fresh_discriminator()

            self._last_timestamp = timestamp
            self._last_discriminator = discriminator
            return timestamp, discriminator

    def next_value(self) -> int:
        """Return the next packed 64 bit value."""
        timestamp, discriminator = self.next_parts()
        return (timestamp << DISCRIMINATOR_BITS) | discriminator


_generator: Optional[UidGenerator] = None
_generator_lock = threading.Lock()


def get_generator() -> UidGenerator:
    """Get the process-wide generator, creating it from settings on first use."""
    global _generator
    if _generator is None:
        with _generator_lock:
            if _generator is None:
                _generator = UidGenerator(
                    epoch=settings.epoch,
                    random_discriminator=settings.random_discriminator,
                )
                logger.debug("Uid generator initialized")
    return _generator


def reset_generator(generator: Optional[UidGenerator] = None) -> None:
    """Replace the process-wide generator (None recreates it lazily)."""
    global _generator
    with _generator_lock:
        _generator = generator
