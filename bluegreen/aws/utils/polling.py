"""Polling helper shared by discovery, readiness and deployment status waits."""
import logging
import time
from typing import Callable, Optional, Type, TypeVar

from bluegreen.errors import PollTimeout

logger = logging.getLogger(__name__)

T = TypeVar('T')


def poll_until(fetch: Callable[[], T],
               predicate: Callable[[T], bool],
               interval: float,
               timeout: Optional[float] = None,
               backoff: float = 0.0,
               sleep: Callable[[float], None] = time.sleep,
               clock: Callable[[], float] = time.monotonic,
               error_cls: Type[PollTimeout] = PollTimeout,
               description: str = "condition") -> T:
    """Call ``fetch`` until ``predicate`` accepts its result, then return that result.

    Args:
        fetch: Produces the current observation
        predicate: True when polling should stop
        interval: First wait between fetches, in seconds
        timeout: Wall-clock budget in seconds; None polls until the predicate holds
        backoff: Seconds added to the wait after every unsuccessful fetch
        sleep: Blocking sleep, injectable for tests
        clock: Monotonic clock, injectable for tests
        error_cls: Raised when the budget is exhausted
        description: Used in log and error messages

    Returns:
        The first observation accepted by ``predicate``

    Raises:
        error_cls: No accepted observation within ``timeout``
    """
    if interval < 0 or backoff < 0:
        raise ValueError("interval and backoff must be >= 0")

    start = clock()
    wait = interval
    attempt = 0

    while True:
        attempt += 1
        value = fetch()
        if predicate(value):
            logger.debug(f"{description} reached after {attempt} attempt(s)")
            return value

        # Never fetch past the deadline
        elapsed = clock() - start
        if timeout is not None and elapsed + wait > timeout:
            raise error_cls(
                f"Timed out waiting for {description} after {elapsed:.0f}s ({attempt} attempts)"
            )

        logger.debug(f"Waiting {wait:.0f}s for {description} (attempt {attempt})")
        sleep(wait)
        wait += backoff
