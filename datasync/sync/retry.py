"""Bounded retry with a fixed pause between attempts."""

import logging
import time
from typing import Callable, Optional, TypeVar

from ..exceptions import RetryExhaustedError
from ..utils import DEFAULT_RETRY_DELAY

logger = logging.getLogger(__name__)

T = TypeVar("T")


def with_retry(
    operation: Callable[[], T],
    max_retries: int,
    delay: float = DEFAULT_RETRY_DELAY,
    sleep: Callable[[float], None] = time.sleep,
    description: Optional[str] = None,
) -> T:
    """Run an operation, retrying on failure.

    ``max_retries`` is the total number of attempts, so ``max_retries=3``
    calls the operation at most three times. The pause between attempts is
    always ``delay``; there is no pause after the last attempt.

    Args:
        operation: Callable taking no arguments
        max_retries: Total attempts allowed (at least 1)
        delay: Seconds to wait between attempts
        sleep: Sleep function (replaced in tests)
        description: Label used in log messages

    Returns:
        The operation's return value

    Raises:
        RetryExhaustedError: If every attempt failed; chained from the
            last error and carrying the attempt count
        ValueError: If max_retries is less than 1

    Examples:
        >>> with_retry(lambda: 42, max_retries=3)
        42
    """
    if max_retries < 1:
        raise ValueError(f"max_retries must be at least 1, got {max_retries}")

    label = description or getattr(operation, "__name__", "operation")
    last_error: Optional[Exception] = None

    for attempt in range(1, max_retries + 1):
        try:
            return operation()
        except Exception as e:
            last_error = e
            if attempt < max_retries:
                logger.warning(
                    f"{label} failed (attempt {attempt}/{max_retries}), "
                    f"retrying in {delay:.1f}s: {e}"
                )
                sleep(delay)
            else:
                logger.debug(
                    f"{label} failed (attempt {attempt}/{max_retries}), giving up: {e}"
                )

    raise RetryExhaustedError(max_retries, last_error) from last_error
