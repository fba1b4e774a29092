"""Utility functions for the Docker installer."""

import logging
import re
import time
from collections.abc import Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_VERSION_RE = re.compile(r"\bv?(\d+\.\d+(?:\.\d+)?(?:[-+~][0-9A-Za-z.\-+~]*)?)")


def with_retry(
    attempts: int,
    backoff_seconds: float,
    operation: Callable[[], T],
    *,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    description: str = "operation",
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call an operation, retrying it with a constant backoff on failure.

    The attempt count includes the first call. There is no sleep after the
    final attempt, so an operation that always fails is called ``attempts``
    times and sleeps ``attempts - 1`` times.

    Args:
        attempts: Total number of calls allowed (must be at least 1)
        backoff_seconds: Fixed delay between attempts
        operation: Zero-argument callable to invoke
        retry_on: Exception types that trigger another attempt
        description: Human-readable name used in log messages
        sleep: Sleep function (injected by tests)

    Returns:
        Whatever ``operation`` returns on its first successful call

    Raises:
        ValueError: If attempts is less than 1
        Exception: The last exception raised by ``operation`` once all
            attempts are exhausted, or any exception outside ``retry_on``
    """
    if attempts < 1:
        raise ValueError(f"attempts must be at least 1, got {attempts}")

    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except retry_on as e:
            if attempt == attempts:
                logger.error(f"{description} failed after {attempts} attempts: {e}")
                raise
            logger.warning(
                f"{description} failed (attempt {attempt}/{attempts}): {e}; "
                f"retrying in {backoff_seconds}s"
            )
            sleep(backoff_seconds)

    # Unreachable: the loop either returns or raises
    raise AssertionError("with_retry exhausted without result")


def extract_version(output: str) -> str | None:
    """Extract the first version number from a tool's version banner.

    Examples:
        >>> extract_version("Docker version 27.1.1, build 6312585")
        '27.1.1'
        >>> extract_version("Docker Compose version v2.29.1")
        '2.29.1'
        >>> extract_version("command not found") is None
        True
    """
    if not output or not isinstance(output, str):
        return None

    match = _VERSION_RE.search(output)
    if not match:
        return None
    return match.group(1).rstrip(",")
