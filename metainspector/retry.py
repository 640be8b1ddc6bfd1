"""
Retry utilities with exponential backoff for the page fetcher.
"""

import time
import random
from typing import Callable, TypeVar, Tuple, Type
import logging

from .config import RetryConfig

T = TypeVar("T")


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """
    Delay before retry number `attempt` (0-based).

    delay = min(base * (exponential_base ^ attempt), max_delay)
    Jitter scales the delay into the 75%-125% band.
    """
    delay = config.base_delay_seconds * (config.exponential_base ** attempt)
    delay = min(delay, config.max_delay_seconds)

    if config.jitter:
        delay = delay * (0.75 + random.random() * 0.5)

    return delay


def retry_with_backoff(
    func: Callable[[], T],
    config: RetryConfig,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    logger: logging.Logger = None,
    operation_name: str = None,
) -> T:
    """
    Call func() until it succeeds or config.max_retries retries are spent.

    Only exceptions listed in `exceptions` are retried; anything else
    propagates immediately. The last caught exception is re-raised when
    the budget runs out.
    """
    op_name = operation_name or getattr(func, "__name__", "operation")
    last_exception = None
    attempts = config.max_retries + 1

    for attempt in range(attempts):
        try:
            return func()
        except exceptions as e:
            last_exception = e
            if attempt == attempts - 1:
                if logger:
                    logger.error(
                        f"{op_name} gave up after {attempts} attempts: "
                        f"{type(e).__name__}: {e}"
                    )
                break

            delay = calculate_delay(attempt, config)
            if logger:
                logger.warning(
                    f"{op_name} attempt {attempt + 1}/{attempts} failed "
                    f"({type(e).__name__}), retrying in {delay:.2f}s"
                )
            time.sleep(delay)

    raise last_exception
