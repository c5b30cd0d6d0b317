# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
"""
Bounded retry with capped exponential backoff.

Used only around the connect step of a host session: a fixed attempt count,
no jitter by default, and a hard ceiling on the sleep between attempts.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Tuple, Type, TypeVar, Union

T = TypeVar("T")

MAX_ATTEMPTS = 10


def retry_operation(
    operation: Callable[[], T],
    *,
    max_attempts: int = 1,
    base_backoff_s: float = 0.5,
    max_backoff_s: float = 5.0,
    exceptions: Union[Type[Exception], Tuple[Type[Exception], ...]] = Exception,
    operation_name: str = "operation",
    logger: Optional[logging.Logger] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> T:
    """
    Run `operation` up to `max_attempts` times.

    Args:
        operation: Callable that returns T
        max_attempts: Attempts including the first one, clamped to 1..MAX_ATTEMPTS
        base_backoff_s: Sleep after the first failure; doubles each attempt
        max_backoff_s: Ceiling for any single sleep
        exceptions: Exception type(s) that trigger another attempt
        operation_name: Name for logging
        logger: Logger for retry messages (default: None, no logging)
        sleep: Sleep function (default: time.sleep)

    Returns:
        Result of the operation

    Example:
        handle = retry_operation(
            lambda: transport.connect(host, hive),
            max_attempts=3,
            exceptions=RegistryConnectionError,
            operation_name=f"connect {host}",
        )
    """
    attempts = max(1, min(int(max_attempts), MAX_ATTEMPTS))

    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except exceptions as e:
            if attempt >= attempts:
                if logger and attempts > 1:
                    logger.error("%s failed after %d attempts: %s", operation_name, attempts, e)
                raise

            sleep_time = min(base_backoff_s * (2 ** (attempt - 1)), max_backoff_s)
            if logger:
                logger.warning(
                    "%s failed (attempt %d/%d): %s. Retrying in %.2fs...",
                    operation_name,
                    attempt,
                    attempts,
                    e,
                    sleep_time,
                )
            (sleep or time.sleep)(sleep_time)

    raise RuntimeError(f"{operation_name} failed with no exception recorded")
