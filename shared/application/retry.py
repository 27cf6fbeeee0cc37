"""
Bounded retry with exponential backoff for transient failures.

Thin wrapper over tenacity that reads its limits when the wrapped call
starts, so they can come from Django settings.
"""

from __future__ import annotations

import functools
import logging
import time
from typing import Callable, Tuple, Type, TypeVar

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def transient_retrying(
    exceptions: Tuple[Type[BaseException], ...],
    *,
    retries: int,
    backoff: float,
    sleep: Callable[[float], None] = time.sleep,
) -> Retrying:
    """
    A tenacity Retrying for ``retries`` retries after the first call.

    Delay before retry ``n`` (0-based) is ``backoff * 2 ** n``. The last
    exception is re-raised once retries are exhausted.
    """
    return Retrying(
        retry=retry_if_exception_type(exceptions),
        stop=stop_after_attempt(retries + 1),
        wait=wait_exponential(multiplier=backoff),
        sleep=sleep,
        before_sleep=before_sleep_log(logger, logging.INFO),
        reraise=True,
    )


def retry_transient(
    exceptions: Tuple[Type[BaseException], ...],
    *,
    attempts: Callable[[], int] | int,
    backoff: Callable[[], float] | float,
    sleep: Callable[[float], None] = time.sleep,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Retry the wrapped callable while it raises one of ``exceptions``.

    ``attempts`` (retries after the first call) and ``backoff`` may be
    callables, evaluated on every call of the wrapped function.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            retrying = transient_retrying(
                exceptions,
                retries=attempts() if callable(attempts) else attempts,
                backoff=backoff() if callable(backoff) else backoff,
                sleep=sleep,
            )
            return retrying(func, *args, **kwargs)

        return wrapper

    return decorator
