"""
Deadline support for service coroutines
"""

import asyncio
from functools import wraps
from typing import Optional

from movies.core.logging import get_logger

logger = get_logger(__name__)


def with_timeout(func):
    """Give a service coroutine an optional ``timeout`` keyword (seconds)

    On expiry the running operation is cancelled, so its unit of work rolls
    back before ``asyncio.TimeoutError`` reaches the caller.
    """

    @wraps(func)
    async def wrapper(*args, timeout: Optional[float] = None, **kwargs):
        if timeout is None:
            return await func(*args, **kwargs)

        try:
            return await asyncio.wait_for(func(*args, **kwargs), timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Operation deadline exceeded",
                function=func.__qualname__,
                timeout=timeout,
            )
            raise

    return wrapper


__all__ = ["with_timeout"]
