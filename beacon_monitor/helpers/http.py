"""HTTP client utilities and async retry helpers."""

from asyncio import sleep
from collections.abc import Awaitable, Callable
from functools import wraps

from typing import Any, ParamSpec, TypeVar

import httpx

from beacon_monitor.helpers.constants import (
    DEFAULT_TIMEOUT,
    MAX_RETRIES,
    RETRY_BASE_DELAY,
    RETRY_MAX_DELAY,
)
from beacon_monitor.helpers.logging import get_logger


logger = get_logger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

JSON_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


def retry_with_backoff(
    max_retries: int = MAX_RETRIES,
    base_delay: float = RETRY_BASE_DELAY,
    max_delay: float = RETRY_MAX_DELAY,
    *,
    retry_on: tuple[type[Exception], ...] = (httpx.HTTPError,),
    log_errors: bool = True,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorator to retry async functions with exponential backoff.

    Only exceptions listed in ``retry_on`` are retried; anything else
    propagates immediately.

    Args:
        max_retries: Maximum number of attempts (default: 5)
        base_delay: Initial delay in seconds (default: 1.0)
        max_delay: Maximum delay between retries (default: 60.0)
        retry_on: Exception types that trigger a retry
        log_errors: Whether to log retry attempts (default: True)

    Returns:
        Decorated function that retries on the given exception types

    Example:
        ```python
        from beacon_monitor.helpers.errors import PersistenceError
        from beacon_monitor.helpers.http import retry_with_backoff

        @retry_with_backoff(max_retries=3, base_delay=0.5, retry_on=(PersistenceError,))
        async def persist(store: StatusStore, record: StatusRecord) -> None:
            store.save(record)

        # Will retry up to 3 times with delays of 0.5s, 1s
        ```
    """

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            last_exception: Exception | None = None

            for attempt in range(max_retries):
                try:
                    return await func(*args, **kwargs)
                except retry_on as e:
                    last_exception = e
                    if log_errors and attempt < max_retries - 1:
                        logger.warning(
                            "%s failed (attempt %d/%d): %s",
                            func.__name__,
                            attempt + 1,
                            max_retries,
                            e,
                        )

                # Don't sleep after the last attempt
                if attempt < max_retries - 1:
                    delay = min(base_delay * (2**attempt), max_delay)
                    await sleep(delay)

            if last_exception:
                if log_errors:
                    logger.error(
                        "%s failed after %d attempts", func.__name__, max_retries
                    )
                raise last_exception

            # Only reachable with max_retries < 1
            msg = f"{func.__name__} failed without exception"
            raise RuntimeError(msg)

        return wrapper

    return decorator


def create_http_client(
    timeout: float = DEFAULT_TIMEOUT, **kwargs: Any
) -> httpx.AsyncClient:
    """Create a configured httpx AsyncClient sending JSON headers.

    Args:
        timeout: Default timeout in seconds (default: DEFAULT_TIMEOUT)
        **kwargs: Additional httpx.AsyncClient kwargs

    Returns:
        Configured AsyncClient instance

    Example:
        ```python
        from beacon_monitor.helpers.http import create_http_client

        async with create_http_client(timeout=60.0) as client:
            response = await client.get("http://localhost:5052/eth/v1/node/health")
        ```
    """
    headers = {**JSON_HEADERS, **kwargs.pop("headers", {})}
    return httpx.AsyncClient(timeout=timeout, headers=headers, **kwargs)


__all__ = [
    "JSON_HEADERS",
    "create_http_client",
    "retry_with_backoff",
]
