"""Opt-in retry with exponential backoff for Bitbucket Server calls.

The API client never retries on its own. Callers that need resilience,
typically around listing and permission calls, wrap the call here.
"""

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, Optional, Set

from .exceptions import RemoteAuthError, RemoteError, RemoteNotFoundError

logger = logging.getLogger(__name__)

# Status codes that trigger a retry; 0 marks a transport failure
RETRYABLE_STATUS_CODES: Set[int] = {0, 429, 500, 502, 503, 504}

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 1.0
DEFAULT_MAX_DELAY = 30.0


async def retry_remote_call(
    fn: Callable[..., Awaitable[Any]],
    *args: Any,
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_BASE_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
    **kwargs: Any,
) -> Any:
    """Execute an async call with retry and exponential backoff.

    Retries on:
      - RemoteError with status 429, 500, 502, 503, 504
      - transport failures and timeouts (status 0)

    Never retries:
      - RemoteAuthError (401/403) and RemoteNotFoundError (404)
      - any other exception

    Uses Retry-After when the error carries one, else full jitter:
    delay = random(0, min(max_delay, base_delay * 2^attempt)).

    Returns:
        The result of fn(*args, **kwargs).

    Raises:
        The last RemoteError once retries are exhausted.
    """
    for attempt in range(max_retries + 1):
        try:
            return await fn(*args, **kwargs)

        except (RemoteAuthError, RemoteNotFoundError):
            raise

        except RemoteError as exc:
            if exc.status not in RETRYABLE_STATUS_CODES or attempt >= max_retries:
                raise

            delay = _compute_delay(attempt, base_delay, max_delay, exc.retry_after)
            logger.warning(
                "Retryable Bitbucket Server error %d (attempt %d/%d), waiting %.1fs",
                exc.status,
                attempt + 1,
                max_retries,
                delay,
            )
            await asyncio.sleep(delay)


def _compute_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    retry_after: Optional[float] = None,
) -> float:
    """Compute retry delay with full jitter, preferring the server's Retry-After."""
    if retry_after is not None:
        return min(retry_after, max_delay)

    exp_delay = base_delay * (2**attempt)
    return random.uniform(0, min(exp_delay, max_delay))
