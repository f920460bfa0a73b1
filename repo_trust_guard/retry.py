"""
Retry policy shared by every network call of the scoring pipeline.
"""

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from repo_trust_guard.config import CollectorConfig

# 403 is what GitHub answers when the secondary rate limit kicks in
RETRYABLE_STATUS_CODES = frozenset({403, 429, 500, 502, 503, 504})


def is_retryable(error: BaseException) -> bool:
    """Return True for transport failures and transient HTTP statuses."""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code in RETRYABLE_STATUS_CODES
    return isinstance(error, httpx.TransportError)


def build_retrying(config: CollectorConfig) -> AsyncRetrying:
    """
    Build the retry controller for one network call.

    With the default configuration a failing call is attempted four times,
    sleeping 1s, 2s and 4s in between. The last error is re-raised unchanged.
    """
    return AsyncRetrying(
        retry=retry_if_exception(is_retryable),
        stop=stop_after_attempt(config.max_retries + 1),
        wait=wait_exponential(multiplier=config.retry_backoff, exp_base=2),
        reraise=True,
    )
