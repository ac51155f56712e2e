"""Exponential backoff for rate-limited proxy calls.

The Notion API behind the proxy allows roughly three requests per second.
Calls that come back 429 are retried after 1s, 2s and 4s; any other failure
propagates on the first attempt.
"""

import logging
import time
from functools import wraps
from typing import Callable, TypeVar

from .errors import NotionProxyError, ProxyAccessError

logger = logging.getLogger(__name__)

R = TypeVar('R')

MAX_RETRIES = 3

RATE_LIMIT_PHRASES = (
    '429',
    'too many requests',
    'rate limit exceeded',
    'rate limited',
    'rate_limited',
)


def retry_on_rate_limit(call: Callable[..., R], *args, **kwargs) -> R:
    """Invoke call, backing off and retrying while it is rate limited.

    Args:
        call: Proxy operation to run
        *args, **kwargs: Forwarded to call unchanged

    Returns:
        Whatever call returns on its first non-429 attempt

    Raises:
        ProxyAccessError: Still rate limited after MAX_RETRIES retries
        Exception: Any non rate limit error from call, unretried

    Example:
        >>> info = retry_on_rate_limit(client._get, '/notion-api', params)
    """
    attempt = 0
    while True:
        try:
            return call(*args, **kwargs)
        except Exception as e:
            if not _is_rate_limit_error(e):
                raise
            if attempt == MAX_RETRIES:
                logger.error(f"Still rate limited after {MAX_RETRIES} retries")
                raise ProxyAccessError(status_code=429) from e

            delay = 2 ** attempt
            attempt += 1
            logger.info(f"Rate limited, sleeping {delay}s before retry {attempt}/{MAX_RETRIES}")
            time.sleep(delay)


def as_decorator(call: Callable[..., R]) -> Callable[..., R]:
    """Wrap a function so every invocation goes through retry_on_rate_limit.

    Example:
        >>> @as_decorator
        ... def load_blocks(page_id):
        ...     return client.get_blocks(page_id)
    """
    @wraps(call)
    def retrying(*args, **kwargs) -> R:
        return retry_on_rate_limit(call, *args, **kwargs)

    return retrying


def _is_rate_limit_error(error: Exception) -> bool:
    """Tell whether an exception is a 429.

    Checks, in order: a status_code attribute, a requests-style
    response.status_code, then well-known phrases in the message. Typed proxy
    errors are judged on status_code alone since their messages embed ids.
    """
    if getattr(error, 'status_code', None) == 429:
        return True
    if isinstance(error, NotionProxyError):
        return False

    response = getattr(error, 'response', None)
    if getattr(response, 'status_code', None) == 429:
        return True

    message = str(error).lower()
    return any(phrase in message for phrase in RATE_LIMIT_PHRASES)
