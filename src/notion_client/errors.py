"""Typed exception hierarchy for remote content proxy errors.

All exceptions inherit from NotionProxyError so callers can catch any
failure of the remote path in one place; each stores its context as
attributes.
"""

from typing import Optional

from src.vault.errors import VaultError


class NotionProxyError(VaultError):
    """Base exception for all remote content proxy errors."""
    pass


class MissingSettingError(NotionProxyError):
    """Raised when a required environment setting is absent."""

    def __init__(self, variable: str):
        super().__init__(f"Required setting {variable} is not configured")
        self.variable = variable


class InvalidPageIdError(NotionProxyError):
    """Raised when a page id is not a Notion id (32 hex digits)."""

    def __init__(self, page_id: str):
        super().__init__(
            f"Invalid page_id format: '{page_id}'. "
            f"Page ids must be 32 hexadecimal digits, dashes allowed."
        )
        self.page_id = page_id


class NotANotionPageError(NotionProxyError):
    """Raised when remote content is requested for a non-Notion page."""

    def __init__(self, url: str):
        super().__init__(f"Page URL is not a Notion page: {url}")
        self.url = url


class InvalidTokenError(NotionProxyError):
    """Raised when the proxy rejects the bearer credential (401)."""

    def __init__(self, endpoint: str, code: Optional[str] = None):
        super().__init__(f"Notion token was rejected by {endpoint}")
        self.endpoint = endpoint
        self.code = code


class PageNotFoundError(NotionProxyError):
    """Raised when the remote page does not exist or is not shared (404)."""

    def __init__(self, page_id: str):
        super().__init__(f"Page {page_id} not found")
        self.page_id = page_id


class RateLimitedError(NotionProxyError):
    """Raised when the remote service answers 429 Too Many Requests."""

    def __init__(self, endpoint: str):
        super().__init__(f"Rate limited (429) by {endpoint}")
        self.endpoint = endpoint
        self.status_code = 429


class ProxyUnreachableError(NotionProxyError):
    """Raised when the proxy cannot be reached (timeout, DNS, refused)."""

    def __init__(self, endpoint: str):
        super().__init__(f"Proxy is not available at {endpoint}")
        self.endpoint = endpoint


class ProxyAccessError(NotionProxyError):
    """Raised for any other proxy failure, including exhausted retries."""

    def __init__(
        self,
        message: str = "Notion proxy failure (after 3 retries)",
        status_code: Optional[int] = None,
        code: Optional[str] = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
