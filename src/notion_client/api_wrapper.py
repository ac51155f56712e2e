"""Client for the remote content proxy.

The proxy exposes the Notion API to the sidebar without shipping a server
token to the browser. This module wraps its GET endpoints with requests and
translates HTTP failures into our typed exception hierarchy. Rate-limited
calls are retried with exponential backoff.

Endpoints (relative to the proxy base URL):
    GET /notion-api?pageId=<id>&type=page     page metadata (last_edited_time, icon)
    GET /notion-api?pageId=<id>&type=blocks   child content blocks
    GET /get-debug-mode?token=<token>         {"debug": bool}
    GET /get-google-drive-credentials         {"clientId": str|null, "error"?: str}

Errors come back as {"error": "...", "code": "..."} with a non-2xx status.
"""

import logging
import re
from typing import Any, Dict, List, Optional

import requests
from requests.exceptions import ConnectionError, RequestException, Timeout

from src.content_cache.models import PageInfo
from src.vault.url_utils import normalize_page_id

from .auth import ProxySettings
from .errors import (
    InvalidPageIdError,
    InvalidTokenError,
    PageNotFoundError,
    ProxyAccessError,
    ProxyUnreachableError,
    RateLimitedError,
)
from .retry_logic import retry_on_rate_limit

logger = logging.getLogger(__name__)


NOTION_API_PATH = '/notion-api'
DEBUG_MODE_PATH = '/get-debug-mode'
GOOGLE_CREDENTIALS_PATH = '/get-google-drive-credentials'

DEFAULT_TIMEOUT = 30


def sanitize_credentials(text: str) -> str:
    """Mask bearer tokens and token parameters in log/error text.

    Example:
        >>> sanitize_credentials("Authorization: Bearer secret_abc123")
        'Authorization: ***REDACTED***'
    """
    if not text:
        return text

    sanitized = re.sub(
        r'Authorization:\s*[^\n\r]+',
        'Authorization: ***REDACTED***',
        text,
        flags=re.IGNORECASE
    )
    sanitized = re.sub(
        r'Bearer\s+[^\s\n\r]+',
        'Bearer ***REDACTED***',
        sanitized,
        flags=re.IGNORECASE
    )
    sanitized = re.sub(
        r'(token)=([^&\s]+)',
        r'\1=***REDACTED***',
        sanitized,
        flags=re.IGNORECASE
    )
    # Notion integration secrets
    sanitized = re.sub(r'\b(secret|ntn)_[A-Za-z0-9]{8,}\b', '***REDACTED***', sanitized)
    return sanitized


class NotionProxyClient:
    """Thin client over the proxy's GET endpoints.

    Example:
        >>> client = NotionProxyClient(ProxySettings.from_env())
        >>> info = client.get_page_info("2ccd4856c90e80febdfcd5fdfc08d0fd")
        >>> blocks = client.get_blocks("2ccd4856c90e80febdfcd5fdfc08d0fd")
    """

    def __init__(
        self,
        settings: ProxySettings,
        session: Optional[requests.Session] = None,
        timeout: int = DEFAULT_TIMEOUT
    ):
        """Initialize the client.

        Args:
            settings: Proxy URL and optional bearer credential
            session: requests session to reuse (a new one by default)
            timeout: Per-request timeout in seconds
        """
        self._settings = settings
        self._session = session or requests.Session()
        self.timeout = timeout

    @staticmethod
    def _validate_page_id(page_id: str) -> str:
        """Normalize a page id, rejecting anything that is not a Notion id."""
        try:
            return normalize_page_id(str(page_id).strip())
        except ValueError:
            raise InvalidPageIdError(page_id)

    def _headers(self) -> Dict[str, str]:
        headers = {'Accept': 'application/json'}
        token = self._settings.notion_token
        if token:
            headers['Authorization'] = f"Bearer {token}"
            headers['X-Notion-Token'] = token
        return headers

    def _get(
        self,
        path: str,
        params: Optional[Dict[str, str]] = None,
        page_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Perform one GET and translate failures.

        Raises:
            ProxyUnreachableError: On timeouts and connection errors
            InvalidTokenError: On 401
            PageNotFoundError: On 404
            RateLimitedError: On 429
            ProxyAccessError: On any other failure or a non-JSON body
        """
        url = self._settings.proxy_url + path
        logger.debug(f"Proxy: GET {path} {params or {}}")

        try:
            response = self._session.get(
                url,
                params=params,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except (Timeout, ConnectionError) as e:
            logger.warning(f"Proxy unreachable: {sanitize_credentials(str(e))}")
            raise ProxyUnreachableError(endpoint=url) from e
        except RequestException as e:
            safe_msg = sanitize_credentials(str(e))
            logger.error(f"Proxy request failed: GET {path} - {safe_msg}")
            raise ProxyAccessError(f"Proxy request failed during GET {path}") from e

        if not response.ok:
            raise self._translate_error(response, url, page_id)

        try:
            data = response.json()
        except ValueError as e:
            raise ProxyAccessError(
                f"Proxy returned invalid JSON for GET {path}",
                status_code=response.status_code
            ) from e

        if not isinstance(data, dict):
            raise ProxyAccessError(
                f"Proxy returned unexpected payload for GET {path}",
                status_code=response.status_code
            )
        return data

    def _translate_error(
        self,
        response: requests.Response,
        url: str,
        page_id: Optional[str]
    ) -> Exception:
        """Map a non-2xx proxy response to a typed exception."""
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        message = sanitize_credentials(str(body.get('error') or 'Notion API error'))
        code = body.get('code')
        status = response.status_code

        if status == 401:
            return InvalidTokenError(endpoint=url, code=code)
        if status == 404:
            return PageNotFoundError(page_id=page_id or "unknown")
        if status == 429:
            return RateLimitedError(endpoint=url)

        logger.error(f"Proxy error {status} ({code}): {message}")
        return ProxyAccessError(
            f"Proxy error {status}: {message}",
            status_code=status,
            code=code
        )

    def get_page_info(self, page_id: str) -> PageInfo:
        """Fetch page metadata (last_edited_time, icon).

        Raises:
            InvalidPageIdError: If page_id is not a Notion id
            ProxyAccessError: If the payload lacks last_edited_time, or on
                              persistent rate limiting
        """
        page_id = self._validate_page_id(page_id)
        data = retry_on_rate_limit(
            self._get,
            NOTION_API_PATH,
            {'pageId': page_id, 'type': 'page'},
            page_id,
        )

        last_edited_time = data.get('last_edited_time')
        if not isinstance(last_edited_time, str) or not last_edited_time:
            raise ProxyAccessError(f"Page {page_id} metadata has no last_edited_time")

        icon = data.get('icon')
        return PageInfo(
            last_edited_time=last_edited_time,
            icon=icon if isinstance(icon, dict) else None,
        )

    def get_blocks(self, page_id: str) -> List[Dict[str, Any]]:
        """Fetch the page's child content blocks.

        Raises:
            InvalidPageIdError: If page_id is not a Notion id
            ProxyAccessError: If the payload has no results list
        """
        page_id = self._validate_page_id(page_id)
        data = retry_on_rate_limit(
            self._get,
            NOTION_API_PATH,
            {'pageId': page_id, 'type': 'blocks'},
            page_id,
        )

        results = data.get('results')
        if not isinstance(results, list):
            raise ProxyAccessError(f"Page {page_id} blocks payload has no results")

        logger.info(f"Fetched {len(results)} blocks for page {page_id}")
        return results

    def get_debug_mode(self, user_token: Optional[str] = None) -> bool:
        """Ask the proxy whether debug mode is on for this caller."""
        params = {'token': user_token} if user_token else None
        data = self._get(DEBUG_MODE_PATH, params)
        return bool(data.get('debug', False))

    def get_google_client_id(self) -> Optional[str]:
        """Fetch the Google Drive OAuth client id, or None if unconfigured."""
        data = self._get(GOOGLE_CREDENTIALS_PATH)
        if data.get('error'):
            logger.warning(f"Google client id unavailable: {data['error']}")
        client_id = data.get('clientId')
        return client_id if isinstance(client_id, str) and client_id else None
