"""Settings for the remote content proxy, loaded from the environment.

Values come from environment variables, optionally populated from a .env
file via python-dotenv. Tokens are read as-is and never logged.

Environment variables:
    GM_VAULT_PROXY_URL: Base URL of the proxy functions (required)
    NOTION_API_TOKEN: Bearer credential forwarded to the proxy (optional)
    DEBUG_MODE: "true" or "1" enables debug mode
    OWNER_TOKEN: When set, debug mode is limited to callers presenting it
    GM_VAULT_GOOGLE_CLIENT_ID: OAuth client id handed to the sidebar
"""

import os
from typing import NamedTuple, Optional

from dotenv import load_dotenv

from .errors import MissingSettingError


class ProxySettings(NamedTuple):
    """Remote content proxy settings."""
    proxy_url: str
    notion_token: Optional[str] = None
    debug_mode: bool = False
    owner_token: Optional[str] = None
    google_client_id: Optional[str] = None

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> 'ProxySettings':
        """Build settings from environment variables.

        Args:
            load_env_file: Load a .env file first (python-dotenv)

        Raises:
            MissingSettingError: If GM_VAULT_PROXY_URL is not set
        """
        if load_env_file:
            load_dotenv()

        proxy_url = os.getenv('GM_VAULT_PROXY_URL')
        if not proxy_url:
            raise MissingSettingError('GM_VAULT_PROXY_URL')

        return cls(
            proxy_url=proxy_url.rstrip('/'),
            notion_token=os.getenv('NOTION_API_TOKEN') or None,
            debug_mode=_env_flag(os.getenv('DEBUG_MODE')),
            owner_token=os.getenv('OWNER_TOKEN') or None,
            google_client_id=os.getenv('GM_VAULT_GOOGLE_CLIENT_ID') or None,
        )


def _env_flag(value: Optional[str]) -> bool:
    return value in ('true', '1')


def resolve_debug_mode(
    debug_env: Optional[str],
    owner_token: Optional[str],
    user_token: Optional[str]
) -> bool:
    """Decide whether debug mode is on for a caller.

    Debug mode needs DEBUG_MODE set to "true" or "1". When an owner token is
    configured, the caller's token must also match it.

    Args:
        debug_env: Raw DEBUG_MODE value
        owner_token: Configured OWNER_TOKEN, if any
        user_token: Token presented by the caller, if any
    """
    enabled = _env_flag(debug_env)
    if owner_token:
        return enabled and user_token == owner_token
    return enabled
