"""URL classification helpers for vault pages.

Pages are routed to a viewer by the shape of their URL. Notion pages are
additionally mapped to the page id used by the remote content proxy.
"""

import re
from enum import Enum
from typing import Optional
from urllib.parse import urlparse


class ContentType(str, Enum):
    """Kind of content a page URL points at."""
    NOTION = "notion"
    GOOGLE_DOC = "google-doc"
    IMAGE = "image"
    VIDEO = "video"
    EXTERNAL = "external"


NOTION_HOSTS = ("notion.so", "notion.site")

IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.gif', '.webp', '.svg', '.bmp')

VIDEO_MARKERS = ('youtube.com', 'youtu.be', 'vimeo.com', '.mp4')

# 32 hex digits, optionally in 8-4-4-4-12 dashed form, at the end of the path
_NOTION_ID_PATTERN = re.compile(
    r'([0-9a-f]{8}-?[0-9a-f]{4}-?[0-9a-f]{4}-?[0-9a-f]{4}-?[0-9a-f]{12})$',
    re.IGNORECASE
)


def is_notion_url(url: Optional[str]) -> bool:
    """Check whether a URL is hosted on notion.so / notion.site.

    Subdomains (e.g. ``workspace.notion.site``) are accepted.
    """
    if not url:
        return False

    try:
        host = (urlparse(url).hostname or "").lower()
    except ValueError:
        return False

    return any(host == h or host.endswith("." + h) for h in NOTION_HOSTS)


def normalize_page_id(raw_id: str) -> str:
    """Normalize a Notion id to dashed lower-case UUID form.

    Raises:
        ValueError: If the id is not 32 hex digits (dashes ignored)
    """
    clean = raw_id.replace('-', '').lower()
    if len(clean) != 32 or not all(c in '0123456789abcdef' for c in clean):
        raise ValueError(f"Invalid Notion page id: {raw_id}")
    return f"{clean[:8]}-{clean[8:12]}-{clean[12:16]}-{clean[16:20]}-{clean[20:]}"


def extract_notion_page_id(url: Optional[str]) -> Optional[str]:
    """Extract the Notion page id from a Notion URL.

    Handles formats like:
    - https://www.notion.so/workspace/Page-Title-2ccd4856c90e80febdfcd5fdfc08d0fd
    - https://team.notion.site/2ccd4856-c90e-80fe-bdfc-d5fdfc08d0fd

    Returns:
        Dashed page id, or None if the URL is not a Notion URL or has no id
    """
    if not is_notion_url(url):
        return None

    path = urlparse(url).path.rstrip('/')
    match = _NOTION_ID_PATTERN.search(path)
    if not match:
        return None

    return normalize_page_id(match.group(1))


def detect_content_type(url: Optional[str]) -> ContentType:
    """Classify a page URL.

    Checks run in priority order: notion, google-doc, image, video; anything
    else is external.
    """
    if not url:
        return ContentType.EXTERNAL
    if is_notion_url(url):
        return ContentType.NOTION
    if 'docs.google.com' in url:
        return ContentType.GOOGLE_DOC

    lowercase_url = url.lower()
    if any(ext in lowercase_url for ext in IMAGE_EXTENSIONS):
        return ContentType.IMAGE
    if any(marker in url for marker in VIDEO_MARKERS):
        return ContentType.VIDEO
    return ContentType.EXTERNAL
