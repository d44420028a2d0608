"""Text normalization used for duplicate detection.

All three normalizers are total: they accept any input, never raise and
return "" for empty or missing values.
"""

import re
from urllib.parse import parse_qsl, urlencode, urlsplit

from ..logging import get_logger

logger = get_logger(__name__)

TRACKING_PARAMS = frozenset({
    'fbclid', 'gclid', 'ref', 'referrer', 'source', 'campaign',
})
TRACKING_PREFIXES = ('utm_',)
DEFAULT_PORTS = {'http': 80, 'https': 443}

TITLE_MAX_LENGTH = 100
CONTENT_MAX_LENGTH = 500

_NON_WORD = re.compile(r'[^\w\s]')
_WHITESPACE = re.compile(r'\s+')


def is_tracking_param(name: str) -> bool:
    name = name.lower()
    return name in TRACKING_PARAMS or name.startswith(TRACKING_PREFIXES)


def _fallback_url(url: str) -> str:
    """Best-effort normalization for URLs that cannot be parsed."""
    normalized = re.sub(r'[?#].*$', '', url.lower(), flags=re.DOTALL)
    return normalized[:-1] if normalized.endswith('/') else normalized


def normalize_url(url: str) -> str:
    """Convert URL to canonical form for deduplication.

    Tracking query parameters are dropped, the fragment is discarded and the
    result is lower-cased without a trailing slash.

    Args:
        url: Article URL

    Returns:
        Canonical URL ("" for empty input)
    """
    if not url or not isinstance(url, str):
        return ""

    url = url.strip()
    try:
        parts = urlsplit(url)
        if not parts.scheme or not parts.hostname:
            return _fallback_url(url)

        origin = f"{parts.scheme}://{parts.hostname}"
        port = parts.port
        if port is not None and DEFAULT_PORTS.get(parts.scheme.lower()) != port:
            origin += f":{port}"

        path = parts.path or '/'
        query = [
            (key, value)
            for key, value in parse_qsl(parts.query, keep_blank_values=True)
            if not is_tracking_param(key)
        ]

        normalized = origin + path
        if query:
            normalized += '?' + urlencode(query)
    except ValueError:
        logger.debug("Falling back to string URL normalization", url=url)
        return _fallback_url(url)

    normalized = normalized.lower()
    return normalized[:-1] if normalized.endswith('/') else normalized


def _normalize_text(text: str, max_length: int) -> str:
    if not text or not isinstance(text, str):
        return ""

    text = _NON_WORD.sub(' ', text.lower())
    text = _WHITESPACE.sub(' ', text).strip()
    return text[:max_length]


def normalize_title(title: str) -> str:
    """Convert title to canonical form for deduplication.

    Args:
        title: Article title

    Returns:
        Lower-cased title with punctuation replaced by single spaces, at most
        100 characters
    """
    return _normalize_text(title, TITLE_MAX_LENGTH)


def normalize_content(content: str) -> str:
    """Same transform as normalize_title, keeping up to 500 characters."""
    return _normalize_text(content, CONTENT_MAX_LENGTH)


def significant_words(text: str, min_length: int) -> set[str]:
    """Words of normalized text that are longer than ``min_length``.

    Args:
        text: Already-normalized text
        min_length: Words of this length or shorter are ignored

    Returns:
        Set of words
    """
    if not text:
        return set()
    return {word for word in text.split(' ') if len(word) > min_length}
