"""Helpers shared by the adapters and the curation stages."""

import re
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Any
from urllib.parse import urlparse

from .logging import get_logger

logger = get_logger(__name__)

HTML_ENTITIES = {
    '&amp;': '&',
    '&lt;': '<',
    '&gt;': '>',
    '&quot;': '"',
    '&#39;': "'",
    '&nbsp;': ' ',
}

# Tried in order after ISO 8601 and RFC 2822; day-first wins for dd/mm vs mm/dd
FALLBACK_DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
)

_WHITESPACE = re.compile(r'\s+')


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def extract_domain(url: str) -> str:
    """Host part of ``url``, lower-cased and without ``www.``; "" when unparsable."""
    try:
        host = urlparse(url).netloc.lower()
    except ValueError:
        return ""
    return host.removeprefix('www.')


def parse_date_string(date_str: str) -> datetime | None:
    """Parse a publication date as found in NewsAPI, RSS or scraped pages.

    ISO 8601 is tried first, then RFC 2822 (``Thu, 17 Jul 2025 23:17:14 GMT``),
    then ``FALLBACK_DATE_FORMATS``. Values without a zone are taken as UTC.

    Args:
        date_str: Raw date text

    Returns:
        Aware datetime, or None when no format matches
    """
    text = (date_str or "").strip()
    if not text:
        return None

    try:
        return _as_utc(datetime.fromisoformat(text))
    except ValueError:
        pass

    try:
        return _as_utc(parsedate_to_datetime(text))
    except (ValueError, TypeError, IndexError):
        pass

    for fmt in FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=UTC)
        except ValueError:
            continue

    logger.warning("Unrecognised publication date", date_string=text[:80])
    return None


def coerce_timestamp(value: Any) -> datetime | None:
    """Turn a datetime, epoch seconds or date string into an aware datetime.

    Naive datetimes are taken to be UTC. Anything unusable becomes None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        return parse_date_string(value)
    return None


def decode_entities(text: str) -> str:
    """Replace the handful of HTML entities feeds commonly leave in text."""
    for entity, replacement in HTML_ENTITIES.items():
        text = text.replace(entity, replacement)
    return text


def clean_text(text: str) -> str:
    """Collapse whitespace runs to single spaces and decode entities."""
    if not text:
        return ""
    return decode_entities(_WHITESPACE.sub(' ', text.strip()))
