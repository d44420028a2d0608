"""Adapters turning source payloads into Articles.

Fetching is done elsewhere; these adapters only read payloads that have
already been retrieved (NewsAPI responses, parsed RSS items, Reddit
listings) and apply each source's validity rules.
"""

import re
from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import ValidationError

from ..logging import get_logger, log_processing_stage
from ..models.article import (
    UNKNOWN_SOURCE,
    Article,
    NewsMetadata,
    OriginVariant,
    RedditMetadata,
    RssMetadata,
)
from ..utils import clean_text, coerce_timestamp, decode_entities, extract_domain

logger = get_logger(__name__)

TITLE_MAX_LENGTH = 200
RSS_DESCRIPTION_MAX_LENGTH = 500
REDDIT_TEXT_MAX_LENGTH = 1000
REDDIT_DESCRIPTION_LENGTH = 300
NEWSAPI_MIN_TEXT_LENGTH = 50
REMOVED_MARKER = '[Removed]'


def _text(record: dict[str, Any], key: str) -> str:
    """String field of a raw record; anything else reads as empty."""
    value = record.get(key)
    return value if isinstance(value, str) else ''


class PayloadAdapter(ABC):
    """Abstract base class for source payload adapters."""

    origin: OriginVariant

    @abstractmethod
    def parse(self, payload: Any) -> list[Article]:
        """Convert a source payload into articles.

        Args:
            payload: Decoded source response

        Returns:
            Valid articles, in payload order
        """

    def _log_parsed(self, total: int, articles: list[Article]) -> None:
        logger.info(
            "Payload parsed",
            **log_processing_stage(f"ingest_{self.origin.value}", total, len(articles)),
        )


class NewsAPIAdapter(PayloadAdapter):
    """NewsAPI ``/v2/everything`` and ``/v2/top-headlines`` responses."""

    origin = OriginVariant.NEWS

    @staticmethod
    def is_valid(record: dict[str, Any]) -> bool:
        title = _text(record, 'title')
        url = _text(record, 'url')
        if not title or not url:
            return False
        if REMOVED_MARKER in title or REMOVED_MARKER in url:
            return False

        description = _text(record, 'description')
        content = _text(record, 'content')
        if not description and not content:
            return False
        return len(description) + len(content) >= NEWSAPI_MIN_TEXT_LENGTH

    def to_article(self, record: dict[str, Any]) -> Article:
        source = record.get('source')
        if not isinstance(source, dict):
            source = {}
        url = record['url']
        description = clean_text(_text(record, 'description'))
        return Article(
            title=clean_text(record['title'])[:TITLE_MAX_LENGTH],
            description=description,
            url=url,
            source=_text(source, 'name') or UNKNOWN_SOURCE,
            published_at=record.get('publishedAt'),
            content=_text(record, 'content') or description,
            origin=self.origin,
            metadata=NewsMetadata(
                author=record.get('author'),
                url_to_image=record.get('urlToImage'),
                source_domain=extract_domain(url),
            ),
        )

    def parse(self, payload: Any) -> list[Article]:
        records = payload.get('articles') if isinstance(payload, dict) else None
        if not isinstance(records, list):
            logger.warning("No articles found in NewsAPI response")
            return []

        articles = []
        for record in records:
            if not isinstance(record, dict) or not self.is_valid(record):
                continue
            try:
                articles.append(self.to_article(record))
            except ValidationError as e:
                logger.warning("Skipping malformed NewsAPI record", error=str(e),
                               url=record.get('url'))

        self._log_parsed(len(records), articles)
        return articles


class RSSAdapter(PayloadAdapter):
    """Items of an RSS feed that has already been parsed into dicts."""

    origin = OriginVariant.RSS

    def __init__(self, source_name: str, category: str = 'general', priority: str = 'medium'):
        self.source_name = source_name
        self.category = category
        self.priority = priority

    def to_article(self, item: dict[str, Any], title: str, link: str) -> Article:
        description = clean_text(_text(item, 'description'))
        categories = item.get('categories')
        return Article(
            title=title[:TITLE_MAX_LENGTH],
            description=description[:RSS_DESCRIPTION_MAX_LENGTH],
            url=link,
            source=self.source_name,
            published_at=item.get('pubDate') or item.get('published'),
            content=description,
            origin=self.origin,
            metadata=RssMetadata(
                author=item.get('author'),
                categories=list(categories) if isinstance(categories, (list, tuple)) else [],
                source_category=self.category,
                priority=self.priority,
            ),
        )

    def parse(self, payload: Any) -> list[Article]:
        items = payload if isinstance(payload, list) else []

        articles = []
        for item in items:
            if not isinstance(item, dict):
                continue
            title = clean_text(_text(item, 'title'))
            link = _text(item, 'link').strip()
            if not title or not link:
                continue
            try:
                articles.append(self.to_article(item, title, link))
            except ValidationError as e:
                logger.warning("Skipping malformed RSS item", error=str(e), url=link)

        self._log_parsed(len(items), articles)
        return articles


def clean_reddit_text(text: str) -> str:
    """Decode entities, drop deleted/removed markers and cap the length."""
    if not text:
        return ""

    text = decode_entities(text)
    text = re.sub(r'\n\n+', '\n\n', text).strip()
    text = text.replace('[deleted]', '').replace('[removed]', '')
    return text[:REDDIT_TEXT_MAX_LENGTH]


class RedditAdapter(PayloadAdapter):
    """Reddit listing JSON (``/r/<subreddit>/hot.json`` and friends)."""

    origin = OriginVariant.REDDIT

    def __init__(self, max_age_days: int = 7, now: datetime | None = None):
        self.max_age = timedelta(days=max_age_days)
        self.now = now

    def is_valid(self, post: dict[str, Any], now: datetime) -> bool:
        if not _text(post, 'title'):
            return False
        if post.get('removed_by_category') or post.get('banned_by'):
            return False
        if not _text(post, 'selftext') and not _text(post, 'url_overridden_by_dest'):
            return False
        score = post.get('score')
        if not isinstance(score, (int, float)) or score < 1:
            return False

        created = coerce_timestamp(post.get('created_utc'))
        if created is not None and now - created > self.max_age:
            return False
        return True

    def to_article(self, post: dict[str, Any]) -> Article:
        external_url = _text(post, 'url_overridden_by_dest')
        selftext = _text(post, 'selftext')
        url = external_url or f"https://reddit.com{post.get('permalink', '')}"

        # Link posts carry no body of their own until extraction fills it in
        content = selftext or post['title']

        if selftext:
            description = clean_reddit_text(selftext)[:REDDIT_DESCRIPTION_LENGTH]
            if len(description) == REDDIT_DESCRIPTION_LENGTH:
                description += '...'
        else:
            description = post['title'][:TITLE_MAX_LENGTH]

        subreddit = post.get('subreddit') or ''
        return Article(
            title=clean_reddit_text(post['title']),
            description=description,
            url=url,
            source=f"Reddit r/{subreddit}",
            published_at=post.get('created_utc'),
            content=clean_reddit_text(content),
            origin=self.origin,
            metadata=RedditMetadata(
                score=post.get('score') or 0,
                upvote_ratio=post.get('upvote_ratio') or 0.0,
                num_comments=post.get('num_comments') or 0,
                author=post.get('author'),
                subreddit=subreddit,
                permalink=post.get('permalink') or '',
                flair=post.get('link_flair_text'),
                awards=post.get('total_awards_received') or 0,
                domain=post.get('domain') or '',
            ),
        )

    def parse(self, payload: Any) -> list[Article]:
        try:
            children = payload['data']['children']
        except (KeyError, TypeError):
            children = None
        if not isinstance(children, list):
            logger.warning("No Reddit posts found in response")
            return []

        now = self.now or datetime.now(UTC)
        articles = []
        for wrapper in children:
            post = wrapper.get('data') if isinstance(wrapper, dict) else None
            if not isinstance(post, dict) or not self.is_valid(post, now):
                continue
            try:
                articles.append(self.to_article(post))
            except ValidationError as e:
                logger.warning("Skipping malformed Reddit post", error=str(e),
                               permalink=post.get('permalink'))

        self._log_parsed(len(children), articles)
        return articles


def from_newsapi(payload: dict[str, Any]) -> list[Article]:
    return NewsAPIAdapter().parse(payload)


def from_rss_items(items: list[dict[str, Any]], source_name: str,
                   category: str = 'general', priority: str = 'medium') -> list[Article]:
    return RSSAdapter(source_name, category, priority).parse(items)


def from_reddit(listing: dict[str, Any], now: datetime | None = None) -> list[Article]:
    return RedditAdapter(now=now).parse(listing)


def load_articles(records: list[Any]) -> tuple[list[Article], int]:
    """Validate plain records (for example decoded JSON) into Articles.

    Args:
        records: Article dicts or Article instances

    Returns:
        Valid articles and the number of records that failed validation
    """
    articles = []
    malformed = 0

    for index, record in enumerate(records):
        if isinstance(record, Article):
            articles.append(record)
            continue
        try:
            articles.append(Article.model_validate(record))
        except ValidationError as e:
            malformed += 1
            logger.warning("Skipping malformed article record", index=index,
                           errors=e.error_count())

    return articles, malformed
