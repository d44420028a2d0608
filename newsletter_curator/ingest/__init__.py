"""Source payload adapters."""

from .adapters import (
    NewsAPIAdapter,
    PayloadAdapter,
    RedditAdapter,
    RSSAdapter,
    from_newsapi,
    from_reddit,
    from_rss_items,
    load_articles,
)

__all__ = [
    'PayloadAdapter',
    'NewsAPIAdapter',
    'RSSAdapter',
    'RedditAdapter',
    'from_newsapi',
    'from_reddit',
    'from_rss_items',
    'load_articles',
]
