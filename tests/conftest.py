"""Pytest configuration and fixtures."""

import os
import tempfile
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Generator

import pytest

# Set test environment
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["JSON_LOGGING"] = "false"

NOW = datetime(2025, 7, 18, 12, 0, tzinfo=UTC)

LONG_BODY = (
    "Researchers in Tokyo presented a new robot control system on Tuesday. "
    "The platform combines machine learning with classical planning so that "
    "warehouse robots can adapt to unfamiliar layouts without retraining. "
    "Engineers at the lab said the software reduced collisions by a third "
    "during six months of trials at two distribution centres. "
    "The team plans to publish the dataset and evaluation code next spring. "
    "Several logistics firms have already asked to pilot the technology, "
    "according to the project lead. "
    "Independent experts welcomed the results but cautioned that real "
    "deployments involve far messier conditions than controlled trials."
)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for recency scoring."""
    return NOW


@pytest.fixture
def make_article():
    """Factory for articles published ``hours_ago`` before NOW."""
    from newsletter_curator.models.article import Article

    def _make(
        title: str = "Weather update",
        url: str = "https://example.com/weather",
        source: str = "Example Daily",
        hours_ago: float | None = 2,
        **kwargs,
    ) -> Article:
        published_at = NOW - timedelta(hours=hours_ago) if hours_ago is not None else None
        return Article(
            title=title,
            url=url,
            source=source,
            published_at=published_at,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_scored():
    """Factory for scored articles with a given final score."""
    from newsletter_curator.models.article import (
        Article,
        OriginVariant,
        QualityAssessment,
        ScoredArticle,
    )

    counter = iter(range(10_000))

    def _make(
        score: float,
        source: str = "Example Daily",
        origin: OriginVariant = OriginVariant.NEWS,
        title: str | None = None,
    ) -> ScoredArticle:
        index = next(counter)
        return ScoredArticle(
            article=Article(
                title=title or f"Story {index}",
                url=f"https://example.com/story-{index}",
                source=source,
                origin=origin,
            ),
            subscores={},
            final_score=score,
            quality_assessment=QualityAssessment(),
            content_source="original_content",
            content_length=0,
        )

    return _make


@pytest.fixture
def sample_records():
    """Candidate batch as decoded from a JSON input file."""
    return [
        {
            "title": "Tokyo lab unveils warehouse robot powered by machine learning",
            "url": "https://www.nikkei.com/tech/robot?utm_source=twitter",
            "source": "Nikkei Asia",
            "publishedAt": "2025-07-18T09:00:00Z",
            "content": LONG_BODY,
            "description": "A Tokyo lab shows a new warehouse robot.",
            "type": "news",
        },
        {
            "title": "Tokyo lab unveils warehouse robot powered by machine learning!",
            "url": "https://www.nikkei.com/tech/robot",
            "source": "Nikkei Asia",
            "published_at": "2025-07-18T11:00:00Z",
            "content": LONG_BODY,
            "description": "A Tokyo lab shows a new warehouse robot.",
            "origin": "news",
        },
        {
            "title": "City council approves new bicycle lanes",
            "url": "https://localnews.example.org/bikes",
            "source": "Local News",
            "published_at": "2025-07-17T08:00:00Z",
            "content": "The council voted on Monday to extend the cycle network.",
            "origin": "rss",
        },
        {
            "title": "",
            "url": "https://example.com/untitled",
            "source": "Example Daily",
        },
        {
            "title": "Japanese company trains LLM on public records",
            "url": "https://techcrunch.com/2025/07/18/japan-llm",
            "source": "TechCrunch",
            "published_at": "not a date",
            "content": LONG_BODY,
            "origin": "news",
        },
    ]


@pytest.fixture
def long_body() -> str:
    """Article body long enough to count as a successful extraction."""
    return LONG_BODY
