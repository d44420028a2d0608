"""
Weighted scoring system for ranking candidate articles.

Each article receives six sub-scores on a 0-10 scale:
- Content quality (extraction outcome and qualitative assessment)
- Content length
- Region relevance
- Topic relevance
- Source quality (reputation lists and Reddit engagement)
- Recency

The final score is the weighted sum of the sub-scores. A sub-score that
cannot be computed falls back to a neutral default so one bad article never
stops the batch.
"""

from collections.abc import Callable
from datetime import UTC, datetime

from ..config import PipelineConfig
from ..logging import article_context, get_logger, log_error, log_processing_stage
from ..models.article import (
    Article,
    QualityAssessment,
    QualityLevel,
    RedditMetadata,
    ScoredArticle,
)
from .enrichment import (
    SOURCE_DESCRIPTION,
    SOURCE_EXTRACTION,
    ChosenContent,
    assess_content_quality,
    choose_content,
)
from .relevance import RelevanceScorer

logger = get_logger(__name__)

FACTORS = (
    'content_quality',
    'content_length',
    'region_relevance',
    'topic_relevance',
    'source_quality',
    'recency',
)

NEUTRAL_SCORES = {
    'content_quality': 5.0,
    'content_length': 0.0,
    'region_relevance': 0.0,
    'topic_relevance': 0.0,
    'source_quality': 5.0,
    'recency': 5.0,
}

QUALITY_LEVEL_ADJUSTMENT = {
    QualityLevel.EXCELLENT: 3,
    QualityLevel.GOOD: 2,
    QualityLevel.FAIR: 1,
    QualityLevel.POOR: -1,
    QualityLevel.VERY_POOR: -2,
}

# (min_length, max_length, score), first matching band wins
LENGTH_BANDS = (
    (500, 3000, 10.0),
    (300, 5000, 8.0),
    (200, 6000, 6.0),
)

# (max_age_hours, score), first matching band wins
RECENCY_BANDS = (
    (6, 10.0),
    (12, 9.0),
    (24, 8.0),
    (48, 6.0),
    (72, 4.0),
    (168, 2.0),
)

ACADEMIC_DOMAIN_MARKERS = ('.edu', '.ac.')


def clamp(score: float, low: float = 0.0, high: float = 10.0) -> float:
    return max(low, min(high, score))


def content_length_score(length: int) -> float:
    """Map a body length in characters onto the fixed length bands."""
    if length <= 0:
        return 0.0
    for low, high, score in LENGTH_BANDS:
        if low <= length <= high:
            return score
    return 4.0 if length >= 100 else 2.0


def recency_score(published_at: datetime | None, now: datetime) -> float:
    """Map article age onto the fixed recency bands; unknown dates are neutral."""
    if published_at is None:
        return NEUTRAL_SCORES['recency']

    age_hours = (now - published_at).total_seconds() / 3600
    for max_age, score in RECENCY_BANDS:
        if age_hours < max_age:
            return score
    return 1.0


class ArticleScorer:
    """Multi-factor quality and relevance scorer."""

    def __init__(self, config: PipelineConfig):
        self.config = config
        self.weights = config.weights
        self.profile = config.profile
        self.relevance = RelevanceScorer(config.profile)

    def _content_quality(self, article: Article, chosen: ChosenContent,
                         assessment: QualityAssessment) -> float:
        score = 5.0

        if chosen.extraction_succeeded:
            score += 2

        score += QUALITY_LEVEL_ADJUSTMENT.get(assessment.level, 0)

        if chosen.source == SOURCE_EXTRACTION:
            score += 1
        elif chosen.source == SOURCE_DESCRIPTION:
            score -= 1

        return clamp(score)

    def _source_quality(self, article: Article) -> float:
        source_name = (article.source or '').lower()
        domain = article.domain
        score = 5.0

        if any(source.lower() in source_name for source in self.profile.premium_sources):
            score += 3

        markers = [marker.lower() for marker in self.profile.academic_markers]
        if (
            any(marker in source_name for marker in markers)
            or any(marker in domain for marker in markers)
            or any(marker in domain for marker in ACADEMIC_DOMAIN_MARKERS)
        ):
            score += 2

        if any(source.lower() in source_name for source in self.profile.established_sources):
            score += 1

        metadata = article.metadata
        if isinstance(metadata, RedditMetadata):
            if metadata.score > 50 and metadata.upvote_ratio > 0.8:
                score += 2
            elif metadata.score > 20 and metadata.upvote_ratio > 0.7:
                score += 1

        return clamp(score)

    def _assess(self, article: Article, body: str) -> QualityAssessment:
        assessment = assess_content_quality(body)
        if article.quality_level is not None:
            assessment = assessment.model_copy(update={
                'level': article.quality_level,
                'reasons': [*assessment.reasons, 'Level supplied by extraction service'],
            })
        return assessment

    def _safe(self, factor: str, func: Callable[[], float], article: Article,
              fallbacks: list[str]) -> float:
        try:
            return clamp(func())
        except Exception as e:
            fallbacks.append(factor)
            logger.warning(
                "Sub-score failed, using neutral default",
                **log_error(e, context=factor, **article_context(article)),
            )
            return NEUTRAL_SCORES[factor]

    def score_article(self, article: Article, now: datetime | None = None) -> ScoredArticle:
        """Calculate all sub-scores and the weighted final score for one article."""
        now = now or datetime.now(UTC)
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)
        fallbacks: list[str] = []

        try:
            chosen = choose_content(article, self.config.min_extraction_confidence)
        except Exception as e:
            logger.warning("Content selection failed", **log_error(e, **article_context(article)))
            chosen = ChosenContent(article.description or '', SOURCE_DESCRIPTION, False)
            fallbacks.append('content')

        try:
            assessment = self._assess(article, chosen.text)
        except Exception as e:
            logger.warning("Quality assessment failed", **log_error(e, **article_context(article)))
            assessment = QualityAssessment(level=article.quality_level or QualityLevel.FAIR)
            fallbacks.append('assessment')

        text = RelevanceScorer.searchable_text(article, chosen.text)

        subscores = {
            'content_quality': self._safe(
                'content_quality',
                lambda: self._content_quality(article, chosen, assessment),
                article, fallbacks),
            'content_length': self._safe(
                'content_length', lambda: content_length_score(len(chosen.text)),
                article, fallbacks),
            'region_relevance': self._safe(
                'region_relevance',
                lambda: self.relevance.score_region(text, article.source).score,
                article, fallbacks),
            'topic_relevance': self._safe(
                'topic_relevance', lambda: self.relevance.score_topic(text).score,
                article, fallbacks),
            'source_quality': self._safe(
                'source_quality', lambda: self._source_quality(article),
                article, fallbacks),
            'recency': self._safe(
                'recency', lambda: recency_score(article.published_at, now),
                article, fallbacks),
        }

        weights = self.weights.as_dict()
        final_score = sum(subscores[factor] * weights[factor] for factor in FACTORS)

        return ScoredArticle(
            article=article,
            subscores=subscores,
            final_score=final_score,
            quality_assessment=assessment,
            content_source=chosen.source,
            content_length=len(chosen.text),
            fallbacks=fallbacks,
        )

    def score_articles(self, articles: list[Article],
                       now: datetime | None = None) -> list[ScoredArticle]:
        """Score articles, keeping their input order."""
        now = now or datetime.now(UTC)
        scored = [self.score_article(article, now) for article in articles]

        if scored:
            logger.info(
                "Scoring complete",
                **log_processing_stage(
                    "score", len(articles), len(scored),
                    top_score=round(max(s.final_score for s in scored), 2),
                    fallbacks=sum(len(s.fallbacks) for s in scored),
                ),
            )
        else:
            logger.info("No articles to score")
        return scored


def score_articles(articles: list[Article], config: PipelineConfig | None = None,
                   now: datetime | None = None) -> list[ScoredArticle]:
    """Convenience function for article scoring."""
    scorer = ArticleScorer(config or PipelineConfig())
    return scorer.score_articles(articles, now)
