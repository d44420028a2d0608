"""
Diversity-constrained selection of scored articles.

Selection is a single greedy pass:

1. Drop articles scoring below ``min_score``.
2. Sort the rest by final score, highest first (stable on ties).
3. Walk the sorted list and admit an article only while its source and its
   category (origin variant) are under their caps. A skipped article is
   never reconsidered.
4. Keep the first ``max_articles`` admitted articles.
"""

from collections import Counter

from ..config import ScoringWeights, SelectionConfig
from ..logging import get_logger, log_processing_stage
from ..models.article import ScoredArticle, ScoreRange, SelectionMetadata

logger = get_logger(__name__)


class DiversitySelector:
    """Greedy top-N selection with per-source and per-category caps."""

    def __init__(self, config: SelectionConfig):
        self.config = config

    def filter_by_minimum_score(self, articles: list[ScoredArticle]) -> list[ScoredArticle]:
        return [article for article in articles if article.final_score >= self.config.min_score]

    def apply_diversity(self, ranked: list[ScoredArticle]) -> list[ScoredArticle]:
        """Admit articles in order while their source and category are under the caps."""
        admitted = []
        source_counts: Counter[str] = Counter()
        category_counts: Counter[str] = Counter()

        for article in ranked:
            source = article.source
            category = article.category

            if (source_counts[source] >= self.config.max_same_source
                    or category_counts[category] >= self.config.max_same_category):
                logger.debug(
                    "Skipped by diversity cap",
                    title=article.article.title[:60],
                    source=source,
                    category=category,
                )
                continue

            admitted.append(article)
            source_counts[source] += 1
            category_counts[category] += 1

        return admitted

    def select(self, articles: list[ScoredArticle]) -> list[ScoredArticle]:
        """Select the final ordered list of articles."""
        qualified = self.filter_by_minimum_score(articles)
        ranked = sorted(qualified, key=lambda article: article.final_score, reverse=True)

        if self.config.prefer_diverse_sources:
            ranked = self.apply_diversity(ranked)

        selected = ranked[:self.config.max_articles]

        logger.info(
            "Selection complete",
            **log_processing_stage(
                "select", len(articles), len(selected),
                below_min_score=len(articles) - len(qualified),
            ),
        )
        return selected


def build_selection_metadata(
    considered: list[ScoredArticle],
    selected: list[ScoredArticle],
    config: SelectionConfig,
    weights: ScoringWeights,
) -> SelectionMetadata:
    """Aggregate counts, score range and breakdowns for a selection."""
    scores = [article.final_score for article in selected]

    return SelectionMetadata(
        total_considered=len(considered),
        total_selected=len(selected),
        selection_rate=round(len(selected) / len(considered) * 100, 1) if considered else 0.0,
        average_score=round(sum(scores) / len(scores), 2) if scores else 0.0,
        score_range=ScoreRange(min=round(min(scores), 2), max=round(max(scores), 2))
        if scores else ScoreRange(),
        source_breakdown=dict(Counter(article.source for article in selected)),
        category_breakdown=dict(Counter(article.category for article in selected)),
        quality_breakdown=dict(
            Counter(article.quality_assessment.level.value for article in selected)
        ),
        max_possible_score=weights.max_possible_score,
        config={
            'weights': weights.as_dict(),
            'min_score': config.min_score,
            'max_articles': config.max_articles,
            'max_same_source': config.max_same_source,
            'max_same_category': config.max_same_category,
        },
    )


def select_articles(
    articles: list[ScoredArticle], config: SelectionConfig | None = None
) -> list[ScoredArticle]:
    """Convenience function for article selection."""
    return DiversitySelector(config or SelectionConfig()).select(articles)
