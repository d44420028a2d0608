"""
Keyword relevance on two independent axes.

The region axis rewards articles about a place (Japan in the default
profile) and the topic axis rewards articles about a subject (AI in the
default profile). Both use case-insensitive substring matching over
title + body + description, and both return a score in [0, 10].
"""

from dataclasses import dataclass, field

from ..config import CurationProfile
from ..models.article import Article

REGION_PER_KEYWORD = 2.0
REGION_KEYWORD_CAP = 8.0
REGION_TERM_BONUS_CAP = 2.0
TOPIC_PER_KEYWORD = 1.5
TOPIC_KEYWORD_CAP = 7.0
TOPIC_ADVANCED_CAP = 2.0
MAX_SCORE = 10.0


@dataclass
class RelevanceScore:
    """Relevance on one axis."""
    score: float
    matched_keywords: list[str] = field(default_factory=list)
    bonuses: list[str] = field(default_factory=list)


def _matches(text: str, terms: list[str]) -> list[str]:
    return [term for term in terms if term.lower() in text]


class RelevanceScorer:
    """Two-axis keyword relevance scoring."""

    def __init__(self, profile: CurationProfile):
        self.profile = profile

    @staticmethod
    def searchable_text(article: Article, body: str) -> str:
        return f"{article.title} {body} {article.description}".lower()

    def score_region(self, text: str, source: str) -> RelevanceScore:
        """Score region relevance of lower-cased ``text`` published by ``source``."""
        matched = _matches(text, self.profile.region_keywords)
        score = min(len(matched) * REGION_PER_KEYWORD, REGION_KEYWORD_CAP)
        bonuses = []

        term_bonus = 0.0
        if _matches(text, self.profile.region_hub_terms):
            term_bonus += 1
            bonuses.append('hub')
        if _matches(text, self.profile.region_company_terms):
            term_bonus += 1
            bonuses.append('company')
        score += min(term_bonus, REGION_TERM_BONUS_CAP)

        if _matches(source.lower(), self.profile.region_source_hints):
            score += 1
            bonuses.append('source')

        return RelevanceScore(min(MAX_SCORE, score), matched, bonuses)

    def score_topic(self, text: str) -> RelevanceScore:
        """Score topic relevance of lower-cased ``text``."""
        matched = _matches(text, self.profile.topic_keywords)
        score = min(len(matched) * TOPIC_PER_KEYWORD, TOPIC_KEYWORD_CAP)
        bonuses = []

        advanced = _matches(text, self.profile.topic_advanced_terms)
        if advanced:
            score += min(len(advanced), TOPIC_ADVANCED_CAP)
            bonuses.append('advanced')

        if _matches(text, self.profile.topic_context_terms):
            score += 1
            bonuses.append('context')

        return RelevanceScore(min(MAX_SCORE, score), matched, bonuses)
