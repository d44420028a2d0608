"""Data models for curated articles."""

from .article import (
    UNKNOWN_SOURCE,
    Article,
    BatchDiagnostics,
    ExtractionResult,
    NewsMetadata,
    OriginVariant,
    QualityAssessment,
    QualityLevel,
    RedditMetadata,
    RssMetadata,
    ScoredArticle,
    ScoreRange,
    SelectionMetadata,
    SelectionResult,
)

__all__ = [
    'Article',
    'BatchDiagnostics',
    'ExtractionResult',
    'NewsMetadata',
    'OriginVariant',
    'QualityAssessment',
    'QualityLevel',
    'RedditMetadata',
    'RssMetadata',
    'ScoredArticle',
    'ScoreRange',
    'SelectionMetadata',
    'SelectionResult',
    'UNKNOWN_SOURCE',
]
