"""Content processing module."""

from .dedupe import ArticleDeduplicator, DedupReport, DuplicateCluster, deduplicate_articles
from .enrichment import assess_content_quality, build_extraction_result, choose_content
from .relevance import RelevanceScore, RelevanceScorer
from .scoring import ArticleScorer, score_articles
from .selection import DiversitySelector, build_selection_metadata, select_articles
from .similarity import content_similarity, edit_distance, title_similarity, url_similarity
from .text_utils import normalize_content, normalize_title, normalize_url

__all__ = [
    'deduplicate_articles',
    'ArticleDeduplicator',
    'DedupReport',
    'DuplicateCluster',
    'assess_content_quality',
    'build_extraction_result',
    'choose_content',
    'RelevanceScore',
    'RelevanceScorer',
    'score_articles',
    'ArticleScorer',
    'select_articles',
    'DiversitySelector',
    'build_selection_metadata',
    'edit_distance',
    'url_similarity',
    'title_similarity',
    'content_similarity',
    'normalize_url',
    'normalize_title',
    'normalize_content',
]
