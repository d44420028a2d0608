"""
Near-duplicate removal for candidate articles.

Articles are processed once, in input order. Each article is checked against
the anchors of the clusters accepted so far, in three passes:

1. URL similarity of the normalized URLs
2. Title similarity of the normalized titles
3. Content similarity of the normalized bodies (opt-in)

The first pass that reaches its threshold attaches the article to the matching
cluster; otherwise the article opens a new cluster and becomes its anchor.
Each cluster contributes a single survivor, its most recently published
member, and the survivors are returned newest first.

Every new article is compared with every anchor, which is quadratic in the
number of unique articles. That is fine for a daily batch of a few dozen
candidates; bucketing anchors by URL hash or shared n-grams would be the next
step for larger batches.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, datetime

from ..config import DedupConfig
from ..logging import article_context, get_logger, log_error, log_processing_stage
from ..models.article import Article
from .similarity import content_similarity, title_similarity, url_similarity
from .text_utils import normalize_content, normalize_title, normalize_url

logger = get_logger(__name__)

_OLDEST = datetime.min.replace(tzinfo=UTC)


def publication_sort_key(article: Article) -> datetime:
    """Sort key placing articles without a date after every dated one."""
    return article.published_at or _OLDEST


@dataclass
class NormalizedKeys:
    """Comparison keys derived from one article."""
    url: str = ""
    title: str = ""
    content: str = ""


@dataclass
class DuplicateCluster:
    """Articles judged equivalent during one deduplication pass."""
    anchor: Article
    keys: NormalizedKeys
    members: list[Article] = field(default_factory=list)
    methods: list[str] = field(default_factory=list)
    similarity_scores: list[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.members:
            self.members.append(self.anchor)

    def add(self, article: Article, method: str, score: float) -> None:
        self.members.append(article)
        self.methods.append(method)
        self.similarity_scores.append(score)

    @property
    def survivor(self) -> Article:
        """Most recently published member; the earliest seen wins ties."""
        best = self.members[0]
        for member in self.members[1:]:
            if publication_sort_key(member) > publication_sort_key(best):
                best = member
        return best

    @property
    def duplicates(self) -> list[Article]:
        survivor = self.survivor
        return [member for member in self.members if member is not survivor]


@dataclass
class DedupReport:
    """Summary of one deduplication pass."""
    total_original: int
    total_unique: int
    returned: int
    source_breakdown: dict[str, int]
    clusters: list[DuplicateCluster]
    normalization_failures: int = 0

    @property
    def duplicates_removed(self) -> int:
        return self.total_original - self.total_unique

    @property
    def deduplication_rate(self) -> float:
        if self.total_original == 0:
            return 0.0
        return round(self.duplicates_removed / self.total_original * 100, 1)

    def summary(self) -> dict:
        return {
            'total_original': self.total_original,
            'total_unique': self.total_unique,
            'returned': self.returned,
            'duplicates_removed': self.duplicates_removed,
            'deduplication_rate': self.deduplication_rate,
            'source_breakdown': self.source_breakdown,
            'clusters': [
                {
                    'survivor': cluster.survivor.url,
                    'duplicates': [article.url for article in cluster.duplicates],
                    'methods': cluster.methods,
                    'similarity_scores': [round(s, 3) for s in cluster.similarity_scores],
                }
                for cluster in self.clusters
            ],
        }


class ArticleDeduplicator:
    """URL, title and content based near-duplicate removal."""

    def __init__(self, config: DedupConfig):
        self.config = config
        self.normalization_failures = 0

    def _normalize(self, article: Article) -> NormalizedKeys:
        """Normalize one article; a failing field becomes "" and never matches."""
        keys = NormalizedKeys()
        for name, func, value in (
            ('url', normalize_url, article.url),
            ('title', normalize_title, article.title),
            ('content', normalize_content, article.content),
        ):
            if name == 'content' and not self.config.enable_content_dedup:
                continue
            try:
                setattr(keys, name, func(value))
            except Exception as e:
                self.normalization_failures += 1
                logger.warning(
                    "Normalization failed, field will not match",
                    **log_error(e, context=f"normalize_{name}", **article_context(article)),
                )
        return keys

    def _find_cluster(
        self, keys: NormalizedKeys, clusters: list[DuplicateCluster]
    ) -> tuple[DuplicateCluster, str, float] | None:
        """Return the first cluster whose anchor matches, with the method and score."""
        if self.config.enable_url_dedup and keys.url:
            for cluster in clusters:
                score = url_similarity(keys.url, cluster.keys.url)
                if score >= self.config.url_similarity_threshold:
                    return cluster, 'url', score

        if self.config.enable_title_dedup and keys.title:
            for cluster in clusters:
                score = title_similarity(keys.title, cluster.keys.title)
                if score >= self.config.title_similarity_threshold:
                    return cluster, 'title', score

        if self.config.enable_content_dedup and keys.content:
            for cluster in clusters:
                score = content_similarity(keys.content, cluster.keys.content)
                if score >= self.config.content_similarity_threshold:
                    return cluster, 'content', score

        return None

    def cluster_articles(self, articles: list[Article]) -> list[DuplicateCluster]:
        """Group articles into clusters of near-duplicates, in first-seen order."""
        clusters: list[DuplicateCluster] = []

        for article in articles:
            keys = self._normalize(article)
            match = self._find_cluster(keys, clusters)

            if match is None:
                clusters.append(DuplicateCluster(anchor=article, keys=keys))
                continue

            cluster, method, score = match
            cluster.add(article, method, score)
            logger.debug(
                "Duplicate detected",
                title=article.title[:60],
                method=method,
                similarity=round(score, 3),
                anchor=cluster.anchor.url,
            )

        return clusters

    def deduplicate(self, articles: list[Article]) -> tuple[list[Article], DedupReport]:
        """Collapse near-duplicates and return the newest survivors.

        Args:
            articles: Candidate articles from all sources, in arrival order

        Returns:
            Survivors sorted newest first and capped at ``max_articles``,
            plus a report describing the pass
        """
        self.normalization_failures = 0
        clusters = self.cluster_articles(articles)

        survivors = [cluster.survivor for cluster in clusters]
        # sorted() is stable, so equal or missing dates keep arrival order
        survivors = sorted(survivors, key=publication_sort_key, reverse=True)
        limited = survivors[:self.config.max_articles]

        report = DedupReport(
            total_original=len(articles),
            total_unique=len(clusters),
            returned=len(limited),
            source_breakdown=dict(Counter(article.source for article in articles)),
            clusters=[cluster for cluster in clusters if len(cluster.members) > 1],
            normalization_failures=self.normalization_failures,
        )

        logger.info(
            "Deduplication complete",
            **log_processing_stage(
                "dedupe",
                len(articles),
                len(limited),
                duplicates_removed=report.duplicates_removed,
                deduplication_rate=report.deduplication_rate,
            ),
        )
        return limited, report


def deduplicate_articles(
    articles: list[Article], config: DedupConfig | None = None
) -> tuple[list[Article], DedupReport]:
    """Convenience function for article deduplication."""
    deduplicator = ArticleDeduplicator(config or DedupConfig())
    return deduplicator.deduplicate(articles)
