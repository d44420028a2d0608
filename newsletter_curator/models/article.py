"""
Article data model shared by every curation stage.

Articles arrive from the source adapters (or a JSON file) and are never
mutated by the pipeline: deduplication returns a subset of the same objects,
scoring wraps each one in a ScoredArticle, and selection returns an ordered
subset of those wrappers inside a SelectionResult.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from ..utils import coerce_timestamp, extract_domain

UNKNOWN_SOURCE = "Unknown Source"


class OriginVariant(str, Enum):
    """Ingestion channel an article came from."""
    NEWS = "news"
    RSS = "rss"
    REDDIT = "reddit"


class QualityLevel(str, Enum):
    """Qualitative content assessment levels."""
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    VERY_POOR = "very_poor"


class NewsMetadata(BaseModel):
    """News API specific fields."""
    origin: Literal["news"] = "news"
    author: str | None = None
    url_to_image: str | None = None
    source_domain: str = ""


class RssMetadata(BaseModel):
    """RSS feed specific fields."""
    origin: Literal["rss"] = "rss"
    author: str | None = None
    categories: list[str] = Field(default_factory=list)
    source_category: str = "general"
    priority: str = "medium"


class RedditMetadata(BaseModel):
    """Reddit engagement fields."""
    origin: Literal["reddit"] = "reddit"
    score: int = 0
    upvote_ratio: float = 0.0
    num_comments: int = 0
    author: str | None = None
    subreddit: str = ""
    permalink: str = ""
    flair: str | None = None
    awards: int = 0
    domain: str = ""


OriginMetadata = Annotated[
    NewsMetadata | RssMetadata | RedditMetadata,
    Field(discriminator="origin"),
]


class ExtractionResult(BaseModel):
    """Full-text extraction outcome supplied by the extraction service."""
    model_config = ConfigDict(frozen=True)

    success: bool = False
    confidence: float = 0.0
    full_text: str = Field("", validation_alias=AliasChoices("full_text", "content"))

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, v: Any) -> float:
        try:
            v = float(v)
        except (TypeError, ValueError):
            return 0.0
        if v != v:
            return 0.0
        return max(0.0, min(1.0, v))


class QualityAssessment(BaseModel):
    """Heuristic assessment of an article body."""
    score: float = 0.0
    level: QualityLevel = QualityLevel.POOR
    reasons: list[str] = Field(default_factory=list)


class Article(BaseModel):
    """A candidate article as emitted by a source adapter."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = ""
    description: str = ""
    content: str = ""
    url: str = ""
    source: str = UNKNOWN_SOURCE
    published_at: datetime | None = Field(
        None, validation_alias=AliasChoices("published_at", "publishedAt")
    )
    origin: OriginVariant = Field(
        OriginVariant.NEWS, validation_alias=AliasChoices("origin", "type")
    )
    metadata: OriginMetadata | None = None
    extraction: ExtractionResult | None = None
    quality_level: QualityLevel | None = None

    @model_validator(mode="before")
    @classmethod
    def align_origin(cls, data: Any) -> Any:
        """Let either the origin field or the metadata tag imply the other."""
        if not isinstance(data, dict):
            return data

        origin = data.get("origin", data.get("type"))
        metadata = data.get("metadata")
        if isinstance(origin, OriginVariant):
            origin = origin.value

        if isinstance(metadata, dict):
            if origin is None and "origin" in metadata:
                data = {**data, "origin": metadata["origin"]}
            elif origin is not None and "origin" not in metadata:
                data = {**data, "metadata": {**metadata, "origin": origin}}
        return data

    @model_validator(mode="after")
    def check_metadata_origin(self) -> "Article":
        if self.metadata is not None and self.metadata.origin != self.origin.value:
            raise ValueError(
                f"metadata for '{self.metadata.origin}' attached to a '{self.origin.value}' article"
            )
        return self

    @field_validator("title", "description", "content", "url", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("source", mode="before")
    @classmethod
    def default_source(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return UNKNOWN_SOURCE
        return v

    @field_validator("published_at", mode="before")
    @classmethod
    def parse_published_at(cls, v: Any) -> datetime | None:
        """Parse timestamps leniently; anything unusable becomes None."""
        return coerce_timestamp(v)

    @property
    def domain(self) -> str:
        return extract_domain(self.url)

    @property
    def is_well_formed(self) -> bool:
        """Title and URL are both present."""
        return bool(self.title.strip()) and bool(self.url.strip())


class ScoredArticle(BaseModel):
    """An article together with its scoring record."""
    article: Article
    subscores: dict[str, float]
    final_score: float
    quality_assessment: QualityAssessment
    content_source: str
    content_length: int
    fallbacks: list[str] = Field(default_factory=list)

    @property
    def source(self) -> str:
        return self.article.source

    @property
    def category(self) -> str:
        return self.article.origin.value


class BatchDiagnostics(BaseModel):
    """Counters for problems absorbed during a pipeline run."""
    total_input: int = 0
    malformed: int = 0
    unparsable_dates: int = 0
    normalization_failures: int = 0
    duplicates_removed: int = 0
    scoring_fallbacks: int = 0


class ScoreRange(BaseModel):
    min: float = 0.0
    max: float = 0.0


class SelectionMetadata(BaseModel):
    """Aggregate figures describing a selection."""
    total_considered: int = 0
    total_selected: int = 0
    selection_rate: float = 0.0
    average_score: float = 0.0
    score_range: ScoreRange = Field(default_factory=ScoreRange)
    source_breakdown: dict[str, int] = Field(default_factory=dict)
    category_breakdown: dict[str, int] = Field(default_factory=dict)
    quality_breakdown: dict[str, int] = Field(default_factory=dict)
    max_possible_score: float = 0.0
    config: dict[str, Any] = Field(default_factory=dict)


class SelectionResult(BaseModel):
    """Ordered selection handed to the newsletter writer."""
    articles: list[ScoredArticle] = Field(default_factory=list)
    metadata: SelectionMetadata = Field(default_factory=SelectionMetadata)
    diagnostics: BatchDiagnostics = Field(default_factory=BatchDiagnostics)
    dedup_summary: dict[str, Any] = Field(default_factory=dict)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
