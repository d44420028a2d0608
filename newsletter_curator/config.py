"""Configuration management for Newsletter Curator."""

import math
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PROFILE_PATH = Path(__file__).parent / "curation.yaml"


class ConfigurationError(ValueError):
    """Raised when thresholds, weights or caps cannot be used to build a pipeline."""


class DedupConfig(BaseModel):
    """Deduplicator thresholds and switches."""
    model_config = ConfigDict(validate_assignment=True)

    url_similarity_threshold: float = 0.8
    title_similarity_threshold: float = 0.7
    content_similarity_threshold: float = 0.9
    max_articles: int = Field(20, ge=1)
    enable_url_dedup: bool = True
    enable_title_dedup: bool = True
    enable_content_dedup: bool = False

    @field_validator(
        "url_similarity_threshold",
        "title_similarity_threshold",
        "content_similarity_threshold",
    )
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        """Validate similarity thresholds."""
        if not math.isfinite(v) or not 0 <= v <= 1:
            raise ValueError("Similarity threshold must be between 0 and 1")
        return v


class ScoringWeights(BaseModel):
    """Weights applied to each 0-10 sub-score."""
    model_config = ConfigDict(validate_assignment=True)

    content_quality: float = 3.0
    content_length: float = 2.0
    region_relevance: float = 2.0
    topic_relevance: float = 2.0
    source_quality: float = 2.0
    recency: float = 2.0

    @field_validator("*")
    @classmethod
    def validate_weight(cls, v: float) -> float:
        """Validate weight values are finite and non-negative."""
        if not math.isfinite(v) or v < 0:
            raise ValueError("Weight must be a finite, non-negative number")
        return v

    def as_dict(self) -> dict[str, float]:
        return self.model_dump()

    @property
    def max_possible_score(self) -> float:
        return sum(weight * 10 for weight in self.as_dict().values())


class SelectionConfig(BaseModel):
    """Diversity selector limits."""
    model_config = ConfigDict(validate_assignment=True)

    min_score: float = 5.0
    max_articles: int = Field(10, ge=1)
    max_same_source: int = Field(3, ge=1)
    max_same_category: int = Field(4, ge=1)
    prefer_diverse_sources: bool = True

    @field_validator("min_score")
    @classmethod
    def validate_min_score(cls, v: float) -> float:
        """Validate the minimum score cut-off."""
        if not math.isfinite(v) or v < 0:
            raise ValueError("Minimum score must be a finite, non-negative number")
        return v


class CurationProfile(BaseModel):
    """Keyword and source lists used by the relevance and source scorers."""
    region_keywords: list[str] = Field(default_factory=list)
    region_hub_terms: list[str] = Field(default_factory=list)
    region_company_terms: list[str] = Field(default_factory=list)
    region_source_hints: list[str] = Field(default_factory=list)
    topic_keywords: list[str] = Field(default_factory=list)
    topic_advanced_terms: list[str] = Field(default_factory=list)
    topic_context_terms: list[str] = Field(default_factory=list)
    premium_sources: list[str] = Field(default_factory=list)
    established_sources: list[str] = Field(default_factory=list)
    academic_markers: list[str] = Field(default_factory=list)

    @field_validator("*")
    @classmethod
    def strip_terms(cls, v: list[str]) -> list[str]:
        """Drop blank entries and surrounding whitespace."""
        return [term.strip() for term in v if term and term.strip()]


class PipelineConfig(BaseModel):
    """Everything the curation components need, passed explicitly at construction."""
    model_config = ConfigDict(validate_assignment=True)

    dedup: DedupConfig = Field(default_factory=DedupConfig)
    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    selection: SelectionConfig = Field(default_factory=SelectionConfig)
    profile: CurationProfile = Field(default_factory=lambda: load_profile())
    min_extraction_confidence: float = 0.5

    @field_validator("min_extraction_confidence")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        """Validate the extraction confidence cut-off."""
        if not math.isfinite(v) or not 0 <= v <= 1:
            raise ValueError("Extraction confidence must be between 0 and 1")
        return v


class Settings(BaseSettings):
    """Main application settings."""

    # ── Profile ────────────────────────────────────────────────────────────
    profile_path: Path | None = Field(None, description="Curation profile YAML file")

    # ── Deduplication ──────────────────────────────────────────────────────
    url_similarity_threshold: float = Field(0.8, description="URL near-duplicate threshold")
    title_similarity_threshold: float = Field(0.7, description="Title near-duplicate threshold")
    content_similarity_threshold: float = Field(0.9, description="Content near-duplicate threshold")
    max_articles_after_dedup: int = Field(20, description="Maximum articles kept after deduplication")
    enable_url_dedup: bool = Field(True, description="Enable URL deduplication")
    enable_title_dedup: bool = Field(True, description="Enable title deduplication")
    enable_content_dedup: bool = Field(False, description="Enable content deduplication")

    # ── Scoring Weights ────────────────────────────────────────────────────
    weight_content_quality: float = Field(3.0, description="Content quality weight")
    weight_content_length: float = Field(2.0, description="Content length weight")
    weight_region_relevance: float = Field(2.0, description="Region relevance weight")
    weight_topic_relevance: float = Field(2.0, description="Topic relevance weight")
    weight_source_quality: float = Field(2.0, description="Source quality weight")
    weight_recency: float = Field(2.0, description="Recency weight")
    min_extraction_confidence: float = Field(0.5, description="Confidence needed to use extracted text")

    # ── Selection ──────────────────────────────────────────────────────────
    max_articles_in_newsletter: int = Field(10, description="Maximum articles in newsletter")
    min_article_score: float = Field(5.0, description="Minimum final score for selection")
    max_same_source: int = Field(3, description="Maximum selected articles per source")
    max_same_category: int = Field(4, description="Maximum selected articles per origin")
    prefer_diverse_sources: bool = Field(True, description="Apply source/category caps")

    # ── Logging ────────────────────────────────────────────────────────────
    log_level: str = Field("INFO", description="Log level")
    json_logging: bool = Field(True, description="Enable JSON logging")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def load_profile(path: str | Path | None = None) -> CurationProfile:
    """Load a curation profile from YAML.

    Args:
        path: Profile file; the packaged default profile when omitted

    Returns:
        Parsed curation profile

    Raises:
        FileNotFoundError: If the profile file does not exist
    """
    profile_path = Path(path) if path is not None else DEFAULT_PROFILE_PATH
    if not profile_path.exists():
        raise FileNotFoundError(f"Curation profile not found: {profile_path}")

    with open(profile_path, encoding="utf-8") as f:
        data: dict[str, Any] = yaml.safe_load(f) or {}

    return CurationProfile(**data)


def build_pipeline_config(
    settings: Settings | None = None,
    profile: CurationProfile | None = None,
) -> PipelineConfig:
    """Build a validated pipeline configuration from settings.

    Raises:
        ConfigurationError: If any weight, threshold or cap is invalid
    """
    settings = settings or get_settings()
    if profile is None:
        profile = load_profile(settings.profile_path)

    try:
        return PipelineConfig(
            dedup=DedupConfig(
                url_similarity_threshold=settings.url_similarity_threshold,
                title_similarity_threshold=settings.title_similarity_threshold,
                content_similarity_threshold=settings.content_similarity_threshold,
                max_articles=settings.max_articles_after_dedup,
                enable_url_dedup=settings.enable_url_dedup,
                enable_title_dedup=settings.enable_title_dedup,
                enable_content_dedup=settings.enable_content_dedup,
            ),
            weights=ScoringWeights(
                content_quality=settings.weight_content_quality,
                content_length=settings.weight_content_length,
                region_relevance=settings.weight_region_relevance,
                topic_relevance=settings.weight_topic_relevance,
                source_quality=settings.weight_source_quality,
                recency=settings.weight_recency,
            ),
            selection=SelectionConfig(
                min_score=settings.min_article_score,
                max_articles=settings.max_articles_in_newsletter,
                max_same_source=settings.max_same_source,
                max_same_category=settings.max_same_category,
                prefer_diverse_sources=settings.prefer_diverse_sources,
            ),
            profile=profile,
            min_extraction_confidence=settings.min_extraction_confidence,
        )
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e


def ensure_valid_config(config: PipelineConfig) -> PipelineConfig:
    """Re-validate a config handed in by a caller.

    Raises:
        ConfigurationError: If the config no longer validates
    """
    try:
        return PipelineConfig.model_validate(config.model_dump())
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e


# Global instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings


def validate_config(settings: Settings) -> bool:
    """Validate configuration completeness."""
    from .logging import get_logger

    try:
        build_pipeline_config(settings)
        return True

    except (ConfigurationError, FileNotFoundError, yaml.YAMLError) as e:
        get_logger(__name__).error("Configuration validation failed", error=str(e))
        return False
