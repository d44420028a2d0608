import sys
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import click
import orjson

from .config import (
    ConfigurationError,
    PipelineConfig,
    build_pipeline_config,
    ensure_valid_config,
    get_settings,
    validate_config,
)
from .ingest.adapters import load_articles
from .logging import (
    PerformanceLogger,
    article_context,
    get_logger,
    log_processing_stage,
    setup_logging,
)
from .models.article import Article, BatchDiagnostics, SelectionResult
from .processing.dedupe import ArticleDeduplicator
from .processing.enrichment import attach_extraction
from .processing.scoring import ArticleScorer
from .processing.selection import DiversitySelector, build_selection_metadata
from .ui import show_summary
from .utils import coerce_timestamp

logger = get_logger(__name__)


def count_unparsable_dates(records: Iterable[Any]) -> int:
    """Count raw records whose publication date is present but unusable."""
    count = 0
    for record in records:
        if not isinstance(record, Mapping):
            continue
        raw = record.get("published_at", record.get("publishedAt"))
        if raw not in (None, "") and coerce_timestamp(raw) is None:
            count += 1
    return count


class CurationPipeline:
    """Deduplicate, score and select one batch of candidate articles."""

    def __init__(self, config: PipelineConfig | None = None):
        """Initialize the pipeline.

        Args:
            config: Pipeline configuration; built from settings when omitted

        Raises:
            ConfigurationError: If any weight, threshold or cap is invalid
        """
        self.config = ensure_valid_config(config) if config is not None else build_pipeline_config()
        self.deduplicator = ArticleDeduplicator(self.config.dedup)
        self.scorer = ArticleScorer(self.config)
        self.selector = DiversitySelector(self.config.selection)

    def _prepare(
        self,
        records: list[Any],
        diagnostics: BatchDiagnostics,
        extractions: Mapping[str, str] | None,
    ) -> list[Article]:
        """Validate input records and attach extraction output."""
        loaded, malformed = load_articles(records)

        articles = []
        for article in loaded:
            if not article.is_well_formed:
                malformed += 1
                logger.warning("Dropping article without title or url", **article_context(article))
                continue
            if extractions and article.url in extractions:
                article = attach_extraction(article, extractions[article.url])
            articles.append(article)

        diagnostics.malformed = malformed
        diagnostics.unparsable_dates = count_unparsable_dates(records)

        logger.info(
            "Input validated",
            **log_processing_stage("validate", len(records), len(articles), malformed=malformed),
        )
        return articles

    def run(
        self,
        articles: Iterable[Article | Mapping[str, Any]],
        now: datetime | None = None,
        extractions: Mapping[str, str] | None = None,
    ) -> SelectionResult:
        """Run one curation pass.

        Args:
            articles: Articles, or plain dicts in the Article shape
            now: Reference time for recency scoring; the current time when omitted
            extractions: Raw extraction service output keyed by article URL

        Returns:
            Ordered selection with metadata, diagnostics and the dedup summary
        """
        records = list(articles)
        now = now or datetime.now(UTC)
        diagnostics = BatchDiagnostics(total_input=len(records))

        if not records:
            logger.info("Empty batch, nothing to curate")
            return SelectionResult(
                metadata=build_selection_metadata(
                    [], [], self.config.selection, self.config.weights
                ),
                diagnostics=diagnostics,
            )

        try:
            with PerformanceLogger("curation_pipeline", logger, articles=len(records)):
                with PerformanceLogger("validate", logger):
                    candidates = self._prepare(records, diagnostics, extractions)

                with PerformanceLogger("dedupe", logger, articles=len(candidates)):
                    unique, report = self.deduplicator.deduplicate(candidates)
                diagnostics.duplicates_removed = report.duplicates_removed
                diagnostics.normalization_failures = report.normalization_failures

                with PerformanceLogger("score", logger, articles=len(unique)):
                    scored = self.scorer.score_articles(unique, now)
                diagnostics.scoring_fallbacks = sum(len(s.fallbacks) for s in scored)

                with PerformanceLogger("select", logger, articles=len(scored)):
                    selected = self.selector.select(scored)

                metadata = build_selection_metadata(
                    scored, selected, self.config.selection, self.config.weights
                )

        except Exception as e:
            logger.error("Pipeline failed", error=str(e), exc_info=True)
            raise

        logger.info(
            "Curation complete",
            **log_processing_stage(
                "curate", len(records), len(selected),
                **diagnostics.model_dump(exclude={"total_input"}),
            ),
        )
        return SelectionResult(
            articles=selected,
            metadata=metadata,
            diagnostics=diagnostics,
            dedup_summary=report.summary(),
        )


def curate_articles(
    articles: Iterable[Article | Mapping[str, Any]],
    config: PipelineConfig | None = None,
    now: datetime | None = None,
) -> SelectionResult:
    """Convenience function for a full curation pass."""
    return CurationPipeline(config or PipelineConfig()).run(articles, now=now)


def read_records(data: bytes) -> list[Any]:
    """Decode an input file holding a list of articles or ``{"articles": [...]}``."""
    payload = orjson.loads(data)
    if isinstance(payload, dict):
        payload = payload.get("articles")
    if not isinstance(payload, list):
        raise ValueError("Input must be a JSON list of articles or an object with an 'articles' list")
    return payload


@click.command()
@click.argument("input_file", type=click.File("rb"), required=False)
@click.option(
    "--output",
    "-o",
    type=click.File("wb"),
    default="-",
    help="Output file for the selection JSON (default: stdout)",
)
@click.option(
    "--profile",
    "profile_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Curation profile YAML (default: packaged profile)",
)
@click.option(
    "--extractions",
    type=click.File("rb"),
    help="JSON object mapping article URLs to extracted full text",
)
@click.option("--max-articles", type=int, help="Maximum articles in the selection")
@click.option("--min-score", type=float, help="Minimum final score for selection")
@click.option("--max-same-source", type=int, help="Maximum selected articles per source")
@click.option("--max-same-category", type=int, help="Maximum selected articles per origin")
@click.option("--enable-content-dedup", is_flag=True, help="Also compare article bodies")
@click.option("--log-level", default="WARNING", help="Log level")
@click.option("--verbose", is_flag=True, help="Show a summary table on stderr")
@click.option(
    "--validate-config",
    "validate_config_flag",
    is_flag=True,
    help="Validate configuration and exit",
)
def cli(
    input_file,
    output,
    profile_path,
    extractions,
    max_articles,
    min_score,
    max_same_source,
    max_same_category,
    enable_content_dedup,
    log_level,
    verbose,
    validate_config_flag,
):
    """Newsletter Curator - pick the best, most diverse articles from a candidate batch."""
    actual_log_level = "INFO" if verbose else log_level
    setup_logging(log_level=actual_log_level, json_logging=False)

    overrides: dict[str, Any] = {}
    if profile_path:
        overrides["profile_path"] = profile_path
    if max_articles is not None:
        overrides["max_articles_in_newsletter"] = max_articles
    if min_score is not None:
        overrides["min_article_score"] = min_score
    if max_same_source is not None:
        overrides["max_same_source"] = max_same_source
    if max_same_category is not None:
        overrides["max_same_category"] = max_same_category
    if enable_content_dedup:
        overrides["enable_content_dedup"] = True
    settings = get_settings().model_copy(update=overrides)

    if validate_config_flag:
        if validate_config(settings):
            click.echo("Configuration is valid", err=True)
            sys.exit(0)
        click.echo("Configuration validation failed", err=True)
        sys.exit(1)

    if input_file is None:
        raise click.UsageError("Missing argument 'INPUT_FILE'.")

    try:
        config = build_pipeline_config(settings)
        records = read_records(input_file.read())
        extracted = orjson.loads(extractions.read()) if extractions else None
        if extracted is not None and not isinstance(extracted, dict):
            raise ValueError("Extractions must be a JSON object keyed by article URL")

        result = CurationPipeline(config).run(records, extractions=extracted)
        output.write(orjson.dumps(result.to_dict(), option=orjson.OPT_INDENT_2))
        output.write(b"\n")

        if verbose:
            show_summary(result)

    except ConfigurationError as e:
        logger.error("Invalid configuration", error=str(e))
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        logger.error("CLI execution failed", error=str(e))
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli()
