"""Tests for diversity-constrained selection."""

import pytest

from newsletter_curator.config import ScoringWeights, SelectionConfig
from newsletter_curator.models.article import UNKNOWN_SOURCE, OriginVariant
from newsletter_curator.processing.selection import (
    DiversitySelector,
    build_selection_metadata,
    select_articles,
)


def test_article_below_min_score_is_excluded(make_scored):
    low = make_scored(4.2)
    high = make_scored(20.0, source="Other")

    selected = select_articles([low, high])

    assert selected == [high]


def test_min_score_boundary_is_inclusive(make_scored):
    exact = make_scored(5.0)

    assert select_articles([exact]) == [exact]


def test_results_are_sorted_by_score(make_scored):
    articles = [make_scored(10.0, source="A"), make_scored(30.0, source="B"),
                make_scored(20.0, source="C")]

    selected = select_articles(articles)

    assert [a.final_score for a in selected] == [30.0, 20.0, 10.0]


def test_ties_keep_input_order(make_scored):
    first = make_scored(15.0, source="A")
    second = make_scored(15.0, source="B")

    assert select_articles([first, second]) == [first, second]


def test_source_cap_drops_lowest_scored_from_that_source(make_scored):
    same_source = [make_scored(score, source="Nikkei") for score in (90.0, 80.0, 70.0, 60.0, 50.0)]
    others = [make_scored(10.0, source=name) for name in ("A", "B")]
    config = SelectionConfig(max_same_source=3, max_same_category=10)

    selected = select_articles(same_source + others, config)

    nikkei = [a for a in selected if a.source == "Nikkei"]
    assert [a.final_score for a in nikkei] == [90.0, 80.0, 70.0]
    assert others[0] in selected and others[1] in selected


def test_category_cap(make_scored):
    news = [make_scored(50.0 - i, source=f"News {i}") for i in range(5)]
    reddit = make_scored(10.0, source="Reddit r/ai", origin=OriginVariant.REDDIT)
    config = SelectionConfig(max_same_category=2)

    selected = select_articles(news + [reddit], config)

    assert [a.source for a in selected] == ["News 0", "News 1", "Reddit r/ai"]


def test_skipped_articles_are_not_reconsidered(make_scored):
    articles = [make_scored(50.0, source="A"), make_scored(40.0, source="A"),
                make_scored(30.0, source="B")]
    config = SelectionConfig(max_same_source=1, max_articles=3)

    selected = select_articles(articles, config)

    assert [a.final_score for a in selected] == [50.0, 30.0]


def test_max_articles_limit(make_scored):
    articles = [make_scored(100.0 - i, source=f"S{i}", origin=origin)
                for i, origin in enumerate(list(OriginVariant) * 4)]
    config = SelectionConfig(max_articles=5)

    selected = select_articles(articles, config)

    assert len(selected) == 5


def test_diversity_can_be_disabled(make_scored):
    articles = [make_scored(score, source="Nikkei") for score in (90.0, 80.0, 70.0, 60.0, 50.0)]
    config = SelectionConfig(prefer_diverse_sources=False)

    selected = select_articles(articles, config)

    assert len(selected) == 5


@pytest.mark.parametrize("max_same_source,max_articles", [(1, 3), (2, 4), (3, 10), (5, 2)])
def test_caps_always_hold(make_scored, max_same_source, max_articles):
    articles = [make_scored(float(100 - i), source=f"S{i % 3}") for i in range(12)]
    config = SelectionConfig(max_same_source=max_same_source, max_articles=max_articles,
                             max_same_category=20)

    selected = DiversitySelector(config).select(articles)

    assert len(selected) <= max_articles
    for source in ("S0", "S1", "S2"):
        assert sum(1 for a in selected if a.source == source) <= max_same_source


def test_empty_input():
    assert select_articles([]) == []


def test_selection_metadata(make_scored):
    considered = [make_scored(40.0, source="A"), make_scored(20.0, source="B"),
                  make_scored(3.0, source="C")]
    config = SelectionConfig()
    selected = select_articles(considered, config)

    metadata = build_selection_metadata(considered, selected, config, ScoringWeights())

    assert metadata.total_considered == 3
    assert metadata.total_selected == 2
    assert metadata.selection_rate == 66.7
    assert metadata.average_score == 30.0
    assert metadata.score_range.min == 20.0
    assert metadata.score_range.max == 40.0
    assert metadata.source_breakdown == {"A": 1, "B": 1}
    assert metadata.category_breakdown == {"news": 2}
    assert metadata.quality_breakdown == {"poor": 2}
    assert metadata.max_possible_score == 130.0
    assert metadata.config["min_score"] == 5.0


def test_selection_metadata_for_empty_selection():
    metadata = build_selection_metadata([], [], SelectionConfig(), ScoringWeights())

    assert metadata.total_selected == 0
    assert metadata.selection_rate == 0.0
    assert metadata.score_range.max == 0.0


def test_missing_sources_share_one_bucket(make_scored):
    considered = [make_scored(50.0, source=None), make_scored(40.0, source=""),
                  make_scored(30.0, source="Known")]
    config = SelectionConfig(max_same_source=1)

    selected = select_articles(considered, config)
    metadata = build_selection_metadata(considered, selected, config, ScoringWeights())

    assert [s.final_score for s in selected] == [50.0, 30.0]
    assert metadata.source_breakdown == {UNKNOWN_SOURCE: 1, "Known": 1}
