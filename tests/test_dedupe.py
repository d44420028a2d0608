"""Tests for near-duplicate removal."""

import pytest

from newsletter_curator.config import DedupConfig
from newsletter_curator.models.article import UNKNOWN_SOURCE
from newsletter_curator.processing import dedupe
from newsletter_curator.processing.dedupe import (
    ArticleDeduplicator,
    DuplicateCluster,
    deduplicate_articles,
    publication_sort_key,
)
from newsletter_curator.processing.text_utils import normalize_url


def test_tracking_parameters_do_not_hide_duplicates(make_article):
    older = make_article(title="Robot maker expands", url="https://site.com/a?utm_source=x",
                         hours_ago=5)
    newer = make_article(title="Factory output rises", url="https://site.com/a", hours_ago=1)

    unique, report = deduplicate_articles([older, newer])

    assert unique == [newer]
    assert report.duplicates_removed == 1
    assert report.clusters[0].methods == ["url"]


def test_more_recent_duplicate_survives_regardless_of_order(make_article):
    newer = make_article(title="Robot maker expands", url="https://site.com/a", hours_ago=1)
    older = make_article(title="Factory output rises", url="https://site.com/a?utm_source=x",
                         hours_ago=5)

    unique, _ = deduplicate_articles([newer, older])

    assert unique == [newer]


def test_titles_differing_in_case_and_punctuation(make_article):
    first = make_article(title="Japan unveils new robot", url="https://a.com/1", hours_ago=3)
    second = make_article(title="Japan Unveils New Robot!!!", url="https://b.com/2", hours_ago=4)

    unique, report = deduplicate_articles([first, second])

    assert unique == [first]
    assert report.clusters[0].methods == ["title"]
    assert report.clusters[0].similarity_scores == [1.0]


def test_similar_urls_on_same_domain(make_article):
    first = make_article(title="Robot maker expands",
                         url="https://site.com/news/robot-launch", hours_ago=2)
    second = make_article(title="Factory output rises",
                          url="https://site.com/news/robot-launch-2", hours_ago=1)

    unique, _ = deduplicate_articles([first, second])

    assert unique == [second]


def test_distinct_articles_are_kept_newest_first(make_article):
    articles = [
        make_article(title="City council approves bicycle lanes", url="https://a.com/1", hours_ago=10),
        make_article(title="Japan unveils new robot", url="https://b.com/2", hours_ago=1),
        make_article(title="Chip exports climb in June", url="https://c.com/3", hours_ago=5),
    ]

    unique, report = deduplicate_articles(articles)

    assert [a.url for a in unique] == ["https://b.com/2", "https://c.com/3", "https://a.com/1"]
    assert report.duplicates_removed == 0
    assert report.clusters == []


def test_articles_without_dates_sort_last(make_article):
    undated = make_article(title="Undated feature on robot design", url="https://a.com/1",
                           hours_ago=None)
    dated = make_article(title="Chip exports climb in June", url="https://b.com/2", hours_ago=30)

    unique, _ = deduplicate_articles([undated, dated])

    assert unique == [dated, undated]


def test_result_is_capped_at_max_articles(make_article):
    titles = [
        "Chip exports climb in June",
        "City council approves bicycle lanes",
        "Japan unveils new robot",
        "Museum reopens after renovation",
        "Heatwave grips southern Europe",
    ]
    articles = [
        make_article(title=title, url=f"https://site{i}.com/x", hours_ago=i)
        for i, title in enumerate(titles)
    ]

    unique, report = deduplicate_articles(articles, DedupConfig(max_articles=3))

    assert len(unique) == 3
    assert [a.url for a in unique] == ["https://site0.com/x", "https://site1.com/x",
                                       "https://site2.com/x"]
    assert report.total_unique == 5
    assert report.returned == 3


def test_deduplication_is_idempotent(make_article):
    articles = [
        make_article(title="Japan unveils new robot", url="https://a.com/1?utm_source=x", hours_ago=3),
        make_article(title="Japan Unveils New Robot!!!", url="https://b.com/2", hours_ago=1),
        make_article(title="Robot maker expands", url="https://a.com/1", hours_ago=2),
        make_article(title="City council approves bicycle lanes", url="https://c.com/3", hours_ago=8),
    ]
    deduplicator = ArticleDeduplicator(DedupConfig())

    once, _ = deduplicator.deduplicate(articles)
    twice, report = deduplicator.deduplicate(once)

    assert twice == once
    assert report.duplicates_removed == 0


def test_chained_titles_can_merge_on_a_second_pass(make_article):
    # The newest member survives, so a later article that only matched it
    # (not the first-seen anchor) collapses when the output is deduplicated again.
    articles = [
        make_article(title="alpha bravo charlie delta", url="https://a.com/1", hours_ago=10),
        make_article(title="alpha bravo charlie delta echo", url="https://b.com/2", hours_ago=1),
        make_article(title="alpha bravo charlie delta echo foxtrot", url="https://c.com/3",
                     hours_ago=5),
    ]
    deduplicator = ArticleDeduplicator(DedupConfig())

    once, _ = deduplicator.deduplicate(articles)
    twice, report = deduplicator.deduplicate(once)

    assert [a.url for a in once] == ["https://b.com/2", "https://c.com/3"]
    assert [a.url for a in twice] == ["https://b.com/2"]
    assert report.duplicates_removed == 1


def test_url_dedup_can_be_disabled(make_article):
    first = make_article(title="Robot maker expands", url="https://site.com/a", hours_ago=2)
    second = make_article(title="Factory output rises", url="https://site.com/a", hours_ago=1)

    unique, _ = deduplicate_articles([first, second], DedupConfig(enable_url_dedup=False))

    assert len(unique) == 2


def test_content_dedup_is_opt_in(make_article):
    body = "The robot was shown in Tokyo today with great fanfare and many visitors."
    first = make_article(title="Robot maker expands", url="https://a.com/1", content=body,
                         hours_ago=2)
    second = make_article(title="Factory output rises", url="https://b.com/2", content=body,
                          hours_ago=1)

    unique, _ = deduplicate_articles([first, second])
    assert len(unique) == 2

    unique, report = deduplicate_articles([first, second], DedupConfig(enable_content_dedup=True))
    assert unique == [second]
    assert report.clusters[0].methods == ["content"]


def test_report_summary(make_article):
    articles = [
        make_article(title="Japan unveils new robot", url="https://a.com/1", source="Nikkei",
                     hours_ago=3),
        make_article(title="Japan Unveils New Robot!!!", url="https://b.com/2", source="Reuters",
                     hours_ago=1),
        make_article(title="City council approves bicycle lanes", url="https://c.com/3",
                     source="Nikkei", hours_ago=8),
        make_article(title="Chip exports climb in June", url="https://d.com/4", source="Reuters",
                     hours_ago=4),
    ]

    _, report = deduplicate_articles(articles)
    summary = report.summary()

    assert summary["total_original"] == 4
    assert summary["total_unique"] == 3
    assert summary["duplicates_removed"] == 1
    assert summary["deduplication_rate"] == 25.0
    assert summary["source_breakdown"] == {"Nikkei": 2, "Reuters": 2}
    assert summary["clusters"] == [
        {
            "survivor": "https://b.com/2",
            "duplicates": ["https://a.com/1"],
            "methods": ["title"],
            "similarity_scores": [1.0],
        }
    ]


def test_empty_input():
    unique, report = deduplicate_articles([])

    assert unique == []
    assert report.total_original == 0
    assert report.deduplication_rate == 0.0


def test_normalization_failure_never_matches(make_article, monkeypatch):
    def broken(title):
        raise RuntimeError("bad title")

    monkeypatch.setattr(dedupe, "normalize_title", broken)
    first = make_article(title="Japan unveils new robot", url="https://a.com/1", hours_ago=2)
    second = make_article(title="Japan unveils new robot", url="https://b.com/2", hours_ago=1)

    unique, report = deduplicate_articles([first, second])

    assert len(unique) == 2
    assert report.normalization_failures == 2


def test_cluster_survivor_prefers_earliest_seen_on_ties(make_article):
    first = make_article(title="Japan unveils new robot", url="https://a.com/1", hours_ago=2)
    second = make_article(title="Japan unveils new robot", url="https://b.com/2", hours_ago=2)

    cluster = DuplicateCluster(anchor=first, keys=dedupe.NormalizedKeys())
    cluster.add(second, "title", 1.0)

    assert cluster.survivor is first
    assert cluster.duplicates == [second]


def test_publication_sort_key_orders_missing_dates_first(make_article):
    assert publication_sort_key(make_article(hours_ago=None)) < publication_sort_key(
        make_article(hours_ago=1000)
    )


@pytest.mark.parametrize("url", ["https://site.com/a", "https://site.com/a?utm_source=x&utm_medium=y"])
def test_identical_normalized_urls_always_collapse(make_article, url):
    anchor = make_article(title="Robot maker expands", url="https://site.com/a/", hours_ago=1)
    other = make_article(title="Factory output rises", url=url, hours_ago=2)

    assert normalize_url(anchor.url) == normalize_url(other.url)
    unique, _ = deduplicate_articles([anchor, other])
    assert unique == [anchor]


def test_report_labels_missing_sources_consistently(make_article):
    articles = [
        make_article(title="Chip exports climb in June", url="https://a.com/1", source=None),
        make_article(title="City council approves bicycle lanes", url="https://b.com/2",
                     source=""),
    ]

    _, report = deduplicate_articles(articles)

    assert report.summary()["source_breakdown"] == {UNKNOWN_SOURCE: 2}
