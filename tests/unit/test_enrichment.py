"""Unit tests for solved-record enrichment and the solved pipeline."""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from conftest import make_item

from mastery.schemas import RunStatus
from mastery.services.catalog_store import CatalogStore, entry_from_item
from mastery.services.enrichment import EnrichmentJoiner
from mastery.services.solved_import import SolvedSetImporter
from mastery.services.solved_pipeline import SolvedPipeline
from mastery.services.solved_store import SolvedStore


@pytest.fixture
def catalog(db):
    store = CatalogStore(db)
    store.replace_all([
        entry_from_item(make_item("two-sum", "Easy", ["Array", "Hash Table"]), 1),
        entry_from_item(make_item("climbing-stairs", "Easy", ["Math", "Dynamic Programming"]), 2),
        entry_from_item(make_item("lru-cache", "Medium", ["Hash Table", "Design"]), 3),
        entry_from_item(make_item("no-tags", "Hard", []), 4),
    ])
    return store


def solved(*slugs, difficulty="EASY"):
    return [{"titleSlug": slug, "title": slug, "difficulty": difficulty, "status": "ac"} for slug in slugs]


def tags_by_slug(db, owner_id="user-1"):
    return {r.slug: r.topic_tags for r in SolvedStore(db).list_for_owner(owner_id)}


@pytest.mark.parametrize("preload", [False, True])
def test_enrich_all_copies_tags_from_catalog(db, catalog, preload):
    SolvedSetImporter(db).import_snapshot("user-1", solved("two-sum", "lru-cache", "retired-problem"))

    report = EnrichmentJoiner(db, preload=preload).enrich_all("user-1")

    assert report.succeeded == 2
    assert report.skipped == 1
    assert report.failed == 0
    assert report.status == RunStatus.COMPLETED
    assert tags_by_slug(db) == {
        "two-sum": ["Array", "Hash Table"],
        "lru-cache": ["Hash Table", "Design"],
        "retired-problem": None,
    }


def test_match_with_empty_tag_list_counts_as_enriched(db, catalog):
    SolvedSetImporter(db).import_snapshot("user-1", solved("no-tags"))

    report = EnrichmentJoiner(db).enrich_all("user-1")

    assert report.succeeded == 1
    assert tags_by_slug(db) == {"no-tags": []}


def test_enrichment_is_idempotent(db, catalog):
    SolvedSetImporter(db).import_snapshot("user-1", solved("two-sum", "climbing-stairs", "unknown"))
    joiner = EnrichmentJoiner(db)

    joiner.enrich_all("user-1")
    once = tags_by_slug(db)
    second = joiner.enrich_all("user-1")
    third = joiner.enrich_all("user-1", force=True)

    assert tags_by_slug(db) == once
    # Only the unmatched record is scanned again without force
    assert second.scanned == 1
    assert second.succeeded == 0
    assert third.scanned == 3
    assert third.succeeded == 2


def test_forced_enrichment_replaces_but_never_clears_tags(db, catalog):
    SolvedSetImporter(db).import_snapshot("user-1", solved("two-sum"))
    EnrichmentJoiner(db).enrich_all("user-1")

    # The catalog moves on: tags change for one problem and the other disappears
    catalog.replace_all([entry_from_item(make_item("two-sum", "Easy", ["Array"]), 1)])
    EnrichmentJoiner(db).enrich_all("user-1", force=True)
    assert tags_by_slug(db) == {"two-sum": ["Array"]}

    catalog.replace_all([entry_from_item(make_item("other", "Easy", ["Graph"]), 1)])
    report = EnrichmentJoiner(db).enrich_all("user-1", force=True)
    assert report.skipped == 1
    assert tags_by_slug(db) == {"two-sum": ["Array"]}


def test_failure_on_one_record_does_not_block_others(db, catalog):
    SolvedSetImporter(db).import_snapshot("user-1", solved("two-sum", "climbing-stairs", "lru-cache"))
    original = SolvedStore.set_topic_tags

    def flaky_set_topic_tags(self, record, tags):
        if record.slug == "climbing-stairs":
            raise OperationalError("UPDATE solved_records", {}, Exception("database is locked"))
        return original(self, record, tags)

    with patch.object(SolvedStore, "set_topic_tags", flaky_set_topic_tags):
        report = EnrichmentJoiner(db).enrich_all("user-1")

    assert report.succeeded == 2
    assert report.failed == 1
    assert report.status == RunStatus.PARTIAL
    assert tags_by_slug(db) == {
        "two-sum": ["Array", "Hash Table"],
        "climbing-stairs": None,
        "lru-cache": ["Hash Table", "Design"],
    }


def test_enrichment_only_touches_the_given_owner(db, catalog):
    importer = SolvedSetImporter(db)
    importer.import_snapshot("user-1", solved("two-sum"))
    importer.import_snapshot("user-2", solved("two-sum"))

    EnrichmentJoiner(db).enrich_all("user-1")

    assert tags_by_slug(db, "user-1") == {"two-sum": ["Array", "Hash Table"]}
    assert tags_by_slug(db, "user-2") == {"two-sum": None}


def test_solved_pipeline_imports_enriches_and_summarizes(db, catalog):
    snapshot = {"data": {"favoriteQuestionList": {"questions": solved("two-sum", "lru-cache", "climbing-stairs")}}}

    result = SolvedPipeline(db).run("user-1", snapshot, top_n=2)

    assert result.import_report.succeeded == 3
    assert result.enrichment_report.succeeded == 3
    assert result.statistics.total_count == 3
    assert result.statistics.count_by_difficulty == {"Easy": 3}
    assert [(t.name, t.count) for t in result.statistics.top_topics] == [("Hash Table", 2), ("Array", 1)]


def test_solved_pipeline_reports_parse_failure(db, catalog):
    result = SolvedPipeline(db).run("user-1", "{broken")

    assert result.import_report.status == RunStatus.FAILED
    assert result.import_report.error_type == "ParseError"
    assert result.enrichment_report is None
    assert result.statistics is None


@pytest.mark.parametrize("preload", [False, True])
def test_mixed_case_catalog_slug_still_matches(db, preload):
    CatalogStore(db).replace_all([entry_from_item(make_item("Valid-Parentheses", "Easy", ["Stack"]), 1)])
    SolvedSetImporter(db).import_snapshot("user-1", solved("valid-parentheses"))

    report = EnrichmentJoiner(db, preload=preload).enrich_all("user-1")

    assert report.succeeded == 1
    assert tags_by_slug(db) == {"valid-parentheses": ["Stack"]}
