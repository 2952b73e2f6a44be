#!/usr/bin/env python3
"""
Imports a solved-problems snapshot for one user, enriches it with topic tags
from the catalog and prints progress statistics.

Usage:
    python import_solved.py
    python import_solved.py --file solved.json --owner default-user
    python import_solved.py --force-enrich
"""

import argparse
import sys

from mastery import config
from mastery.database import SessionLocal, init_db
from mastery.errors import ParseError
from mastery.schemas import RunStatus
from mastery.services.enrichment import EnrichmentJoiner
from mastery.services.solved_import import load_snapshot_file
from mastery.services.solved_pipeline import SolvedPipeline
from mastery.services.statistics import StatisticsService


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Import a solved-problems snapshot")
    parser.add_argument("--file", default=config.SOLVED_SNAPSHOT_PATH,
                        help="Path to the snapshot JSON")
    parser.add_argument("--owner", default=config.DEFAULT_OWNER_ID,
                        help="Owner of the solved set")
    parser.add_argument("--top", type=int, default=15,
                        help="Number of topics to show")
    parser.add_argument("--force-enrich", action="store_true",
                        help="Re-enrich every record, not only missing ones")
    parser.add_argument("--log-level", default=config.LOG_LEVEL)
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    config.configure_logging(args.log_level)

    try:
        questions = load_snapshot_file(args.file)
    except ParseError as e:
        print(f"Import failed: {e}")
        return 1

    init_db()
    db = SessionLocal()
    try:
        result = SolvedPipeline(db, preload_catalog=True).run(args.owner, questions, top_n=args.top)

        if args.force_enrich and result.import_report.status != RunStatus.FAILED:
            result.enrichment_report = EnrichmentJoiner(db, preload=True).enrich_all(args.owner, force=True)
            result.statistics = StatisticsService(db).solved_summary(args.owner, top_n=args.top)
    finally:
        db.close()

    imported = result.import_report
    if imported.status == RunStatus.FAILED:
        print(f"Import failed: {imported.reason}")
        return 1

    print(f"Imported {imported.succeeded} solved problems "
          f"({imported.skipped} skipped, {imported.collapsed} duplicates collapsed)")

    enriched = result.enrichment_report
    print(f"Enriched {enriched.succeeded} problems with topic tags "
          f"({enriched.skipped} not in catalog, {enriched.failed} failed)")

    stats = result.statistics
    print("\nYour Progress Statistics:")
    for difficulty, count in stats.count_by_difficulty.items():
        print(f"   {difficulty}: {count} problems")
    print(f"   TOTAL: {stats.total_count} problems solved!")

    print("\nYour Topic Coverage:")
    for i, topic in enumerate(stats.top_topics, start=1):
        print(f"   {i}. {topic.name}: {topic.count} problems")

    return 0


if __name__ == "__main__":
    sys.exit(main())
