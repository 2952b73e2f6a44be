#!/usr/bin/env python3
"""
Syncs the problem catalog from the remote API into the local database.

Usage:
    python sync_catalog.py
    python sync_catalog.py --page-size 50 --max-offset 1000 --delay 2
"""

import argparse
import sys

from mastery import config
from mastery.database import SessionLocal, init_db
from mastery.schemas import RunStatus
from mastery.services.catalog_client import CatalogClient
from mastery.services.catalog_sync import CatalogSyncService
from mastery.services.statistics import StatisticsService


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Sync the problem catalog")
    parser.add_argument("--page-size", type=int, default=config.CATALOG_PAGE_SIZE,
                        help="Problems per page")
    parser.add_argument("--max-offset", type=int, default=config.CATALOG_MAX_OFFSET,
                        help="Stop once the offset goes past this value")
    parser.add_argument("--delay", type=float, default=config.CATALOG_PAGE_DELAY,
                        help="Seconds to wait between pages")
    parser.add_argument("--retries", type=int, default=config.CATALOG_MAX_RETRIES,
                        help="Retries per page on network errors")
    parser.add_argument("--log-level", default=config.LOG_LEVEL)
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    config.configure_logging(args.log_level)

    print("=" * 60)
    print("Problem Catalog Sync")
    print("=" * 60)
    print("This may take several minutes to complete...")

    init_db()
    db = SessionLocal()
    client = CatalogClient()
    try:
        service = CatalogSyncService(
            db,
            client=client,
            page_size=args.page_size,
            page_delay=args.delay,
            max_offset=args.max_offset,
            max_retries=args.retries,
        )
        report = service.run()
        summary = StatisticsService(db).catalog_summary(top_n=10)
    finally:
        client.close()
        db.close()

    print("\n" + "=" * 60)
    print(f"Sync {report.status.value.upper()}")
    print("=" * 60)
    print(f"  Written: {report.succeeded}")
    print(f"  Skipped: {report.skipped}")
    print(f"  Failed:  {report.failed}")
    print(f"  Pages:   {report.pages_fetched} ({report.retries} retries)")
    if report.reason:
        print(f"  Reason:  {report.reason}")

    print("\nCatalog Statistics:")
    print(f"  Total Problems: {summary.total_count}")
    for difficulty, count in summary.count_by_difficulty.items():
        print(f"  {difficulty}: {count}")

    return 1 if report.status == RunStatus.FAILED else 0


if __name__ == "__main__":
    sys.exit(main())
