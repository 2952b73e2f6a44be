"""
Enrichment of solved records with topic tags from the catalog.
"""

from typing import Callable, List

from loguru import logger
from sqlalchemy.orm import Session

from ..errors import NotFoundError
from ..schemas import EnrichmentReport
from .catalog_store import CatalogStore
from .solved_store import SolvedStore


class EnrichmentJoiner:
    """
    Joins an owner's solved records to the catalog on slug.

    Each record is looked up and written on its own, so one failure does not
    stop the rest. Records without a catalog match stay unenriched. Tags that
    are already present are only ever replaced, never cleared.
    """

    def __init__(self, db: Session, preload: bool = False):
        self.db = db
        self.catalog = CatalogStore(db)
        self.solved = SolvedStore(db)
        # Load the catalog into memory once instead of one lookup per record
        self.preload = preload

    def enrich_all(self, owner_id: str, force: bool = False) -> EnrichmentReport:
        """
        Enrich the owner's records that have no topic tags yet (all of them if forced).

        Returns a report: succeeded = enriched, skipped = no catalog match,
        failed = lookup or write errors.
        """
        report = EnrichmentReport(owner_id=owner_id)
        records = self.solved.list_for_owner(owner_id) if force else self.solved.list_unenriched(owner_id)
        report.scanned = len(records)
        lookup = self._build_lookup()

        logger.info(f"Enriching {len(records)} solved records for {owner_id} (force={force})")

        for record in records:
            slug = record.slug
            try:
                tags = lookup(slug)
                if record.topic_tags != tags:
                    self.solved.set_topic_tags(record, tags)
                report.succeeded += 1
            except NotFoundError:
                report.skipped += 1
                logger.debug(f"No catalog entry for {slug}, left unenriched")
            except Exception:
                self.db.rollback()
                report.failed += 1
                logger.exception(f"Failed to enrich {slug}")

        report.settle()
        logger.info(
            f"Enriched {report.succeeded} problems with topic tags "
            f"({report.skipped} unmatched, {report.failed} failed)"
        )
        return report

    def _build_lookup(self) -> Callable[[str], List[str]]:
        if self.preload:
            tags_by_slug = self.catalog.slug_map()

            def lookup(slug: str) -> List[str]:
                if slug not in tags_by_slug:
                    raise NotFoundError(slug)
                return list(tags_by_slug[slug])

            return lookup

        def lookup(slug: str) -> List[str]:
            entry = self.catalog.find_by_slug(slug)
            if entry is None:
                raise NotFoundError(slug)
            return list(entry.topic_tags or [])

        return lookup
