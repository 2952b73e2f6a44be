"""
Solved-set pipeline: import a snapshot, enrich it from the catalog, summarize it.
"""

from loguru import logger
from sqlalchemy.orm import Session

from ..errors import ConsistencyError, ParseError, ValidationError
from ..schemas import ImportReport, SolvedPipelineResult
from .enrichment import EnrichmentJoiner
from .solved_import import Snapshot, SolvedSetImporter
from .statistics import StatisticsService


class SolvedPipeline:
    """Runs import -> enrichment -> statistics for one owner."""

    def __init__(self, db: Session, preload_catalog: bool = False):
        self.importer = SolvedSetImporter(db)
        self.joiner = EnrichmentJoiner(db, preload=preload_catalog)
        self.statistics = StatisticsService(db)

    def run(self, owner_id: str, raw_snapshot: Snapshot, top_n: int = None) -> SolvedPipelineResult:
        """
        Import and enrich an owner's solved set.

        An import that fails outright is reported, not raised; enrichment and
        statistics are then skipped.
        """
        try:
            import_report = self.importer.import_snapshot(owner_id, raw_snapshot)
        except (ParseError, ValidationError, ConsistencyError) as e:
            logger.error(f"Import failed for {owner_id}: {e}")
            import_report = ImportReport(owner_id=owner_id)
            import_report.fail(e)
            return SolvedPipelineResult(import_report=import_report)

        enrichment_report = self.joiner.enrich_all(owner_id)
        statistics = self.statistics.solved_summary(owner_id, top_n)

        return SolvedPipelineResult(
            import_report=import_report,
            enrichment_report=enrichment_report,
            statistics=statistics,
        )
