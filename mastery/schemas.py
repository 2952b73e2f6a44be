"""
Pydantic schemas for run reports, statistics and API responses.
"""

from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional, List, Dict
from datetime import datetime
from enum import Enum


# =============================================================================
# Enums
# =============================================================================

class DifficultyEnum(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class RunStatus(str, Enum):
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


# =============================================================================
# Run Reports
# =============================================================================

class PipelineReport(BaseModel):
    """Outcome of one sync, import or enrichment run."""
    operation: str
    status: RunStatus = RunStatus.COMPLETED
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    reason: Optional[str] = None
    error_type: Optional[str] = None

    def fail(self, error: Exception) -> None:
        self.status = RunStatus.FAILED
        self.reason = str(error)
        self.error_type = type(error).__name__

    def settle(self) -> None:
        """Set the final status from the counters unless the run already failed."""
        if self.status == RunStatus.FAILED:
            return
        if self.skipped or self.failed:
            self.status = RunStatus.PARTIAL
        else:
            self.status = RunStatus.COMPLETED


class SyncReport(PipelineReport):
    operation: str = "catalog_sync"
    pages_fetched: int = 0
    retries: int = 0
    last_offset: int = 0
    truncated: bool = False


class ImportReport(PipelineReport):
    operation: str = "solved_import"
    owner_id: str
    collapsed: int = 0


class EnrichmentReport(PipelineReport):
    """skipped counts records with no catalog match; they leave the run completed."""
    operation: str = "enrichment"
    owner_id: str
    scanned: int = 0

    def settle(self) -> None:
        if self.status == RunStatus.FAILED:
            return
        self.status = RunStatus.PARTIAL if self.failed else RunStatus.COMPLETED


# =============================================================================
# Statistics Schemas
# =============================================================================

class TopicCount(BaseModel):
    name: str
    count: int


class StatisticsSummary(BaseModel):
    total_count: int
    count_by_difficulty: Dict[str, int]
    top_topics: List[TopicCount]


# =============================================================================
# Catalog / Solved Schemas
# =============================================================================

class _DifficultyModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    @field_validator("difficulty", mode="before", check_fields=False)
    @classmethod
    def _difficulty_label(cls, value):
        # ORM rows carry the models.Difficulty enum
        return getattr(value, "value", value)


class CatalogEntryResponse(_DifficultyModel):
    slug: str
    title: str
    difficulty: DifficultyEnum
    topic_tags: List[str] = []
    sequence_id: int
    frontend_id: Optional[int] = None
    imported_at: datetime


class SolvedRecordResponse(_DifficultyModel):
    owner_id: str
    slug: str
    title: str
    difficulty: DifficultyEnum
    status: Optional[str] = None
    acceptance_rate: Optional[float] = None
    is_paywalled: bool
    solved_at: datetime
    topic_tags: Optional[List[str]] = None


class SolvedPipelineResult(BaseModel):
    import_report: ImportReport
    enrichment_report: Optional[EnrichmentReport] = None
    statistics: Optional[StatisticsSummary] = None

