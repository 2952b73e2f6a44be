"""
Storage for users' solved records.
"""

from datetime import datetime
from typing import List

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import ConsistencyError
from ..models import SolvedRecord


class SolvedStore:
    """Owns the solved_records table, partitioned by owner."""

    def __init__(self, db: Session):
        self.db = db

    def replace_for_owner(self, owner_id: str, records: List[SolvedRecord]) -> int:
        """
        Delete all of an owner's records and insert the new set in one transaction.

        Raises:
            ConsistencyError: If the new set repeats a slug
        """
        deleted = (
            self.db.query(SolvedRecord)
            .filter(SolvedRecord.owner_id == owner_id)
            .delete()
        )
        self.db.add_all(records)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConsistencyError(f"Duplicate solved record for owner {owner_id}: {e.orig}") from e

        logger.debug(f"Replaced {deleted} solved records with {len(records)} for {owner_id}")
        return len(records)

    def list_for_owner(self, owner_id: str) -> List[SolvedRecord]:
        return (
            self.db.query(SolvedRecord)
            .filter(SolvedRecord.owner_id == owner_id)
            .order_by(SolvedRecord.id)
            .all()
        )

    def list_unenriched(self, owner_id: str) -> List[SolvedRecord]:
        return (
            self.db.query(SolvedRecord)
            .filter(SolvedRecord.owner_id == owner_id, SolvedRecord.topic_tags.is_(None))
            .order_by(SolvedRecord.id)
            .all()
        )

    def set_topic_tags(self, record: SolvedRecord, tags: List[str]) -> None:
        """Write topic tags onto one record and commit."""
        record.topic_tags = list(tags)
        record.enriched_at = datetime.utcnow()
        self.db.commit()

    def count_for_owner(self, owner_id: str) -> int:
        return self.db.query(SolvedRecord).filter(SolvedRecord.owner_id == owner_id).count()
