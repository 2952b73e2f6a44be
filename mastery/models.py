"""
SQLAlchemy database models for the problem catalog and users' solved sets.
"""

import enum

from sqlalchemy import (
    Column, Integer, String, Float, Boolean, DateTime, JSON,
    Enum as SQLEnum, UniqueConstraint, Index
)
from sqlalchemy.sql import func

from .database import Base


class Difficulty(enum.Enum):
    """Problem difficulty."""
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @classmethod
    def from_label(cls, label) -> "Difficulty":
        """Parse a difficulty label in any case ("EASY", "easy", "Easy")."""
        if isinstance(label, cls):
            return label
        if not isinstance(label, str):
            raise ValueError(f"Invalid difficulty: {label!r}")
        normalized = label.strip().lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        raise ValueError(f"Invalid difficulty: {label!r}")


class CatalogEntry(Base):
    """One practice problem as known to the external catalog."""
    __tablename__ = "catalog_entries"

    id = Column(Integer, primary_key=True, index=True)

    # Stable identifier from the remote (e.g., "two-sum")
    slug = Column(String(200), unique=True, index=True, nullable=False)
    title = Column(String(300), nullable=False)
    difficulty = Column(SQLEnum(Difficulty), nullable=False)

    # Ordered list of topic names, may be empty
    topic_tags = Column(JSON, nullable=False, default=list)

    # Assigned at import time from fetch order (offset + position + 1)
    sequence_id = Column(Integer, unique=True, nullable=False)

    # Problem number shown by the remote, if it sent one
    frontend_id = Column(Integer, nullable=True)

    imported_at = Column(DateTime, default=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_catalog_frontend_id", "frontend_id"),
        Index("idx_catalog_difficulty", "difficulty"),
    )


class SolvedRecord(Base):
    """A user's claim of having solved a specific problem."""
    __tablename__ = "solved_records"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String(100), nullable=False, index=True)

    slug = Column(String(200), nullable=False)
    title = Column(String(300), nullable=False)
    difficulty = Column(SQLEnum(Difficulty), nullable=False)
    status = Column(String(20), nullable=True)

    # Fraction between 0 and 1
    acceptance_rate = Column(Float, nullable=True)
    is_paywalled = Column(Boolean, default=False, nullable=False)

    # Identifiers carried over from the snapshot
    external_id = Column(String(50), nullable=True)
    frontend_id = Column(Integer, nullable=True)

    solved_at = Column(DateTime, default=func.now(), nullable=False)

    # NULL until the enrichment pass finds a catalog entry with the same slug
    topic_tags = Column(JSON(none_as_null=True), nullable=True)
    enriched_at = Column(DateTime, nullable=True)

    __table_args__ = (
        UniqueConstraint("slug", "owner_id", name="unique_owner_slug"),
        Index("idx_solved_owner_difficulty", "owner_id", "difficulty"),
    )
