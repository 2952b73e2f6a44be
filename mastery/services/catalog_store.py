"""
Local problem catalog storage.

The catalog is only ever replaced: a sync clears it once and then appends
batches as pages arrive, so an interrupted sync leaves a consistent prefix of
the freshest data. Only one sync may run against a database at a time; the
caller is responsible for that.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, List, Optional

from loguru import logger
from sqlalchemy import String, cast, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import ConsistencyError, ValidationError
from ..models import CatalogEntry, Difficulty


def entry_from_item(item: Dict[str, Any], sequence_id: int, imported_at: datetime = None) -> CatalogEntry:
    """
    Build a CatalogEntry from a raw catalog item.
    Slugs are stored lowercased, the same as solved records.

    Raises:
        ValidationError: If the item has no slug, no title or an unknown difficulty
    """
    slug = item.get("slug")
    if not isinstance(slug, str) or not slug.strip():
        raise ValidationError(f"Catalog item without slug: {item!r}")

    title = item.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ValidationError(f"Catalog item {slug!r} has no title")

    try:
        difficulty = Difficulty.from_label(item.get("difficulty"))
    except ValueError as e:
        raise ValidationError(f"Catalog item {slug!r}: {e}") from e

    tags = [t for t in (item.get("topicTags") or []) if isinstance(t, str) and t]

    return CatalogEntry(
        slug=slug.strip().lower(),
        title=title.strip(),
        difficulty=difficulty,
        topic_tags=tags,
        sequence_id=sequence_id,
        frontend_id=_to_int(item.get("frontendId")),
        imported_at=imported_at or datetime.utcnow(),
    )


def _to_int(value) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


class CatalogStore:
    """Owns the catalog_entries table."""

    def __init__(self, db: Session):
        self.db = db

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def clear(self) -> int:
        """Remove every catalog entry. Returns the number of rows deleted."""
        deleted = self.db.query(CatalogEntry).delete()
        self.db.commit()
        logger.info(f"Cleared {deleted} catalog entries")
        return deleted

    def append_batch(self, entries: List[CatalogEntry]) -> int:
        """
        Append one batch of entries and commit it.

        Raises:
            ConsistencyError: If a slug or sequence id repeats within the batch
                or collides with an entry already written in this sync
        """
        if not entries:
            return 0

        seen_slugs = set()
        seen_sequence_ids = set()
        for entry in entries:
            if entry.slug in seen_slugs:
                raise ConsistencyError(f"Duplicate slug in catalog batch: {entry.slug}", entry.slug)
            if entry.sequence_id in seen_sequence_ids:
                raise ConsistencyError(
                    f"Duplicate sequence id in catalog batch: {entry.sequence_id}", str(entry.sequence_id)
                )
            seen_slugs.add(entry.slug)
            seen_sequence_ids.add(entry.sequence_id)

        existing = (
            self.db.query(CatalogEntry.slug)
            .filter(CatalogEntry.slug.in_(seen_slugs))
            .first()
        )
        if existing:
            raise ConsistencyError(f"Slug already present in catalog: {existing[0]}", existing[0])

        self.db.add_all(entries)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConsistencyError(f"Catalog uniqueness violated: {e.orig}") from e

        logger.debug(f"Appended {len(entries)} catalog entries")
        return len(entries)

    def replace_all(self, entries: Iterable[CatalogEntry]) -> int:
        """Replace the whole catalog with the given entries. Returns count written."""
        self.clear()
        return self.append_batch(list(entries))

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def find_by_slug(self, slug: str) -> Optional[CatalogEntry]:
        """Point lookup on the unique slug index."""
        return self.db.query(CatalogEntry).filter(CatalogEntry.slug == slug.strip().lower()).first()

    def find_by_frontend_id(self, frontend_id: int) -> Optional[CatalogEntry]:
        return self.db.query(CatalogEntry).filter(CatalogEntry.frontend_id == frontend_id).first()

    def search(self, query: str, limit: int = 10) -> List[CatalogEntry]:
        """Case-insensitive substring search over title, slug and topic tags."""
        pattern = f"%{query.strip()}%"
        return (
            self.db.query(CatalogEntry)
            .filter(
                or_(
                    CatalogEntry.title.ilike(pattern),
                    CatalogEntry.slug.ilike(pattern),
                    cast(CatalogEntry.topic_tags, String).ilike(pattern),
                )
            )
            .order_by(CatalogEntry.sequence_id)
            .limit(limit)
            .all()
        )

    def all_topic_tags(self) -> List[str]:
        """Distinct topic tags across the catalog, sorted."""
        tags = set()
        for (entry_tags,) in self.db.query(CatalogEntry.topic_tags):
            tags.update(entry_tags or [])
        return sorted(tags)

    def count(self) -> int:
        return self.db.query(func.count(CatalogEntry.id)).scalar()

    def iter_entries(self) -> Iterator[CatalogEntry]:
        """All entries in fetch order."""
        return iter(self.db.query(CatalogEntry).order_by(CatalogEntry.sequence_id).all())

    def slug_map(self) -> Dict[str, List[str]]:
        """Load slug -> topic tags for the whole catalog in one query."""
        return {
            slug: list(tags or [])
            for slug, tags in self.db.query(CatalogEntry.slug, CatalogEntry.topic_tags)
        }
