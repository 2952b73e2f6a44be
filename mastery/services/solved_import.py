"""
Solved snapshot import.

Reads a point-in-time export of a user's solved problems and replaces that
user's solved set with it. Malformed records are skipped and counted; an
unreadable document aborts the import.
"""

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from loguru import logger
from sqlalchemy.orm import Session

from ..errors import ParseError, ValidationError
from ..models import Difficulty, SolvedRecord
from ..schemas import ImportReport
from .solved_store import SolvedStore

Snapshot = Union[str, bytes, Dict[str, Any], List[Any]]


def load_snapshot(raw_snapshot: Snapshot) -> List[Any]:
    """
    Extract the list of question records from a snapshot document.

    Accepts parsed JSON or JSON text/bytes, never a path. The document may be
    the raw favorites export ({"data": {"favoriteQuestionList": {"questions":
    [...]}}}), a dict with a "questions" list, or a bare list.

    Raises:
        ParseError: If no question list can be found
    """
    data = raw_snapshot

    if isinstance(data, bytes):
        data = _parse_json(data.decode("utf-8", errors="replace"))
    elif isinstance(data, str):
        text = data.strip()
        if not text.startswith(("{", "[")):
            raise ParseError("Snapshot text is not a JSON object or array")
        data = _parse_json(text)

    if isinstance(data, list):
        return data

    if isinstance(data, dict):
        inner = data.get("data")
        favorites = inner.get("favoriteQuestionList") if isinstance(inner, dict) else None
        if isinstance(favorites, dict) and isinstance(favorites.get("questions"), list):
            return favorites["questions"]
        if isinstance(data.get("questions"), list):
            return data["questions"]

    raise ParseError("Snapshot does not contain a list of questions")


def load_snapshot_file(path: Union[str, os.PathLike]) -> List[Any]:
    """
    Read a snapshot from a JSON file on disk (batch script use only).

    Raises:
        ParseError: If the file cannot be read or holds no question list
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ParseError(f"Could not read snapshot {path}: {e}") from e
    return load_snapshot(_parse_json(text))


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Snapshot is not valid JSON: {e}") from e


def normalize_acceptance_rate(value: Any) -> Optional[float]:
    """Return the acceptance rate as a 0-1 fraction. Percent values are scaled down."""
    if value is None or isinstance(value, bool):
        return None
    try:
        rate = float(value)
    except (TypeError, ValueError):
        return None
    if rate > 1:
        rate = rate / 100
    if rate < 0 or rate > 1:
        return None
    return rate


def record_from_snapshot(owner_id: str, question: Any, solved_at: datetime) -> SolvedRecord:
    """
    Build a SolvedRecord from one snapshot question.

    Raises:
        ValidationError: If the question has no usable slug or difficulty
    """
    if not isinstance(question, dict):
        raise ValidationError(f"Snapshot record is not an object: {question!r}")

    slug = question.get("titleSlug") or question.get("slug")
    if not isinstance(slug, str) or not slug.strip():
        raise ValidationError(f"Snapshot record without slug: {question.get('title')!r}")
    slug = slug.strip().lower()

    try:
        difficulty = Difficulty.from_label(question.get("difficulty"))
    except ValueError as e:
        raise ValidationError(f"Snapshot record {slug!r}: {e}") from e

    title = question.get("title")
    if not isinstance(title, str) or not title.strip():
        title = slug

    external_id = question.get("id")
    frontend_id = question.get("questionFrontendId")

    return SolvedRecord(
        owner_id=owner_id,
        slug=slug,
        title=title.strip(),
        difficulty=difficulty,
        status=question.get("status"),
        acceptance_rate=normalize_acceptance_rate(question.get("acRate", question.get("acceptanceRate"))),
        is_paywalled=bool(question.get("paidOnly", question.get("isPaywalled", False))),
        external_id=str(external_id) if external_id is not None else None,
        frontend_id=int(frontend_id) if str(frontend_id or "").isdigit() else None,
        solved_at=solved_at,
    )


class SolvedSetImporter:
    """Replaces an owner's solved set from a snapshot."""

    def __init__(self, db: Session):
        self.store = SolvedStore(db)

    def import_snapshot(self, owner_id: str, raw_snapshot: Snapshot) -> ImportReport:
        """
        Import a snapshot for one owner.

        Every prior record of the owner is removed before the new set is
        written. Records repeating a slug are collapsed (the last one wins).

        Raises:
            ParseError: If the snapshot cannot be read
            ConsistencyError: If the store rejects the new set
        """
        if not owner_id or not owner_id.strip():
            raise ValidationError("owner_id is required")

        questions = load_snapshot(raw_snapshot)
        logger.info(f"Found {len(questions)} solved problems in snapshot for {owner_id}")

        report = ImportReport(owner_id=owner_id)
        solved_at = datetime.utcnow()
        by_slug: Dict[str, SolvedRecord] = {}

        for question in questions:
            try:
                record = record_from_snapshot(owner_id, question, solved_at)
            except ValidationError as e:
                report.skipped += 1
                logger.warning(f"Skipping snapshot record: {e}")
                continue

            if record.slug in by_slug:
                report.collapsed += 1
                logger.debug(f"Collapsing duplicate snapshot record {record.slug}")
            by_slug[record.slug] = record

        report.succeeded = self.store.replace_for_owner(owner_id, list(by_slug.values()))
        report.settle()

        logger.info(
            f"Imported {report.succeeded} solved problems for {owner_id} "
            f"({report.skipped} skipped, {report.collapsed} collapsed)"
        )
        return report
