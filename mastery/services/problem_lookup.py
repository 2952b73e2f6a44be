"""
Resolve user input (number, slug or problem URL) to a catalog entry.
"""

import re
from dataclasses import dataclass
from typing import Optional

from ..models import CatalogEntry
from .catalog_store import CatalogStore

PROBLEM_URL_RE = re.compile(r"leetcode\.com/problems/([a-z0-9-]+)", re.IGNORECASE)
SLUG_RE = re.compile(r"^[a-z0-9-]+$", re.IGNORECASE)


@dataclass
class ProblemReference:
    """Either a displayed problem number or a slug."""
    frontend_id: Optional[int] = None
    slug: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.frontend_id is None and self.slug is None


def parse_problem_reference(text: str) -> ProblemReference:
    """
    Parse a problem reference.

    Supports:
    - https://leetcode.com/problems/two-sum/
    - https://leetcode.com/problems/two-sum/description/
    - leetcode.com/problems/two-sum
    - two-sum
    - 1
    """
    trimmed = text.strip()

    if trimmed.isdigit():
        return ProblemReference(frontend_id=int(trimmed))

    match = PROBLEM_URL_RE.search(trimmed)
    if match:
        return ProblemReference(slug=match.group(1).lower())

    if SLUG_RE.match(trimmed):
        return ProblemReference(slug=trimmed.lower())

    return ProblemReference()


def lookup_problem(store: CatalogStore, text: str) -> Optional[CatalogEntry]:
    """Find the catalog entry a reference points at, if any."""
    reference = parse_problem_reference(text)
    if reference.frontend_id is not None:
        return store.find_by_frontend_id(reference.frontend_id)
    if reference.slug:
        return store.find_by_slug(reference.slug)
    return None
