"""
Statistics over the catalog or a solved set.

The same group-by-count runs over both: a single-level count on one field,
where list-valued fields (topic tags) are flattened first.
"""

from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Tuple

from sqlalchemy.orm import Session

from .. import config
from ..schemas import StatisticsSummary, TopicCount
from .catalog_store import CatalogStore
from .solved_store import SolvedStore

# camelCase names accepted for dict sources
FIELD_ALIASES = {
    "topicTags": "topic_tags",
    "topic_tags": "topicTags",
}


def _field_value(item: Any, field: str) -> Any:
    if isinstance(item, Mapping):
        if field in item:
            return item[field]
        return item.get(FIELD_ALIASES.get(field, field))
    value = getattr(item, field, None)
    if value is None and field in FIELD_ALIASES:
        value = getattr(item, FIELD_ALIASES[field], None)
    return value


def _label(value: Any) -> str:
    # Enum members (e.g. Difficulty.EASY) count under their value
    return str(getattr(value, "value", value))


def group_counts(source: Iterable[Any], grouping_field: str) -> Dict[str, int]:
    """
    Count records per value of grouping_field, in first-seen order.

    A list-valued field contributes once per distinct value in each record,
    so a record tagged ["dp", "array"] adds one to both.
    """
    counts: Dict[str, int] = {}
    for item in source:
        value = _field_value(item, grouping_field)
        if value is None:
            continue

        if isinstance(value, (list, tuple, set)):
            keys = []
            for v in value:
                if v is None:
                    continue
                key = _label(v)
                if key not in keys:
                    keys.append(key)
        else:
            keys = [_label(value)]

        for key in keys:
            counts[key] = counts.get(key, 0) + 1
    return counts


def rank(counts: Dict[str, int], top_n: int) -> List[Tuple[str, int]]:
    """Order by count descending; ties keep first-seen order."""
    if top_n <= 0:
        return []
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return ranked[:top_n]


def summarize(source: Iterable[Any], grouping_field: str = "topic_tags", top_n: int = None) -> StatisticsSummary:
    """
    Summarize records (CatalogEntry, SolvedRecord or plain dicts).

    Args:
        source: Records to scan
        grouping_field: Field ranked into top_topics ("topic_tags" or "difficulty")
        top_n: Length of the ranking (<= 0 gives an empty ranking)

    Returns:
        StatisticsSummary with total count, count per difficulty and the ranking
    """
    if top_n is None:
        top_n = config.STATS_TOP_N

    items = list(source)
    ranking = rank(group_counts(items, grouping_field), top_n)

    return StatisticsSummary(
        total_count=len(items),
        count_by_difficulty=group_counts(items, "difficulty"),
        top_topics=[TopicCount(name=name, count=count) for name, count in ranking],
    )


class StatisticsService:
    """Summaries over the stored catalog and solved sets."""

    def __init__(self, db: Session):
        self.catalog = CatalogStore(db)
        self.solved = SolvedStore(db)

    def catalog_summary(self, top_n: int = None, grouping_field: str = "topic_tags") -> StatisticsSummary:
        return summarize(self.catalog.iter_entries(), grouping_field, top_n)

    def solved_summary(self, owner_id: str, top_n: int = None, grouping_field: str = "topic_tags") -> StatisticsSummary:
        return summarize(self.solved.list_for_owner(owner_id), grouping_field, top_n)
