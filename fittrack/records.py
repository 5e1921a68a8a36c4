"""
Joining activity records with their categories, and searching logs.
"""

import logging
from typing import Iterable

from fittrack.models import (
    ActivityCategory,
    ActivityRecord,
    RecordResolution,
    ResolvedRecord,
    UnresolvedRecord,
)

logger = logging.getLogger(__name__)


def resolve_records(
    records: Iterable[ActivityRecord], categories: Iterable[ActivityCategory]
) -> list[RecordResolution]:
    """
    Attach each record's category.

    Records whose ``category_id`` is not among ``categories`` come back as
    UnresolvedRecord; the caller decides whether to skip them.
    """
    by_id = {category.id: category for category in categories}
    resolved: list[RecordResolution] = []
    for record in records:
        category = by_id.get(record.category_id)
        if category is None:
            resolved.append(UnresolvedRecord(record))
        else:
            resolved.append(ResolvedRecord(record, category))
    return resolved


def resolved_only(
    records: Iterable[ActivityRecord], categories: Iterable[ActivityCategory]
) -> list[ResolvedRecord]:
    """Resolve records and drop the ones with a missing category."""
    result = []
    for item in resolve_records(records, categories):
        if isinstance(item, UnresolvedRecord):
            logger.debug(
                "Skipping record %s: unknown category %s",
                item.record.id,
                item.record.category_id,
            )
            continue
        result.append(item)
    return result


def search_records(resolved: list[ResolvedRecord], term: str | None) -> list[ResolvedRecord]:
    """
    Filter resolved records by a case-insensitive search term.

    A record matches when the term appears in its category name or its note.
    An empty term returns all records.
    """
    if not term:
        return list(resolved)

    needle = term.casefold()
    return [
        item
        for item in resolved
        if needle in item.category.display_name.casefold()
        or (item.record.note and needle in item.record.note.casefold())
    ]
