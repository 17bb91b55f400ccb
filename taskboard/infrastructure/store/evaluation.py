"""In-process evaluation of query AST nodes against plain dict documents.

Used by MemoryDocumentStore for everything, and by FirestoreDocumentStore
for projections Firestore cannot express (field exclusion).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from taskboard.domain.query import Condition, Operator, Projection, SortKey
from taskboard.domain.schema import ID_FIELD


def _equals(stored: Any, value: Any) -> bool:
    """Equality; a scalar matches an array field that contains it."""
    if isinstance(stored, list) and not isinstance(value, list):
        return value in stored
    return stored == value


def _compare(stored: Any, op: Operator, value: Any) -> bool:
    if stored is None or value is None:
        return False
    try:
        if op is Operator.GT:
            return stored > value
        if op is Operator.GTE:
            return stored >= value
        if op is Operator.LT:
            return stored < value
        return stored <= value
    except TypeError:
        return False


def condition_matches(doc: dict[str, Any], cond: Condition) -> bool:
    """Return True if doc satisfies a single condition."""
    stored = doc.get(cond.field)
    if cond.op is Operator.EQ:
        return _equals(stored, cond.value)
    if cond.op is Operator.NE:
        return not _equals(stored, cond.value)
    if cond.op is Operator.IN:
        return any(_equals(stored, v) for v in cond.value)
    if cond.op is Operator.NIN:
        return not any(_equals(stored, v) for v in cond.value)
    return _compare(stored, cond.op, cond.value)


def matches(doc: dict[str, Any], conditions: Iterable[Condition]) -> bool:
    """Return True if doc satisfies every condition (implicit AND)."""
    return all(condition_matches(doc, c) for c in conditions)


def _sort_value(value: Any) -> tuple[int, Any]:
    # Missing/None sorts before any value in ascending order.
    if value is None:
        return (0, 0)
    return (1, value)


def sort_documents(
    docs: list[dict[str, Any]], keys: Sequence[SortKey]
) -> list[dict[str, Any]]:
    """Return docs ordered by keys; earlier keys take priority."""
    result = list(docs)
    for key in reversed(keys):
        result.sort(
            key=lambda d, f=key.field: _sort_value(d.get(f)),
            reverse=key.descending,
        )
    return result


def apply_projection(
    doc: dict[str, Any], projection: Projection | None
) -> dict[str, Any]:
    """Return a copy of doc restricted by projection."""
    if projection is None:
        return dict(doc)
    if projection.include:
        wanted = set(projection.fields)
        if not projection.exclude_id:
            wanted.add(ID_FIELD)
        return {k: v for k, v in doc.items() if k in wanted}
    dropped = set(projection.fields)
    if projection.exclude_id:
        dropped.add(ID_FIELD)
    return {k: v for k, v in doc.items() if k not in dropped}
