"""Query expression AST for document store reads.

A where filter is a conjunction of conditions on known fields. Sort and
projection are lists of field names already validated against an entity
schema. Stores interpret these types; nothing else reaches the backend.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Operator(str, Enum):
    """Comparison operators accepted in where filters."""

    EQ = "$eq"
    NE = "$ne"
    GT = "$gt"
    GTE = "$gte"
    LT = "$lt"
    LTE = "$lte"
    IN = "$in"
    NIN = "$nin"


@dataclass(frozen=True)
class Condition:
    """Single field comparison (field op value)."""

    field: str
    op: Operator
    value: Any


@dataclass(frozen=True)
class SortKey:
    """Sort on a field; descending when direction is -1."""

    field: str
    descending: bool = False


@dataclass(frozen=True)
class Projection:
    """Field projection.

    When include is True only the listed fields (plus the id unless
    exclude_id) are returned; otherwise the listed fields are dropped.
    """

    fields: tuple[str, ...]
    include: bool = True
    exclude_id: bool = False


@dataclass(frozen=True)
class StoreQuery:
    """A translated read: filter, ordering, projection and paging."""

    conditions: tuple[Condition, ...] = ()
    sort: tuple[SortKey, ...] = ()
    projection: Projection | None = None
    skip: int = 0
    limit: int | None = None
    count: bool = False
    # Set when a filter can only match a malformed identifier or an empty $in.
    matches_nothing: bool = False


def eq(field_name: str, value: Any) -> Condition:
    return Condition(field_name, Operator.EQ, value)


def one_of(field_name: str, values: list[Any]) -> Condition:
    return Condition(field_name, Operator.IN, list(values))
