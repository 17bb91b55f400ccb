"""Translate list query parameters into a StoreQuery.

Parameters arrive as raw strings: where/sort/select are JSON objects,
skip/limit are integers, count is "true" or anything else. Every field
name is resolved against the entity schema and every filter value is
coerced to the field's type before anything reaches the store.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from pydantic import TypeAdapter, ValidationError

from taskboard.domain.enums import FieldType
from taskboard.domain.exceptions import QueryParseException
from taskboard.domain.query import Condition, Operator, Projection, SortKey, StoreQuery
from taskboard.domain.schema import ID_FIELD, EntitySchema
from taskboard.shared.utils.datetime import ensure_utc
from taskboard.shared.utils.generators import is_valid_id

_DATETIME = TypeAdapter(datetime)

_SORT_DIRECTIONS: dict[Any, bool] = {
    1: False,
    -1: True,
    "1": False,
    "-1": True,
    "asc": False,
    "ascending": False,
    "desc": True,
    "descending": True,
}

_LIST_OPERATORS = (Operator.IN, Operator.NIN)


def _load_object(parameter: str, raw: str) -> dict[str, Any]:
    try:
        value = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        raise QueryParseException(parameter, "Must be valid JSON.") from None
    if not isinstance(value, dict):
        raise QueryParseException(parameter, "Must be a JSON object.")
    return value


def _parse_int(parameter: str, raw: str, minimum: int) -> int:
    try:
        value = int(raw.strip())
    except (ValueError, AttributeError):
        raise QueryParseException(parameter, "Must be an integer.") from None
    if value < minimum:
        raise QueryParseException(parameter, f"Must be at least {minimum}.")
    return value


class QueryTranslator:
    """Builds StoreQuery objects for one entity schema.

    default_limit applies when the client sends no limit (None = unlimited).
    """

    def __init__(self, schema: EntitySchema, default_limit: int | None = None) -> None:
        self.schema = schema
        self.default_limit = default_limit

    def translate(
        self,
        *,
        where: str | None = None,
        sort: str | None = None,
        select: str | None = None,
        skip: str | None = None,
        limit: str | None = None,
        count: str | None = None,
    ) -> StoreQuery:
        """Parse all list parameters. Raises QueryParseException on malformed input."""
        conditions, matches_nothing = self.parse_where(where)
        sort_keys = self.parse_sort(sort)
        projection = self.parse_select(select)
        skip_n = _parse_int("skip", skip, 0) if skip not in (None, "") else 0
        limit_n = (
            _parse_int("limit", limit, 1) if limit not in (None, "") else self.default_limit
        )
        return StoreQuery(
            conditions=conditions,
            sort=sort_keys,
            projection=projection,
            skip=skip_n,
            limit=limit_n,
            count=count == "true",
            matches_nothing=matches_nothing,
        )

    def _field(self, parameter: str, name: str) -> str:
        resolved = self.schema.resolve(name)
        if resolved is None:
            raise QueryParseException(
                parameter, f"Unknown field '{name}' for {self.schema.name}."
            )
        return resolved

    def parse_where(self, raw: str | None) -> tuple[tuple[Condition, ...], bool]:
        """Return (conditions, matches_nothing).

        matches_nothing is True when an equality test can only hold for a
        malformed identifier or a $in list is empty, so the query can skip
        the store.
        """
        if raw in (None, ""):
            return (), False
        parsed = _load_object("where", raw)
        conditions: list[Condition] = []
        matches_nothing = False
        for name, expr in parsed.items():
            if name.startswith("$"):
                raise QueryParseException("where", f"Unsupported operator '{name}'.")
            field = self._field("where", name)
            if isinstance(expr, dict) and expr and all(k.startswith("$") for k in expr):
                pairs = list(expr.items())
            elif isinstance(expr, dict):
                raise QueryParseException(
                    "where", f"Field '{name}' must map to a value or an operator object."
                )
            else:
                pairs = [("$eq", expr)]
            for op_name, value in pairs:
                try:
                    op = Operator(op_name)
                except ValueError:
                    raise QueryParseException(
                        "where", f"Unsupported operator '{op_name}'."
                    ) from None
                cond = self._condition(field, op, value)
                if cond is None:
                    matches_nothing = True
                elif cond is not _DROPPED:
                    conditions.append(cond)
        return tuple(conditions), matches_nothing

    def _condition(self, field: str, op: Operator, value: Any) -> Condition | None:
        """Build a typed condition; None means nothing can match, _DROPPED means no-op."""
        if op in _LIST_OPERATORS:
            if not isinstance(value, list):
                raise QueryParseException("where", f"'{op.value}' on '{field}' needs a list.")
            coerced = [self._coerce(field, v) for v in value]
            if self._is_id_field(field):
                coerced = [v for v in coerced if is_valid_id(v)]
            if not coerced:
                # Empty membership: $in matches nothing, $nin excludes nothing.
                return None if op is Operator.IN else _DROPPED
            return Condition(field, op, coerced)
        coerced = self._coerce(field, value)
        if self._is_id_field(field) and op in (Operator.EQ, Operator.NE):
            if not is_valid_id(coerced) and not isinstance(coerced, list):
                return None if op is Operator.EQ else _DROPPED
        return Condition(field, op, coerced)

    def _is_id_field(self, field: str) -> bool:
        return self.schema.field_type(field) in (FieldType.ID, FieldType.ID_LIST)

    def _coerce(self, field: str, value: Any) -> Any:
        if value is None:
            return None
        kind = self.schema.field_type(field)
        if kind is FieldType.BOOLEAN:
            if isinstance(value, bool):
                return value
            if value in ("true", "false"):
                return value == "true"
        elif kind is FieldType.DATETIME:
            if isinstance(value, (str, int, float)) and not isinstance(value, bool):
                try:
                    return ensure_utc(_DATETIME.validate_python(value))
                except ValidationError:
                    pass
        elif kind is FieldType.ID_LIST and isinstance(value, list):
            if all(isinstance(v, str) for v in value):
                return list(value)
        elif isinstance(value, str):
            return value
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        raise QueryParseException(
            "where", f"Value {value!r} is not valid for field '{field}'."
        )

    def parse_sort(self, raw: str | None) -> tuple[SortKey, ...]:
        if raw in (None, ""):
            return ()
        parsed = _load_object("sort", raw)
        keys: list[SortKey] = []
        for name, direction in parsed.items():
            field = self._field("sort", name)
            key = direction.lower() if isinstance(direction, str) else direction
            valid = isinstance(key, (int, str)) and not isinstance(key, bool)
            if not valid or key not in _SORT_DIRECTIONS:
                raise QueryParseException(
                    "sort", f"Direction for '{name}' must be 1 or -1."
                )
            keys.append(SortKey(field, _SORT_DIRECTIONS[key]))
        return tuple(keys)

    def parse_select(self, raw: str | None) -> Projection | None:
        """Parse an inclusion ({f: 1}) or exclusion ({f: 0}) projection."""
        if raw in (None, ""):
            return None
        parsed = _load_object("select", raw)
        if not parsed:
            return None
        included: list[str] = []
        excluded: list[str] = []
        exclude_id = False
        for name, flag in parsed.items():
            field = self._field("select", name)
            if flag in (1, True, "1"):
                include = True
            elif flag in (0, False, "0"):
                include = False
            else:
                raise QueryParseException("select", f"Value for '{name}' must be 1 or 0.")
            if field == ID_FIELD:
                exclude_id = not include
                continue
            (included if include else excluded).append(field)
        if included and excluded:
            raise QueryParseException(
                "select", "Cannot mix inclusion and exclusion of fields."
            )
        if included:
            return Projection(tuple(included), include=True, exclude_id=exclude_id)
        return Projection(tuple(excluded), include=False, exclude_id=exclude_id)


_DROPPED = Condition("", Operator.EQ, None)
