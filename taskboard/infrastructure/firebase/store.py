"""Firestore-backed document store (implements DocumentStore).

Filters, ordering, paging, inclusion projections and counts run on the
server. Array-field filters Firestore has no "contains" form for (not
equal, not in, whole-array literals, ranges) are evaluated in-process over
the server-filtered documents, with paging applied afterwards. Unique
fields are enforced with reservation documents whose ID is the unique
value (atomic create, 409 on conflict). Array push/pull use field
transforms so each is atomic on the target document.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

import httpx

from taskboard.domain.exceptions import StoreException
from taskboard.domain.query import Condition, Operator, Projection, StoreQuery
from taskboard.domain.schema import ID_FIELD
from taskboard.infrastructure.collections import ARRAY_FIELDS, UNIQUE_FIELDS
from taskboard.infrastructure.firebase._rest_client import (
    NAME_FIELD,
    DocumentExistsError,
    FirestoreRESTClient,
    _encode_value,
)
from taskboard.infrastructure.store.errors import DuplicateKeyError
from taskboard.infrastructure.store.evaluation import apply_projection, matches

logger = logging.getLogger(__name__)

_OP_MAP: dict[Operator, str] = {
    Operator.EQ: "EQUAL",
    Operator.NE: "NOT_EQUAL",
    Operator.LT: "LESS_THAN",
    Operator.LTE: "LESS_THAN_OR_EQUAL",
    Operator.GT: "GREATER_THAN",
    Operator.GTE: "GREATER_THAN_OR_EQUAL",
    Operator.IN: "IN",
    Operator.NIN: "NOT_IN",
}

# Equality/membership on an array field means "contains".
_ARRAY_OP_MAP: dict[Operator, str] = {
    Operator.EQ: "ARRAY_CONTAINS",
    Operator.IN: "ARRAY_CONTAINS_ANY",
}


def _is_contains(cond: Condition) -> bool:
    """True when cond on an array field has a Firestore "contains" form."""
    if cond.op is Operator.EQ:
        return not isinstance(cond.value, list)
    if cond.op is Operator.IN:
        return not any(isinstance(v, list) for v in cond.value)
    return False


def _field_path(field: str) -> str:
    return NAME_FIELD if field == ID_FIELD else field


def _reservation_id(value: Any) -> str:
    """Firestore document ID from a unique value (cannot contain '/')."""
    return str(value).replace("/", "_")


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    """Convert transport and HTTP failures into StoreException."""
    try:
        yield
    except httpx.HTTPError as e:
        logger.error("Firestore %s failed: %s", action, e)
        raise StoreException(f"Document store error during {action}", str(e)) from e


class FirestoreDocumentStore:
    """Document store using Firestore. Same contract as MemoryDocumentStore."""

    def __init__(
        self,
        client: FirestoreRESTClient,
        unique_fields: dict[str, tuple[str, ...]] | None = None,
        array_fields: dict[str, tuple[str, ...]] | None = None,
    ) -> None:
        self._client = client
        self._unique_fields = dict(UNIQUE_FIELDS if unique_fields is None else unique_fields)
        self._array_fields = dict(ARRAY_FIELDS if array_fields is None else array_fields)

    def _op(self, collection: str, cond: Condition) -> str:
        if cond.field in self._array_fields.get(collection, ()):
            return _ARRAY_OP_MAP[cond.op]
        return _OP_MAP[cond.op]

    def _split(
        self, collection: str, conditions: Sequence[Condition]
    ) -> tuple[list[Condition], list[Condition]]:
        """Return (server, local) conditions; local ones need in-process evaluation."""
        arrays = self._array_fields.get(collection, ())
        server: list[Condition] = []
        local: list[Condition] = []
        for cond in conditions:
            if cond.field in arrays and not _is_contains(cond):
                local.append(cond)
            else:
                server.append(cond)
        return server, local

    async def _scan(
        self, collection: str, server: Sequence[Condition], local: Sequence[Condition]
    ) -> list[dict[str, Any]]:
        """Documents matching server and local conditions, reading only the local fields."""
        fields = sorted({c.field for c in local})
        q = self._filtered(collection, server).select(fields)
        docs = [{ID_FIELD: snap.id, **snap.to_dict()} async for snap in q.stream()]
        return [d for d in docs if matches(d, local)]

    def _filtered(self, collection: str, conditions: Sequence[Condition]):
        q = self._client.collection(collection).query()
        for cond in conditions:
            q.where(_field_path(cond.field), self._op(collection, cond), cond.value)
        return q

    @staticmethod
    def _strip_id(document: dict[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in document.items() if k != ID_FIELD}

    def _index_collection(self, collection: str, field: str) -> str:
        return f"{collection}_{field}_index"

    async def _reserve(self, collection: str, doc_id: str, values: dict[str, Any]) -> None:
        """Reserve unique values for doc_id; release partial reservations on conflict."""
        reserved: list[tuple[str, Any]] = []
        for field, value in values.items():
            index = self._client.collection(self._index_collection(collection, field))
            try:
                await index.create(_reservation_id(value), {"owner": doc_id})
            except DocumentExistsError:
                holder = await index.document(_reservation_id(value)).get()
                if holder is not None and holder.to_dict().get("owner") == doc_id:
                    continue
                await self._release(collection, dict(reserved))
                raise DuplicateKeyError(collection, field, value) from None
            reserved.append((field, value))

    async def _release(self, collection: str, values: dict[str, Any]) -> None:
        for field, value in values.items():
            index = self._client.collection(self._index_collection(collection, field))
            await index.document(_reservation_id(value)).delete()

    def _unique_values(self, collection: str, document: dict[str, Any]) -> dict[str, Any]:
        return {
            f: document.get(f)
            for f in self._unique_fields.get(collection, ())
            if document.get(f) is not None
        }

    async def find(self, collection: str, query: StoreQuery) -> list[dict[str, Any]]:
        server, local = self._split(collection, query.conditions)
        q = self._filtered(collection, server)
        for key in query.sort:
            q.order_by(
                _field_path(key.field), "DESCENDING" if key.descending else "ASCENDING"
            )
        projection = query.projection
        if not local:
            if projection is not None and projection.include:
                wanted = [_field_path(f) for f in projection.fields if f != ID_FIELD]
                q.select(wanted or [NAME_FIELD])
            q.offset(query.skip).limit(query.limit)
        with _store_errors("find"):
            docs = [{ID_FIELD: snap.id, **snap.to_dict()} async for snap in q.stream()]
        if local:
            docs = [d for d in docs if matches(d, local)]
            end = None if query.limit is None else query.skip + query.limit
            docs = docs[query.skip:end]
        return [apply_projection(d, projection) for d in docs]

    async def count(self, collection: str, conditions: Sequence[Condition]) -> int:
        server, local = self._split(collection, conditions)
        with _store_errors("count"):
            if local:
                return len(await self._scan(collection, server, local))
            return await self._filtered(collection, server).count()

    async def get(
        self,
        collection: str,
        doc_id: str,
        projection: Projection | None = None,
    ) -> dict[str, Any] | None:
        with _store_errors("get"):
            snap = await self._client.collection(collection).document(doc_id).get()
        if snap is None:
            return None
        return apply_projection({ID_FIELD: snap.id, **snap.to_dict()}, projection)

    async def insert(self, collection: str, document: dict[str, Any]) -> dict[str, Any]:
        doc_id = document[ID_FIELD]
        unique = self._unique_values(collection, document)
        with _store_errors("insert"):
            await self._reserve(collection, doc_id, unique)
            try:
                await self._client.collection(collection).create(
                    doc_id, self._strip_id(document)
                )
            except DocumentExistsError:
                await self._release(collection, unique)
                raise DuplicateKeyError(collection, ID_FIELD, doc_id) from None
        return dict(document)

    async def replace(
        self, collection: str, doc_id: str, document: dict[str, Any]
    ) -> dict[str, Any] | None:
        ref = self._client.collection(collection).document(doc_id)
        with _store_errors("replace"):
            snap = await ref.get()
            if snap is None:
                return None
            old_unique = self._unique_values(collection, snap.to_dict())
            new_unique = self._unique_values(collection, document)
            changed = {f: v for f, v in new_unique.items() if old_unique.get(f) != v}
            await self._reserve(collection, doc_id, changed)
            body = self._strip_id(document)
            await ref.set(body)
            await self._release(
                collection, {f: v for f, v in old_unique.items() if f in changed}
            )
        return {ID_FIELD: doc_id, **body}

    async def delete(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        ref = self._client.collection(collection).document(doc_id)
        with _store_errors("delete"):
            snap = await ref.get()
            if snap is None:
                return None
            await ref.delete()
            data = snap.to_dict()
            await self._release(collection, self._unique_values(collection, data))
        return {ID_FIELD: doc_id, **data}

    async def update_many(
        self,
        collection: str,
        conditions: Sequence[Condition],
        changes: dict[str, Any],
    ) -> int:
        coll = self._client.collection(collection)
        server, local = self._split(collection, conditions)
        updated = 0
        with _store_errors("update_many"):
            if local:
                ids = [d[ID_FIELD] for d in await self._scan(collection, server, local)]
            else:
                q = self._filtered(collection, server).select([NAME_FIELD])
                ids = [snap.id async for snap in q.stream()]
            for doc_id in ids:
                if await coll.document(doc_id).update(changes):
                    updated += 1
        return updated

    async def _transform(
        self, collection: str, doc_id: str, field: str, kind: str, values: Sequence[Any]
    ) -> bool:
        ref = self._client.collection(collection).document(doc_id)
        transform = {
            "fieldPath": field,
            kind: {"values": [_encode_value(v) for v in values]},
        }
        with _store_errors(kind):
            return await self._client.commit_transforms(ref, [transform])

    async def add_to_array(
        self, collection: str, doc_id: str, field: str, values: Sequence[Any]
    ) -> bool:
        return await self._transform(
            collection, doc_id, field, "appendMissingElements", values
        )

    async def remove_from_array(
        self, collection: str, doc_id: str, field: str, values: Sequence[Any]
    ) -> bool:
        return await self._transform(
            collection, doc_id, field, "removeAllFromArray", values
        )

    async def close(self) -> None:
        await self._client.aclose()
        logger.info("Firestore HTTP client closed")
