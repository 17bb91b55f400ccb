"""In-process document store.

Default backend for development and tests. Each method runs under a single
asyncio.Lock, so every call is atomic; sequences of calls are not.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import Sequence
from typing import Any

from taskboard.domain.query import Condition, Projection, StoreQuery
from taskboard.domain.schema import ID_FIELD
from taskboard.infrastructure.store.errors import DuplicateKeyError
from taskboard.infrastructure.store.evaluation import (
    apply_projection,
    matches,
    sort_documents,
)

logger = logging.getLogger(__name__)


class MemoryDocumentStore:
    """Dict-backed document store. Same contract as FirestoreDocumentStore."""

    def __init__(self, unique_fields: dict[str, tuple[str, ...]] | None = None) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._unique_fields = dict(unique_fields or {})
        self._lock = asyncio.Lock()

    def _coll(self, collection: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(collection, {})

    def _check_unique(
        self, collection: str, document: dict[str, Any], skip_id: str | None = None
    ) -> None:
        for field in self._unique_fields.get(collection, ()):
            value = document.get(field)
            for doc_id, existing in self._coll(collection).items():
                if doc_id != skip_id and existing.get(field) == value:
                    raise DuplicateKeyError(collection, field, value)

    async def find(self, collection: str, query: StoreQuery) -> list[dict[str, Any]]:
        async with self._lock:
            docs = [d for d in self._coll(collection).values() if matches(d, query.conditions)]
            if query.sort:
                docs = sort_documents(docs, query.sort)
            docs = docs[query.skip:]
            if query.limit is not None:
                docs = docs[: query.limit]
            return [copy.deepcopy(apply_projection(d, query.projection)) for d in docs]

    async def count(self, collection: str, conditions: Sequence[Condition]) -> int:
        async with self._lock:
            return sum(1 for d in self._coll(collection).values() if matches(d, conditions))

    async def get(
        self,
        collection: str,
        doc_id: str,
        projection: Projection | None = None,
    ) -> dict[str, Any] | None:
        async with self._lock:
            doc = self._coll(collection).get(doc_id)
            if doc is None:
                return None
            return copy.deepcopy(apply_projection(doc, projection))

    async def insert(self, collection: str, document: dict[str, Any]) -> dict[str, Any]:
        async with self._lock:
            doc_id = document[ID_FIELD]
            if doc_id in self._coll(collection):
                raise DuplicateKeyError(collection, ID_FIELD, doc_id)
            self._check_unique(collection, document)
            self._coll(collection)[doc_id] = copy.deepcopy(document)
            return copy.deepcopy(document)

    async def replace(
        self, collection: str, doc_id: str, document: dict[str, Any]
    ) -> dict[str, Any] | None:
        async with self._lock:
            coll = self._coll(collection)
            if doc_id not in coll:
                return None
            self._check_unique(collection, document, skip_id=doc_id)
            stored = copy.deepcopy(document)
            stored[ID_FIELD] = doc_id
            coll[doc_id] = stored
            return copy.deepcopy(stored)

    async def delete(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        async with self._lock:
            return self._coll(collection).pop(doc_id, None)

    async def update_many(
        self,
        collection: str,
        conditions: Sequence[Condition],
        changes: dict[str, Any],
    ) -> int:
        async with self._lock:
            matched = [d for d in self._coll(collection).values() if matches(d, conditions)]
            for doc in matched:
                doc.update(copy.deepcopy(changes))
            return len(matched)

    async def add_to_array(
        self, collection: str, doc_id: str, field: str, values: Sequence[Any]
    ) -> bool:
        async with self._lock:
            doc = self._coll(collection).get(doc_id)
            if doc is None:
                return False
            current = doc.setdefault(field, [])
            for value in values:
                if value not in current:
                    current.append(value)
            return True

    async def remove_from_array(
        self, collection: str, doc_id: str, field: str, values: Sequence[Any]
    ) -> bool:
        async with self._lock:
            doc = self._coll(collection).get(doc_id)
            if doc is None:
                return False
            doc[field] = [v for v in doc.get(field, []) if v not in values]
            return True

    async def close(self) -> None:
        logger.debug("Memory document store closed")
