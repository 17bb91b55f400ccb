"""Thin Firestore REST API client (no firebase-admin).

Uses google-auth for service account tokens and Firestore REST v1.
Keeps the install small (avoids grpcio / firebase-admin).
All HTTP calls use httpx.AsyncClient so they do not block the event loop.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Sequence
from typing import Any
from urllib.parse import quote

import httpx

from taskboard.infrastructure.firebase._rest_encoding import (
    _encode_value,
    decode_document,
    encode_document,
)

_FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
_BASE = "https://firestore.googleapis.com/v1"

# Firestore's field path for the document name (our "_id").
NAME_FIELD = "__name__"


def _get_credentials(key_dict: dict):
    """Return google.oauth2.service_account.Credentials for Firestore."""
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[_FIRESTORE_SCOPE]
    )


def _get_access_token(credentials) -> str:
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


async def _request_async(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    body: dict | None = None,
    access_token: str | None = None,
    params: list[tuple[str, str]] | None = None,
) -> Any:
    """Perform async HTTP request to Firestore REST API. 404 returns None."""
    headers = {"Content-Type": "application/json"}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    if method == "GET":
        resp = await client.get(url, headers=headers, params=params)
    elif method == "PATCH":
        resp = await client.patch(url, headers=headers, json=body, params=params)
    elif method == "POST":
        resp = await client.post(url, headers=headers, json=body, params=params)
    elif method == "DELETE":
        resp = await client.delete(url, headers=headers)
    else:
        raise ValueError(f"Unsupported method: {method!r}")
    if resp.status_code == 404:
        return None
    if resp.status_code == 409:
        raise DocumentExistsError("Document already exists")
    if resp.status_code not in (200, 204):
        resp.raise_for_status()
    if method == "DELETE":
        return {}
    raw = resp.content
    return json.loads(raw.decode()) if raw else {}


class DocumentExistsError(Exception):
    """Raised when createDocument returns 409 (document ID already exists)."""


class DocumentSnapshot:
    """Snapshot of a document (id + data)."""

    def __init__(self, id_: str, data: dict):
        self.id = id_
        self._data = data

    def to_dict(self) -> dict:
        return self._data


def _snapshot(doc: dict) -> DocumentSnapshot:
    name = doc.get("name", "")
    doc_id = name.split("/")[-1] if name else ""
    return DocumentSnapshot(doc_id, decode_document(doc.get("fields")))


class DocumentReference:
    """Reference to a single document; matches firestore API style."""

    def __init__(self, client: "FirestoreRESTClient", path: str):
        self._client = client
        self._path = path

    @property
    def name(self) -> str:
        """Full resource name (projects/.../documents/<collection>/<id>)."""
        return self._path

    async def set(self, data: dict[str, Any]) -> None:
        """Create or overwrite the document (PATCH with full replace)."""
        await _request_async(
            self._client._http,
            f"{_BASE}/{self._path}",
            method="PATCH",
            body=encode_document(data),
            access_token=await self._client.get_token(),
        )

    async def update(self, data: dict[str, Any], *, must_exist: bool = True) -> bool:
        """Overwrite only the given fields. Returns False if the document is missing."""
        params = [("updateMask.fieldPaths", key) for key in data]
        if must_exist:
            params.append(("currentDocument.exists", "true"))
        out = await _request_async(
            self._client._http,
            f"{_BASE}/{self._path}",
            method="PATCH",
            body=encode_document(data),
            access_token=await self._client.get_token(),
            params=params,
        )
        return out is not None

    async def get(self, fields: Sequence[str] | None = None) -> DocumentSnapshot | None:
        """Fetch the document; returns None if not found."""
        params = [("mask.fieldPaths", f) for f in fields] if fields else None
        out = await _request_async(
            self._client._http,
            f"{_BASE}/{self._path}",
            access_token=await self._client.get_token(),
            params=params,
        )
        if not out:
            return None
        return DocumentSnapshot(
            self._path.split("/")[-1], decode_document(out.get("fields"))
        )

    async def delete(self) -> None:
        """Delete the document. Idempotent if document is already missing (404)."""
        await _request_async(
            self._client._http,
            f"{_BASE}/{self._path}",
            method="DELETE",
            access_token=await self._client.get_token(),
        )


class StructuredQuery:
    """Fluent builder for a runQuery structuredQuery (filters ANDed on the server)."""

    def __init__(self, client: "FirestoreRESTClient", collection_id: str):
        self._client = client
        self._collection_id = collection_id
        self._filters: list[dict[str, Any]] = []
        self._order_by: list[dict[str, Any]] = []
        self._select: list[str] | None = None
        self._offset: int = 0
        self._limit: int | None = None

    def where(self, field: str, op: str, value: Any) -> "StructuredQuery":
        """Add a field filter. op is a Firestore operator name (e.g. EQUAL, IN)."""
        if field == NAME_FIELD:
            encoded = self._encode_name(value)
        else:
            encoded = _encode_value(value)
        self._filters.append(
            {
                "fieldFilter": {
                    "field": {"fieldPath": field},
                    "op": op,
                    "value": encoded,
                }
            }
        )
        return self

    def _encode_name(self, value: Any) -> dict:
        coll = self._client.collection(self._collection_id)
        if isinstance(value, list):
            return {
                "arrayValue": {
                    "values": [
                        {"referenceValue": coll.document(v).name} for v in value
                    ]
                }
            }
        return {"referenceValue": coll.document(value).name}

    def order_by(self, field: str, direction: str = "ASCENDING") -> "StructuredQuery":
        self._order_by.append({"field": {"fieldPath": field}, "direction": direction})
        return self

    def select(self, fields: Sequence[str]) -> "StructuredQuery":
        self._select = list(fields)
        return self

    def offset(self, n: int) -> "StructuredQuery":
        self._offset = n
        return self

    def limit(self, n: int | None) -> "StructuredQuery":
        self._limit = n
        return self

    def to_body(self, *, paged: bool = True) -> dict[str, Any]:
        """Return the structuredQuery JSON body."""
        structured: dict[str, Any] = {
            "from": [{"collectionId": self._collection_id}],
        }
        if len(self._filters) == 1:
            structured["where"] = self._filters[0]
        elif self._filters:
            structured["where"] = {
                "compositeFilter": {"op": "AND", "filters": self._filters}
            }
        if not paged:
            return structured
        if self._select is not None:
            structured["select"] = {
                "fields": [{"fieldPath": f} for f in self._select]
            }
        if self._order_by:
            structured["orderBy"] = self._order_by
        if self._offset:
            structured["offset"] = self._offset
        if self._limit is not None:
            structured["limit"] = self._limit
        return structured

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        """Execute the query and yield document snapshots."""
        resp = await _request_async(
            self._client._http,
            f"{_BASE}/{self._client.documents_root}:runQuery",
            method="POST",
            body={"structuredQuery": self.to_body()},
            access_token=await self._client.get_token(),
        )
        items = resp if isinstance(resp, list) else ([resp] if resp else [])
        for item in items:
            if "document" not in item:
                continue
            yield _snapshot(item["document"])

    async def count(self) -> int:
        """Run a COUNT aggregation over the filtered collection (ignores paging)."""
        body = {
            "structuredAggregationQuery": {
                "structuredQuery": self.to_body(paged=False),
                "aggregations": [{"alias": "total", "count": {}}],
            }
        }
        resp = await _request_async(
            self._client._http,
            f"{_BASE}/{self._client.documents_root}:runAggregationQuery",
            method="POST",
            body=body,
            access_token=await self._client.get_token(),
        )
        items = resp if isinstance(resp, list) else ([resp] if resp else [])
        for item in items:
            fields = item.get("result", {}).get("aggregateFields", {})
            if "total" in fields:
                return int(fields["total"].get("integerValue", 0))
        return 0


class CollectionReference:
    """Reference to a collection; matches firestore API style."""

    def __init__(self, client: "FirestoreRESTClient", collection_id: str):
        self._client = client
        self._collection_id = collection_id
        self._path = f"{client.documents_root}/{collection_id}"

    def document(self, document_id: str) -> DocumentReference:
        return DocumentReference(self._client, f"{self._path}/{document_id}")

    async def create(self, document_id: str, data: dict[str, Any]) -> None:
        """Create a document with the given ID (fail with DocumentExistsError if it exists)."""
        url = f"{_BASE}/{self._path}?documentId={quote(document_id, safe='')}"
        await _request_async(
            self._client._http,
            url,
            method="POST",
            body=encode_document(data),
            access_token=await self._client.get_token(),
        )

    def query(self) -> StructuredQuery:
        """Start a structured query. Chain .where(), .order_by(), .select(), then .stream()."""
        return StructuredQuery(self._client, self._collection_id)


class FirestoreRESTClient:
    """Lightweight Firestore client using REST API (no firebase-admin)."""

    def __init__(
        self,
        project_id: str,
        credentials,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._project_id = project_id
        self._credentials = credentials
        self.documents_root = f"projects/{project_id}/databases/(default)/documents"
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=timeout)
        self._owns_http = http_client is None

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it (do not close injected client)."""
        if self._owns_http:
            await self._http.aclose()

    async def get_token(self) -> str:
        """Return a valid access token; refreshes in thread pool to avoid blocking."""
        return await asyncio.to_thread(_get_access_token, self._credentials)

    def collection(self, collection_id: str) -> CollectionReference:
        return CollectionReference(self, collection_id)

    async def commit_transforms(
        self, document: DocumentReference, transforms: list[dict[str, Any]]
    ) -> bool:
        """Apply server-side field transforms to an existing document atomically.

        Returns False if the document does not exist.
        """
        body = {
            "writes": [
                {
                    "transform": {
                        "document": document.name,
                        "fieldTransforms": transforms,
                    },
                    "currentDocument": {"exists": True},
                }
            ]
        }
        out = await _request_async(
            self._http,
            f"{_BASE}/{self.documents_root}:commit",
            method="POST",
            body=body,
            access_token=await self.get_token(),
        )
        return out is not None
