"""Document store adapter.

Repositories talk to a :class:`DocumentStore`; two backends exist:

* :class:`FirestoreStore` (producao), built on the Firebase Admin SDK.
* :class:`MemoryStore` (``LOCAL_STORE=1``), an in-process store used for local
  development and the test suite.

Numeric ids emulate an auto-increment column: each collection owns one field of
the ``_meta/counters`` document, incremented inside a transaction. Documents are
keyed by ``str(id)``.
"""

import copy
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from firebase_admin import firestore as firebase_firestore
from google.api_core import exceptions as google_exceptions
from google.cloud import firestore

from app.core.errors import IndexUnavailableError
from app.core.firebase import get_firebase_app

logger = logging.getLogger("agenda.store")

COUNTERS_COLLECTION = "_meta"
COUNTERS_DOCUMENT = "counters"
DEFAULT_BATCH_LIMIT = 500

Filter = tuple[str, str, Any]
OrderBy = tuple[str, str]


@dataclass
class WriteOp:
    kind: str  # "set" | "delete"
    collection: str
    doc_id: str
    data: Optional[dict] = None
    merge: bool = False


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def convert_timestamps(value: Any) -> Any:
    """Recursively turn store timestamps into plain UTC ``datetime`` values."""
    if isinstance(value, datetime):
        value = as_utc(value)
        return datetime(
            value.year,
            value.month,
            value.day,
            value.hour,
            value.minute,
            value.second,
            value.microsecond,
            tzinfo=timezone.utc,
        )
    if isinstance(value, dict):
        return {key: convert_timestamps(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [convert_timestamps(item) for item in value]
    return value


def _with_id(doc_id: str, data: dict) -> dict:
    # documentos criados por merge parcial nao carregam o campo "id"
    if "id" not in data and doc_id.isdigit():
        data["id"] = int(doc_id)
    return data


def _current_counter(data: Optional[dict], name: str) -> int:
    current = (data or {}).get(name)
    if isinstance(current, bool) or not isinstance(current, int):
        return 0
    return current


def _chunks(ops: list[WriteOp], size: int) -> Iterable[list[WriteOp]]:
    for start in range(0, len(ops), size):
        yield ops[start:start + size]


class DocumentStore(ABC):
    def __init__(self, batch_limit: int = DEFAULT_BATCH_LIMIT) -> None:
        self.batch_limit = batch_limit

    def initialize(self) -> None:
        pass

    def close(self) -> None:
        pass

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        """Return the document data or ``None`` when it does not exist."""

    @abstractmethod
    def set(self, collection: str, doc_id: str, data: dict, merge: bool = False) -> None:
        ...

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> None:
        ...

    @abstractmethod
    def query(
        self,
        collection: str,
        filters: Iterable[Filter] = (),
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
        index_fallback: bool = False,
    ) -> list[dict]:
        """Run a filtered query.

        With ``index_fallback`` an ordered query the backend cannot serve for
        lack of an index raises :class:`IndexUnavailableError`; otherwise store
        errors propagate unchanged.
        """

    @abstractmethod
    def allocate_id(self, name: str) -> int:
        """Atomically increment the counter of ``name`` and return the new value."""

    @abstractmethod
    def upsert_by_key(
        self, collection: str, key: dict, update: dict, insert: dict
    ) -> tuple[int, bool]:
        """Merge ``update`` into the document matching ``key`` or insert a new one.

        Runs as a single transaction. Returns ``(id, created)``.
        """

    @abstractmethod
    def _commit_chunk(self, ops: list[WriteOp]) -> None:
        ...

    def commit_batch(self, ops: list[WriteOp]) -> None:
        # each chunk is atomic; chunks are committed in order
        for chunk in _chunks(ops, self.batch_limit):
            self._commit_chunk(chunk)
        if len(ops) > self.batch_limit:
            logger.info(
                "batch commit split ops=%s chunk_size=%s", len(ops), self.batch_limit
            )


@firestore.transactional
def _increment_counter(transaction, counter_ref, name: str) -> int:
    snapshot = counter_ref.get(transaction=transaction)
    current = _current_counter(snapshot.to_dict() if snapshot.exists else None, name)
    next_id = current + 1
    transaction.set(counter_ref, {name: next_id}, merge=True)
    return next_id


@firestore.transactional
def _upsert_document(transaction, client, collection: str, key: dict, update: dict, insert: dict):
    query = client.collection(collection)
    for field, value in key.items():
        query = query.where(filter=firestore.FieldFilter(field, "==", value))
    existing = list(transaction.get(query.limit(1)))
    if existing:
        snapshot = existing[0]
        transaction.set(snapshot.reference, update, merge=True)
        data = snapshot.to_dict() or {}
        return int(data.get("id") or snapshot.id), False

    counter_ref = client.collection(COUNTERS_COLLECTION).document(COUNTERS_DOCUMENT)
    counter = counter_ref.get(transaction=transaction)
    new_id = _current_counter(counter.to_dict() if counter.exists else None, collection) + 1
    transaction.set(counter_ref, {collection: new_id}, merge=True)
    transaction.set(client.collection(collection).document(str(new_id)), {"id": new_id, **insert})
    return new_id, True


class FirestoreStore(DocumentStore):
    def __init__(self, client=None, batch_limit: int = DEFAULT_BATCH_LIMIT) -> None:
        super().__init__(batch_limit)
        self._client = client

    def initialize(self) -> None:
        if self._client is None:
            self._client = firebase_firestore.client(app=get_firebase_app())
            logger.info("firestore client initialized project=%s", self._client.project)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    @property
    def client(self):
        if self._client is None:
            raise RuntimeError("FirestoreStore nao inicializado")
        return self._client

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        snapshot = self.client.collection(collection).document(doc_id).get()
        if not snapshot.exists:
            return None
        return _with_id(snapshot.id, convert_timestamps(snapshot.to_dict()))

    def set(self, collection: str, doc_id: str, data: dict, merge: bool = False) -> None:
        self.client.collection(collection).document(doc_id).set(data, merge=merge)

    def delete(self, collection: str, doc_id: str) -> None:
        self.client.collection(collection).document(doc_id).delete()

    def query(
        self,
        collection: str,
        filters: Iterable[Filter] = (),
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
        index_fallback: bool = False,
    ) -> list[dict]:
        query = self.client.collection(collection)
        for field, op, value in filters:
            query = query.where(filter=firestore.FieldFilter(field, op, value))
        if order_by:
            field, direction = order_by
            query = query.order_by(
                field,
                direction=firestore.Query.DESCENDING if direction == "desc" else firestore.Query.ASCENDING,
            )
        if limit:
            query = query.limit(limit)
        try:
            snapshots = list(query.stream())
        except google_exceptions.FailedPrecondition as exc:
            if order_by and index_fallback:
                raise IndexUnavailableError(str(exc)) from exc
            raise
        return [_with_id(snapshot.id, convert_timestamps(snapshot.to_dict())) for snapshot in snapshots]

    def allocate_id(self, name: str) -> int:
        counter_ref = self.client.collection(COUNTERS_COLLECTION).document(COUNTERS_DOCUMENT)
        return _increment_counter(self.client.transaction(), counter_ref, name)

    def upsert_by_key(
        self, collection: str, key: dict, update: dict, insert: dict
    ) -> tuple[int, bool]:
        return _upsert_document(self.client.transaction(), self.client, collection, key, update, insert)

    def _commit_chunk(self, ops: list[WriteOp]) -> None:
        batch = self.client.batch()
        for op in ops:
            ref = self.client.collection(op.collection).document(op.doc_id)
            if op.kind == "delete":
                batch.delete(ref)
            else:
                batch.set(ref, op.data or {}, merge=op.merge)
        batch.commit()


def _matches(data: dict, flt: Filter) -> bool:
    field, op, expected = flt
    if field not in data:
        return False
    actual = data[field]
    try:
        if op == "==":
            return actual == expected
        if op == "!=":
            return actual != expected
        if op == "<":
            return actual < expected
        if op == "<=":
            return actual <= expected
        if op == ">":
            return actual > expected
        if op == ">=":
            return actual >= expected
        if op == "in":
            return actual in expected
        if op == "not-in":
            return actual not in expected
        if op == "array-contains":
            return isinstance(actual, list) and expected in actual
    except TypeError:
        return False
    raise ValueError(f"Operador nao suportado: {op}")


def _normalize(value: Any) -> Any:
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, dict):
        return {key: _normalize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize(item) for item in value]
    return value


class MemoryStore(DocumentStore):
    """In-process document store with Firestore-like query semantics."""

    def __init__(self, batch_limit: int = DEFAULT_BATCH_LIMIT) -> None:
        super().__init__(batch_limit)
        self._lock = threading.RLock()
        self._collections: dict[str, dict[str, dict]] = {}

    def close(self) -> None:
        with self._lock:
            self._collections.clear()

    def _collection(self, name: str) -> dict[str, dict]:
        return self._collections.setdefault(name, {})

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        with self._lock:
            data = self._collection(collection).get(doc_id)
            if data is None:
                return None
            return _with_id(doc_id, convert_timestamps(copy.deepcopy(data)))

    def _write(self, collection: str, doc_id: str, data: dict, merge: bool) -> None:
        docs = self._collection(collection)
        data = _normalize(copy.deepcopy(data))
        if merge and doc_id in docs:
            docs[doc_id].update(data)
        else:
            docs[doc_id] = data

    def set(self, collection: str, doc_id: str, data: dict, merge: bool = False) -> None:
        with self._lock:
            self._write(collection, doc_id, data, merge)

    def delete(self, collection: str, doc_id: str) -> None:
        with self._lock:
            self._collection(collection).pop(doc_id, None)

    def query(
        self,
        collection: str,
        filters: Iterable[Filter] = (),
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
        index_fallback: bool = False,
    ) -> list[dict]:
        filters = list(filters)
        with self._lock:
            docs = [
                (doc_id, data)
                for doc_id, data in sorted(self._collection(collection).items())
                if all(_matches(data, flt) for flt in filters)
            ]
            if order_by:
                field, direction = order_by
                docs = [(doc_id, data) for doc_id, data in docs if data.get(field) is not None]
                docs.sort(key=lambda item: item[1][field], reverse=direction == "desc")
            if limit:
                docs = docs[:limit]
            return [_with_id(doc_id, convert_timestamps(copy.deepcopy(data))) for doc_id, data in docs]

    def allocate_id(self, name: str) -> int:
        with self._lock:
            counters = self._collection(COUNTERS_COLLECTION).setdefault(COUNTERS_DOCUMENT, {})
            next_id = _current_counter(counters, name) + 1
            counters[name] = next_id
            return next_id

    def upsert_by_key(
        self, collection: str, key: dict, update: dict, insert: dict
    ) -> tuple[int, bool]:
        with self._lock:
            for doc_id, data in sorted(self._collection(collection).items()):
                if all(data.get(field) == value for field, value in key.items()):
                    self._write(collection, doc_id, update, merge=True)
                    return int(data.get("id") or doc_id), False
            new_id = self.allocate_id(collection)
            self._write(collection, str(new_id), {"id": new_id, **insert}, merge=False)
            return new_id, True

    def _commit_chunk(self, ops: list[WriteOp]) -> None:
        with self._lock:
            for op in ops:
                if op.kind == "delete":
                    self._collection(op.collection).pop(op.doc_id, None)
                else:
                    self._write(op.collection, op.doc_id, op.data or {}, op.merge)
