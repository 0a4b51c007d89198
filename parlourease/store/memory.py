"""
In-process document store with live queries.

Behaves like the hosted store as far as the apps can observe: native
datetimes are stored as ``StoreTimestamp`` values, ``order_by`` follows the
store's cross-type ordering and skips documents missing the sort field,
and every listener receives a full snapshot right away and again after
each write that changes its results. Used by the console demo and tests.
"""

import copy
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from parlourease.store.base import (
    DocumentNotFoundError,
    DocumentSnapshot,
    DocumentStore,
    Query,
    QuerySnapshot,
    SnapshotCallback,
    Subscription,
    WriteError,
)

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True, order=True)
class StoreTimestamp:
    """Store-native timestamp: seconds and nanoseconds since the epoch (UTC)."""

    seconds: int
    nanos: int = 0

    @classmethod
    def from_datetime(cls, value: datetime) -> "StoreTimestamp":
        if value.tzinfo is None:
            value = value.astimezone()
        delta = value - _EPOCH
        seconds = delta.days * 86400 + delta.seconds
        return cls(seconds=seconds, nanos=delta.microseconds * 1000)

    def to_datetime(self) -> datetime:
        return _EPOCH + timedelta(seconds=self.seconds, microseconds=self.nanos // 1000)


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return StoreTimestamp.from_datetime(value)
    if isinstance(value, dict):
        return {key: _encode(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_encode(item) for item in value]
    return value


def _order_key(value: Any) -> tuple:
    if value is None:
        return (0,)
    if isinstance(value, bool):
        return (1, value)
    if isinstance(value, (int, float)):
        return (2, value)
    if isinstance(value, StoreTimestamp):
        return (3, value.seconds, value.nanos)
    if isinstance(value, str):
        return (4, value)
    return (5, repr(value))


class _Listener:
    def __init__(self, query: Query, callback: SnapshotCallback) -> None:
        self.query = query
        self.callback = callback
        self.last_delivered: list[tuple[str, dict[str, Any]]] = []


class InMemoryDocumentStore(DocumentStore):
    """Dictionary-backed store shared by every client in the process."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._listeners: dict[Subscription, _Listener] = {}
        # When set, every write raises WriteError.
        self.fail_writes = False

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def _run_query(self, query: Query) -> list[tuple[str, dict[str, Any]]]:
        documents = self._collections.get(query.collection, {})
        rows = [
            (doc_id, data) for doc_id, data in documents.items() if query.matches(data)
        ]
        if query.order_field is not None:
            rows = [row for row in rows if query.order_field in row[1]]
            rows.sort(key=lambda row: (_order_key(row[1][query.order_field]), row[0]))
        else:
            rows.sort(key=lambda row: row[0])
        return [(doc_id, copy.deepcopy(data)) for doc_id, data in rows]

    @staticmethod
    def _to_snapshot(rows: list[tuple[str, dict[str, Any]]]) -> QuerySnapshot:
        return QuerySnapshot(
            docs=[DocumentSnapshot(id=doc_id, data=copy.deepcopy(data)) for doc_id, data in rows]
        )

    async def get(self, query: Query) -> QuerySnapshot:
        return self._to_snapshot(self._run_query(query))

    def document(self, collection: str, doc_id: str) -> dict[str, Any]:
        """Return a copy of one stored document (raw, timestamps encoded)."""
        try:
            return copy.deepcopy(self._collections[collection][doc_id])
        except KeyError:
            raise DocumentNotFoundError(f"{collection}/{doc_id} not found") from None

    # ------------------------------------------------------------------ #
    # Live queries
    # ------------------------------------------------------------------ #

    def listen(self, query: Query, callback: SnapshotCallback) -> Subscription:
        subscription = Subscription(query, self._release)
        listener = _Listener(query, callback)
        self._listeners[subscription] = listener
        logger.debug("Listening on '%s' (%d active)", query.collection, len(self._listeners))
        self._deliver(listener, force=True)
        return subscription

    def _release(self, subscription: Subscription) -> None:
        self._listeners.pop(subscription, None)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _deliver(self, listener: _Listener, force: bool = False) -> None:
        rows = self._run_query(listener.query)
        if not force and rows == listener.last_delivered:
            return
        listener.last_delivered = rows
        try:
            listener.callback(self._to_snapshot(rows))
        except Exception:
            logger.exception("Snapshot listener on '%s' failed", listener.query.collection)

    def _notify(self, collections: set[str]) -> None:
        for subscription, listener in list(self._listeners.items()):
            if subscription.active and listener.query.collection in collections:
                self._deliver(listener)

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    def new_id(self) -> str:
        return uuid.uuid4().hex[:20]

    def _check_writable(self, collection: str) -> None:
        if self.fail_writes:
            raise WriteError(f"Write to '{collection}' rejected")

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        self._check_writable(collection)
        doc_id = self.new_id()
        self._collections.setdefault(collection, {})[doc_id] = _encode(data)
        logger.debug("Added %s/%s", collection, doc_id)
        self._notify({collection})
        return doc_id

    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self._check_writable(collection)
        self._collections.setdefault(collection, {})[doc_id] = _encode(data)
        logger.debug("Set %s/%s", collection, doc_id)
        self._notify({collection})

    async def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self._check_writable(collection)
        documents = self._collections.get(collection, {})
        if doc_id not in documents:
            raise DocumentNotFoundError(f"{collection}/{doc_id} not found")
        documents[doc_id].update(_encode(data))
        logger.debug("Updated %s/%s fields=%s", collection, doc_id, sorted(data))
        self._notify({collection})

    async def commit_batch(self, writes: list[tuple[str, str, dict[str, Any]]]) -> None:
        for collection, _, _ in writes:
            self._check_writable(collection)
        touched: set[str] = set()
        for collection, doc_id, data in writes:
            self._collections.setdefault(collection, {})[doc_id] = _encode(data)
            touched.add(collection)
        logger.debug("Committed batch of %d write(s)", len(writes))
        self._notify(touched)
