"""
Document store interface shared by both apps.

The hosted store owns every service and booking record. Clients read it
through live queries that push a full snapshot of the matching documents
on every change, and write to it with single-document operations. This
module describes that contract; ``memory.py`` provides an in-process
implementation used by the console demo and the tests.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterator, Optional

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Base class for failures reported by the document store."""


class WriteError(StoreError):
    """Raised when a write is rejected (network, permissions, quota)."""


class DocumentNotFoundError(StoreError):
    """Raised when updating a document that does not exist."""


@dataclass(frozen=True)
class Query:
    """An immutable collection query with equality filters and one sort key."""

    collection: str
    filters: tuple[tuple[str, Any], ...] = ()
    order_field: Optional[str] = None

    def where(self, field_path: str, op: str, value: Any) -> "Query":
        if op != "==":
            raise ValueError(f"Unsupported filter operator: {op!r}")
        return replace(self, filters=self.filters + ((field_path, value),))

    def order_by(self, field_path: str) -> "Query":
        return replace(self, order_field=field_path)

    def matches(self, data: dict[str, Any]) -> bool:
        return all(data.get(name) == value for name, value in self.filters)


@dataclass(frozen=True)
class DocumentSnapshot:
    """One document as delivered in a snapshot."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return dict(self.data)

    def get(self, field_path: str, default: Any = None) -> Any:
        return self.data.get(field_path, default)


@dataclass(frozen=True)
class QuerySnapshot:
    """Full contents of a query at one point in time."""

    docs: list[DocumentSnapshot] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.docs

    def __iter__(self) -> Iterator[DocumentSnapshot]:
        return iter(self.docs)

    def __len__(self) -> int:
        return len(self.docs)


SnapshotCallback = Callable[[QuerySnapshot], None]


class Subscription:
    """
    Handle for one live query.

    Releasing is idempotent and also happens on leaving a ``with`` block,
    so every exit path of the owning component can call it safely.
    """

    def __init__(self, query: Query, release: Callable[["Subscription"], None]) -> None:
        self.query = query
        self._release = release
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._release(self)
        logger.debug("Unsubscribed from '%s'", self.query.collection)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.unsubscribe()


class WriteBatch:
    """Collects ``set`` operations and applies them together on commit."""

    def __init__(self, store: "DocumentStore") -> None:
        self._store = store
        self._writes: list[tuple[str, str, dict[str, Any]]] = []
        self._committed = False

    def set(self, collection: str, data: dict[str, Any], doc_id: Optional[str] = None) -> str:
        """Queue a document write and return the id it will be stored under."""
        if self._committed:
            raise StoreError("Batch already committed")
        doc_id = doc_id or self._store.new_id()
        self._writes.append((collection, doc_id, dict(data)))
        return doc_id

    async def commit(self) -> None:
        if self._committed:
            raise StoreError("Batch already committed")
        self._committed = True
        await self._store.commit_batch(self._writes)


class DocumentStore(ABC):
    """Contract every store backend implements."""

    @abstractmethod
    def new_id(self) -> str:
        """Allocate a fresh document id."""

    @abstractmethod
    def listen(self, query: Query, callback: SnapshotCallback) -> Subscription:
        """Deliver a snapshot now and after every change to the query results."""

    @abstractmethod
    async def get(self, query: Query) -> QuerySnapshot:
        """Fetch the current results of a query once."""

    @abstractmethod
    async def add(self, collection: str, data: dict[str, Any]) -> str:
        """Create a document with a store-assigned id."""

    @abstractmethod
    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Create or overwrite a document."""

    @abstractmethod
    async def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Merge top-level fields into an existing document."""

    @abstractmethod
    async def commit_batch(self, writes: list[tuple[str, str, dict[str, Any]]]) -> None:
        """Apply queued ``set`` operations from a ``WriteBatch``."""

    def batch(self) -> WriteBatch:
        return WriteBatch(self)
