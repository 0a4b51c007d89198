"""
Local projections of live queries.

A ``LiveProjection`` owns exactly one subscription. Every snapshot replaces
its items wholesale; nothing is patched incrementally. Components create
their own projections in ``start()`` and close them on teardown.
"""

import logging
from typing import Callable, Generic, Optional, TypeVar

from parlourease.store.base import DocumentSnapshot, DocumentStore, Query, QuerySnapshot, Subscription

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LiveProjection(Generic[T]):
    """Disposable, snapshot-driven copy of a query's results."""

    def __init__(
        self,
        store: DocumentStore,
        query: Query,
        converter: Callable[[DocumentSnapshot], Optional[T]],
        on_change: Optional[Callable[[list[T]], None]] = None,
    ) -> None:
        self._store = store
        self._query = query
        self._converter = converter
        self._on_change = on_change
        self._subscription: Optional[Subscription] = None
        self._items: list[T] = []
        self.snapshot_count = 0

    @property
    def items(self) -> list[T]:
        return list(self._items)

    @property
    def active(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def start(self) -> None:
        if self.active:
            raise RuntimeError(f"Projection of '{self._query.collection}' already started")
        self._subscription = self._store.listen(self._query, self._apply)

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _apply(self, snapshot: QuerySnapshot) -> None:
        converted = (self._converter(doc) for doc in snapshot)
        self._items = [item for item in converted if item is not None]
        self.snapshot_count += 1
        logger.debug(
            "Snapshot #%d of '%s': %d item(s)",
            self.snapshot_count, self._query.collection, len(self._items),
        )
        if self._on_change is not None:
            self._on_change(self.items)

    def __enter__(self) -> "LiveProjection[T]":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
