from parlourease.store.base import (
    DocumentNotFoundError,
    DocumentSnapshot,
    DocumentStore,
    Query,
    QuerySnapshot,
    StoreError,
    Subscription,
    WriteBatch,
    WriteError,
)
from parlourease.store.live import LiveProjection
from parlourease.store.memory import InMemoryDocumentStore, StoreTimestamp

__all__ = [
    "DocumentStore",
    "InMemoryDocumentStore",
    "StoreTimestamp",
    "Query",
    "QuerySnapshot",
    "DocumentSnapshot",
    "Subscription",
    "WriteBatch",
    "LiveProjection",
    "StoreError",
    "WriteError",
    "DocumentNotFoundError",
]
