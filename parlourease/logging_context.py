"""Client ID logging context for telling the two apps apart in shared logs.

The admin dashboard and the customer booking form both talk to the same
collections. Every log record is tagged with the client that emitted it so
a write from one app and the snapshot it triggers in the other can be
followed side by side.

Usage:
    from parlourease.logging_context import client_scope, get_client_logger

    logger = get_client_logger(__name__)
    with client_scope("admin"):
        logger.info("Status updated")  # record.client_id == "admin"
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

_client_id: ContextVar[str] = ContextVar("client_id", default="NO_CLIENT")


def set_client_id(client_id: str) -> None:
    """Set the client ID for the current context."""
    _client_id.set(client_id)


def get_client_id() -> str:
    """Retrieve the current client ID."""
    return _client_id.get()


@contextmanager
def client_scope(client_id: str) -> Iterator[None]:
    """Tag everything logged inside the block with ``client_id``.

    The previous value is restored on exit, so a snapshot delivered to the
    admin app while the customer app is writing is attributed correctly.
    """
    token = _client_id.set(client_id)
    try:
        yield
    finally:
        _client_id.reset(token)


class ClientIdFilter(logging.Filter):
    """Injects client_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.client_id = _client_id.get()  # type: ignore[attr-defined]
        return True


def get_client_logger(name: str) -> logging.Logger:
    """Return a logger with the ClientIdFilter attached.

    The filter adds ``client_id`` to each record so formatters can
    include ``%(client_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, ClientIdFilter) for f in logger.filters):
        logger.addFilter(ClientIdFilter())
    return logger
