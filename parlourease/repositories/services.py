"""Service catalog: a name-ordered live view of offerings plus add-service."""

import logging
from typing import Callable, Iterable, Optional

from parlourease.booking.pricing import ServiceSummary, summarize_services
from parlourease.config import settings
from parlourease.normalization import ICONS, ServiceGlyph
from parlourease.schemas.service_schema import Service, ServiceCreate
from parlourease.store.adapters import service_from_snapshot, services_query
from parlourease.store.base import DocumentStore, Query
from parlourease.store.live import LiveProjection

logger = logging.getLogger(__name__)


def get_icon_choices() -> list[tuple[str, ServiceGlyph]]:
    """Icon tokens offered by the add-service form, with their glyphs."""
    return list(ICONS.items())


class ServiceCatalog:
    """
    Read projection of the services collection.

    Services are append-only: they are added here and never edited or
    deleted, so the catalog exposes no update path.
    """

    def __init__(
        self,
        store: DocumentStore,
        on_change: Optional[Callable[[list[Service]], None]] = None,
    ) -> None:
        self._store = store
        self._projection: LiveProjection[Service] = LiveProjection(
            store, services_query(), service_from_snapshot, on_change
        )

    def start(self) -> None:
        self._projection.start()

    def close(self) -> None:
        self._projection.close()

    @property
    def active(self) -> bool:
        return self._projection.active

    @property
    def services(self) -> list[Service]:
        return self._projection.items

    def find(self, service_id: str) -> Optional[Service]:
        for service in self._projection.items:
            if service.id == service_id:
                return service
        return None

    def summarize(self, service_ids: Iterable[str]) -> ServiceSummary:
        return summarize_services(service_ids, self._projection.items)

    async def add_service(self, request: ServiceCreate) -> str:
        """Append a validated service to the catalog and return its id."""
        service_id = await self._store.add(settings.store.services_collection, request.to_document())
        logger.info("Service added: %s (%s)", request.name, service_id)
        return service_id

    async def find_by_name(self, name: str) -> list[Service]:
        """One-off lookup that does not depend on the live projection."""
        query = Query(settings.store.services_collection).where("name", "==", name)
        snapshot = await self._store.get(query)
        return [s for s in (service_from_snapshot(doc) for doc in snapshot) if s is not None]

    def __enter__(self) -> "ServiceCatalog":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
