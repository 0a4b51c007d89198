"""
Demo data for a fresh project.

Seeding is best-effort. Any store failure is logged at debug level and the
apps carry on with whatever data is already there.
"""

import logging
from datetime import datetime, time
from typing import Optional

from parlourease.config import settings
from parlourease.normalization import local_now, normalize_instant
from parlourease.repositories.bookings import BookingRepository, new_booking_document
from parlourease.repositories.services import ServiceCatalog
from parlourease.schemas.booking_schema import BookingStatus, Payment
from parlourease.store.adapters import service_from_snapshot
from parlourease.store.base import DocumentStore, Query, StoreError

logger = logging.getLogger(__name__)

DEMO_SERVICE_NAME = "Demo Service"
DEMO_CUSTOMER_NAME = "Demo Customer"

INITIAL_SERVICES: list[dict] = [
    {"name": "Haircut & Style", "price": 50, "duration": 60, "icon": "Scissors"},
    {"name": "Manicure", "price": 35, "duration": 45, "icon": "Hand"},
    {"name": "Pedicure", "price": 45, "duration": 50, "icon": "Footprints"},
    {"name": "Facial", "price": 75, "duration": 75, "icon": "Sparkles"},
    {"name": "Bridal Makeup", "price": 200, "duration": 120, "icon": "Gem"},
]

DEMO_SERVICE: dict = {"name": DEMO_SERVICE_NAME, "price": 99, "duration": 45, "icon": "Scissors"}


def _today_at(hour: int, minute: int, now: Optional[datetime]) -> datetime:
    now = local_now() if now is None else normalize_instant(now)
    return datetime.combine(now.date(), time(hour, minute), tzinfo=now.tzinfo)


async def seed_initial_data(store: DocumentStore, now: Optional[datetime] = None) -> bool:
    """Seed five services and two bookings for today when the catalog is empty.

    Returns True when data was written.
    """
    services_collection = settings.store.services_collection
    bookings_collection = settings.store.bookings_collection
    try:
        existing = await store.get(Query(services_collection))
        if not existing.empty:
            return False

        batch = store.batch()
        service_ids = [batch.set(services_collection, dict(doc)) for doc in INITIAL_SERVICES]
        batch.set(bookings_collection, new_booking_document(
            customer_name="Alice Johnson",
            contact="123-456-7890",
            service_id=service_ids[0],
            appointment_at=_today_at(10, 0, now),
            payment=Payment(amount=50),
            notes="Prefers gentle shampoo.",
        ))
        batch.set(bookings_collection, new_booking_document(
            customer_name="Brenda Smith",
            contact="234-567-8901",
            service_id=service_ids[1],
            appointment_at=_today_at(11, 30, now),
            payment=Payment(amount=35),
            status=BookingStatus.IN_PROGRESS,
        ))
        await batch.commit()
    except StoreError as exc:
        logger.debug("Initial seeding skipped: %s", exc)
        return False
    logger.info("Seeded %d services and 2 bookings", len(INITIAL_SERVICES))
    return True


async def add_demo_service_once(store: DocumentStore) -> bool:
    try:
        if await ServiceCatalog(store).find_by_name(DEMO_SERVICE_NAME):
            return False
        await store.add(settings.store.services_collection, dict(DEMO_SERVICE))
    except StoreError as exc:
        logger.debug("Demo service skipped: %s", exc)
        return False
    return True


async def add_demo_booking_once(store: DocumentStore, now: Optional[datetime] = None) -> bool:
    """Add a Pending "Demo Customer" booking at 15:00 today, once.

    It references the demo service, or any service when that is missing;
    with an empty catalog nothing is written.
    """
    repository = BookingRepository(store)
    try:
        if await repository.find_by_customer(DEMO_CUSTOMER_NAME):
            return False

        candidates = await ServiceCatalog(store).find_by_name(DEMO_SERVICE_NAME)
        if not candidates:
            snapshot = await store.get(Query(settings.store.services_collection))
            candidates = [s for s in (service_from_snapshot(doc) for doc in snapshot) if s is not None]
        if not candidates:
            return False

        await repository.create(new_booking_document(
            customer_name=DEMO_CUSTOMER_NAME,
            contact="123-456-7890",
            service_id=candidates[0].id,
            appointment_at=_today_at(15, 0, now),
            payment=Payment(amount=DEMO_SERVICE["price"]),
            notes="Created by live demo.",
        ))
    except StoreError as exc:
        logger.debug("Demo booking skipped: %s", exc)
        return False
    return True


async def seed_demo_data(store: DocumentStore, now: Optional[datetime] = None) -> None:
    """Run every seeding step when ``SEED_DEMO_DATA`` is on."""
    if not settings.store.seed_demo_data:
        logger.debug("Demo seeding disabled")
        return
    await seed_initial_data(store, now)
    await add_demo_service_once(store)
    await add_demo_booking_once(store, now)
