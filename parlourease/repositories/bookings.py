"""Booking repository: every booking write goes through here."""

import logging
from datetime import datetime
from typing import Optional, Union

from parlourease.config import settings
from parlourease.schemas.booking_schema import Booking, BookingStatus, Payment
from parlourease.store.adapters import booking_from_snapshot
from parlourease.store.base import DocumentStore, Query

logger = logging.getLogger(__name__)


def new_booking_document(
    customer_name: str,
    contact: str,
    service_id: Union[str, list[str]],
    appointment_at: datetime,
    payment: Payment,
    notes: Optional[str] = None,
    status: BookingStatus = BookingStatus.PENDING,
) -> dict:
    """Build the wire document for a booking."""
    document = {
        "customerName": customer_name,
        "contact": contact,
        "serviceId": list(service_id) if isinstance(service_id, list) else service_id,
        "appointmentDateTime": appointment_at,
        "status": status.value,
        "payment": payment.to_document(),
    }
    if notes is not None:
        document["notes"] = notes
    return document


class BookingRepository:
    """Single-document booking writes against the store."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    @property
    def collection(self) -> str:
        return settings.store.bookings_collection

    async def create(self, document: dict) -> str:
        booking_id = await self._store.add(self.collection, document)
        logger.info(
            "Booking created: %s for %s", booking_id, document.get("customerName", "?")
        )
        return booking_id

    async def update_details(self, booking_id: str, document: dict) -> None:
        await self._store.update(self.collection, booking_id, document)
        logger.info("Booking updated: %s", booking_id)

    async def set_status(self, booking_id: str, status: BookingStatus) -> None:
        await self._store.update(self.collection, booking_id, {"status": status.value})
        logger.info("Booking %s status -> %s", booking_id, status.value)

    async def record_payment(self, booking_id: str, payment: Payment) -> None:
        """
        Store the payment and mark the booking Completed in one update.

        Safe to repeat: the same payment always yields the same document,
        whatever status the booking was in before.
        """
        await self._store.update(
            self.collection,
            booking_id,
            {"payment": payment.to_document(), "status": BookingStatus.COMPLETED.value},
        )
        logger.info(
            "Payment recorded for %s: %.2f %s (%s)",
            booking_id,
            payment.amount,
            payment.method.value if payment.method else "no method",
            payment.status.value,
        )

    async def find_by_customer(self, customer_name: str) -> list[Booking]:
        query = Query(self.collection).where("customerName", "==", customer_name)
        snapshot = await self._store.get(query)
        return [b for b in (booking_from_snapshot(doc) for doc in snapshot) if b is not None]
