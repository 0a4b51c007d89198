"""
Customer booking form controller.

Customers pick one or more services, a day and a time, and submit a
Pending booking. The form never reads bookings; it only subscribes to the
services catalog.
"""

from datetime import date, datetime
from typing import Optional

from parlourease.apps.notifications import NotificationCenter
from parlourease.booking.pricing import ServiceSummary
from parlourease.booking.time_slots import SelectionStatus, TimeSlotPicker
from parlourease.logging_context import client_scope, get_client_logger
from parlourease.normalization import local_now, normalize_instant
from parlourease.repositories.bookings import BookingRepository, new_booking_document
from parlourease.repositories.services import ServiceCatalog
from parlourease.schemas.booking_schema import ClientBookingRequest, Payment
from parlourease.schemas.service_schema import Service
from parlourease.store.base import DocumentStore, StoreError

logger = get_client_logger(__name__)

CLIENT_ID = "client"


class ClientBookingForm:
    """Multi-service booking form with today-aware time slots."""

    def __init__(
        self,
        store: DocumentStore,
        notifications: Optional[NotificationCenter] = None,
        festival_mode: bool = False,
    ) -> None:
        self.notifications = notifications or NotificationCenter()
        self.catalog = ServiceCatalog(store)
        self.repository = BookingRepository(store)
        self.picker = TimeSlotPicker(festival_mode=festival_mode, filter_past=True)
        self.submitted_booking_id: Optional[str] = None

    def start(self) -> None:
        with client_scope(CLIENT_ID):
            self.catalog.start()
            logger.info("Booking form started: %d service(s) on offer", len(self.catalog.services))

    def close(self) -> None:
        with client_scope(CLIENT_ID):
            self.catalog.close()

    def __enter__(self) -> "ClientBookingForm":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def services(self) -> list[Service]:
        return self.catalog.services

    @property
    def is_submitted(self) -> bool:
        return self.submitted_booking_id is not None

    def _now(self, now: Optional[datetime]) -> datetime:
        return local_now() if now is None else normalize_instant(now)

    def select_date(self, day: date, now: Optional[datetime] = None) -> tuple[bool, str]:
        with client_scope(CLIENT_ID):
            return self.picker.select_date(day, self._now(now))

    def select_time(self, label: str, now: Optional[datetime] = None) -> tuple[bool, str]:
        with client_scope(CLIENT_ID):
            return self.picker.select_time(label, self._now(now))

    def available_time_slots(self, now: Optional[datetime] = None) -> list[str]:
        return self.picker.available_slots(self._now(now))

    @property
    def time_was_cleared(self) -> bool:
        return self.picker.status == SelectionStatus.CLEARED

    def quote(self, service_ids: list[str]) -> ServiceSummary:
        """Names and combined price of the chosen services."""
        return self.catalog.summarize(service_ids)

    async def submit(self, request: ClientBookingRequest, now: Optional[datetime] = None) -> Optional[str]:
        """
        Write a Pending booking for the chosen services.

        The payment amount is the combined price of the services; method is
        left unset and the payment Unpaid. Returns the new booking id, or
        None when the write failed.
        """
        with client_scope(CLIENT_ID):
            now = self._now(now)
            ok, msg = self.picker.select_date(request.appointment_date, now)
            if ok:
                ok, msg = self.picker.select_time(request.appointment_time, now)
            if not ok:
                logger.info("Booking request rejected: %s", msg)
                self.notifications.error(msg)
                return None

            summary = self.catalog.summarize(request.service_ids)
            document = new_booking_document(
                customer_name=request.customer_name,
                contact=request.contact,
                service_id=list(request.service_ids),
                appointment_at=request.appointment_at(),
                payment=Payment(amount=summary.total_price),
                notes=request.notes,
            )
            try:
                booking_id = await self.repository.create(document)
            except StoreError as exc:
                logger.exception("Failed to submit booking: %s", exc)
                self.notifications.error("Could not send your booking request. Please try again.")
                return None

            self.submitted_booking_id = booking_id
            self.notifications.notify(
                "Booking Request Sent!",
                f"Thanks {request.customer_name}, we will confirm your appointment shortly.",
            )
            return booking_id

    def reset(self) -> None:
        """Start another booking."""
        self.submitted_booking_id = None
        self.picker.reset()
