"""
Admin dashboard controller.

Owns two live projections (services and bookings), the booking/payment
dialog state, and every admin write. Writes are fire-and-report: a failed
write is logged and surfaced as a destructive notification, never retried.
The dashboard's own view of the data only changes when the next snapshot
arrives from the store.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from parlourease.apps.notifications import NotificationCenter
from parlourease.booking.pricing import PaymentDraft, prefill_payment
from parlourease.booking.state_machine import BookingAction, BookingStateMachine
from parlourease.booking.time_slots import generate_time_slots
from parlourease.logging_context import client_scope, get_client_logger
from parlourease.normalization import local_now, normalize_instant
from parlourease.reporting.revenue import RevenueAggregator, RevenueSummary
from parlourease.repositories.bookings import BookingRepository, new_booking_document
from parlourease.repositories.services import ServiceCatalog
from parlourease.schemas.booking_schema import (
    Booking,
    BookingRequest,
    BookingStatus,
    Payment,
    PaymentRequest,
)
from parlourease.schemas.service_schema import Service, ServiceCreate
from parlourease.store.adapters import booking_from_snapshot, bookings_query
from parlourease.store.base import DocumentStore, StoreError
from parlourease.store.live import LiveProjection
from parlourease.utils import format_time_label

logger = get_client_logger(__name__)

CLIENT_ID = "admin"


class DialogMode(str, Enum):
    BOOKING = "booking"
    PAYMENT = "payment"


@dataclass
class DialogState:
    """The single booking/payment dialog. ``active_booking`` is None for a new booking."""
    open: bool = False
    mode: DialogMode = DialogMode.BOOKING
    active_booking: Optional[Booking] = None
    payment_draft: Optional[PaymentDraft] = None


@dataclass(frozen=True)
class QueueEntry:
    """One row of today's queue."""
    booking: Booking
    service_names: str
    total_price: float
    time_label: str
    actions: tuple[BookingAction, ...]

    @property
    def status(self) -> BookingStatus:
        return self.booking.status


class AdminDashboard:
    """Today's queue, status actions, booking/payment dialogs and income."""

    def __init__(
        self,
        store: DocumentStore,
        notifications: Optional[NotificationCenter] = None,
        festival_mode: bool = False,
    ) -> None:
        self._store = store
        self.notifications = notifications or NotificationCenter()
        self.catalog = ServiceCatalog(store)
        self.repository = BookingRepository(store)
        self._bookings: LiveProjection[Booking] = LiveProjection(
            store, bookings_query(), booking_from_snapshot, self._on_bookings
        )
        self._revenue = RevenueAggregator()
        self.festival_mode = festival_mode
        self.dialog = DialogState()
        self.service_dialog_open = False

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def start(self) -> None:
        with client_scope(CLIENT_ID):
            self.catalog.start()
            self._bookings.start()
            logger.info(
                "Dashboard started: %d service(s), %d booking(s)",
                len(self.catalog.services), len(self._bookings.items),
            )

    def close(self) -> None:
        with client_scope(CLIENT_ID):
            self.catalog.close()
            self._bookings.close()
            logger.info("Dashboard closed")

    @property
    def active(self) -> bool:
        return self.catalog.active and self._bookings.active

    def __enter__(self) -> "AdminDashboard":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _on_bookings(self, bookings: list[Booking]) -> None:
        with client_scope(CLIENT_ID):
            logger.debug("Bookings snapshot: %d booking(s)", len(bookings))

    # ------------------------------------------------------------------ #
    # Read side
    # ------------------------------------------------------------------ #

    @property
    def bookings(self) -> list[Booking]:
        return self._bookings.items

    @property
    def services(self) -> list[Service]:
        return self.catalog.services

    def find_booking(self, booking_id: str) -> Optional[Booking]:
        for booking in self._bookings.items:
            if booking.id == booking_id:
                return booking
        return None

    def today_queue(self, now: Optional[datetime] = None) -> list[QueueEntry]:
        """Today's bookings in appointment order; an empty list is a normal state."""
        now = local_now() if now is None else normalize_instant(now)
        entries = []
        for booking in self._bookings.items:
            appointment = booking.appointment_datetime.astimezone(now.tzinfo)
            if appointment.date() != now.date():
                continue
            summary = self.catalog.summarize(booking.service_ids)
            entries.append(QueueEntry(
                booking=booking,
                service_names=summary.names,
                total_price=summary.total_price,
                time_label=format_time_label(appointment.time()),
                actions=tuple(BookingStateMachine(booking.status).get_menu_actions()),
            ))
        return entries

    def time_slots(self) -> list[str]:
        """Every slot of the day; the admin dialog does not hide past times."""
        return list(generate_time_slots(self.festival_mode))

    def set_festival_mode(self, enabled: bool) -> None:
        with client_scope(CLIENT_ID):
            if enabled != self.festival_mode:
                logger.info("Festival mode %s", "enabled" if enabled else "disabled")
            self.festival_mode = enabled

    def revenue(self, now: Optional[datetime] = None) -> RevenueSummary:
        return self._revenue.calculate(self._bookings.items, now)

    def income_report(self, now: Optional[datetime] = None) -> str:
        return self._revenue.format_report(self.revenue(now))

    # ------------------------------------------------------------------ #
    # Dialogs
    # ------------------------------------------------------------------ #

    def open_new_booking(self) -> None:
        self.dialog = DialogState(open=True, mode=DialogMode.BOOKING)

    def open_edit_booking(self, booking: Booking) -> None:
        self.dialog = DialogState(open=True, mode=DialogMode.BOOKING, active_booking=booking)

    def open_payment(self, booking: Booking) -> PaymentDraft:
        draft = prefill_payment(booking, self.catalog.services)
        self.dialog = DialogState(
            open=True, mode=DialogMode.PAYMENT, active_booking=booking, payment_draft=draft
        )
        return draft

    def close_dialog(self) -> None:
        self.dialog = DialogState()

    def open_add_service(self) -> None:
        self.service_dialog_open = True

    def close_add_service(self) -> None:
        self.service_dialog_open = False

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    def _report_failure(self, what: str, exc: StoreError) -> None:
        logger.exception("Failed to %s: %s", what, exc)
        self.notifications.error(f"Failed to {what}.")

    async def handle_booking_action(self, booking_id: str, action: BookingAction) -> bool:
        """
        Apply a queue menu action to a booking.

        Start and Complete write the new status. Complete, and Manage
        Payment on a completed booking, then open the payment dialog
        pre-filled from the booking.

        Raises:
            InvalidTransitionError: If the action is not offered for the
                booking's current status.
        """
        with client_scope(CLIENT_ID):
            booking = self.find_booking(booking_id)
            if booking is None:
                logger.warning("Action %s on unknown booking %s", action.value, booking_id)
                self.notifications.error("That booking no longer exists.")
                return False

            sm = BookingStateMachine(booking.status)
            opens_payment = sm.opens_payment(action)
            new_status = sm.transition(action)

            if new_status != booking.status:
                try:
                    await self.repository.set_status(booking_id, new_status)
                except StoreError as exc:
                    self._report_failure("update booking status", exc)
                    return False
                self.notifications.notify(
                    "Status Updated",
                    f"Booking for {booking.customer_name} is now {new_status.value}.",
                )

            if opens_payment:
                self.open_payment(booking.model_copy(update={"status": new_status}))
            return True

    async def save_booking(self, request: BookingRequest, now: Optional[datetime] = None) -> Optional[str]:
        """Create a booking, or update the one being edited. Returns its id.

        Days before today and times off the current slot schedule are refused,
        except that an edited booking may keep the day and time it already has.
        """
        with client_scope(CLIENT_ID):
            editing = self.dialog.active_booking if self.dialog.mode == DialogMode.BOOKING else None
            appointment_at = request.appointment_at()
            today = (local_now() if now is None else normalize_instant(now)).date()
            kept_day = editing is not None and editing.appointment_datetime.date() == request.appointment_date
            if request.appointment_date < today and not kept_day:
                self.notifications.error("Bookings cannot be made for a past date.")
                return None
            kept_time = editing is not None and editing.appointment_datetime == appointment_at
            if request.appointment_time not in self.time_slots() and not kept_time:
                logger.info("Rejected off-schedule time %s", request.appointment_time)
                self.notifications.error(f"{request.appointment_time} is not an available time slot.")
                return None

            if editing is not None:
                # A multi-service customer booking keeps its list while the
                # chosen service is still one of its members.
                service_id = request.service_id
                if isinstance(editing.service_id, list) and service_id in editing.service_id:
                    service_id = list(editing.service_id)
                details = {
                    "customerName": request.customer_name,
                    "contact": request.contact,
                    "serviceId": service_id,
                    "appointmentDateTime": appointment_at,
                }
                if request.notes is not None:
                    details["notes"] = request.notes
                try:
                    await self.repository.update_details(editing.id, details)
                except StoreError as exc:
                    self._report_failure("save booking", exc)
                    return None
                self.notifications.notify(
                    "Booking Updated", f"Booking for {request.customer_name} has been updated."
                )
                self.close_dialog()
                return editing.id

            service = self.catalog.find(request.service_id)
            document = new_booking_document(
                customer_name=request.customer_name,
                contact=request.contact,
                service_id=request.service_id,
                appointment_at=appointment_at,
                payment=Payment(amount=service.price if service else 0.0),
                notes=request.notes,
            )
            try:
                booking_id = await self.repository.create(document)
            except StoreError as exc:
                self._report_failure("save booking", exc)
                return None
            self.notifications.notify(
                "Booking Created", f"New booking for {request.customer_name} has been added."
            )
            self.close_dialog()
            return booking_id

    async def save_payment(self, request: PaymentRequest) -> bool:
        """Record the payment on the booking in the payment dialog and complete it."""
        with client_scope(CLIENT_ID):
            booking = self.dialog.active_booking
            if self.dialog.mode != DialogMode.PAYMENT or booking is None:
                raise RuntimeError("No booking is open for payment")
            new_status = BookingStateMachine(booking.status).transition(BookingAction.RECORD_PAYMENT)
            try:
                await self.repository.record_payment(booking.id, request.to_payment())
            except StoreError as exc:
                self._report_failure("update payment", exc)
                return False
            self.notifications.notify(
                "Payment Updated", f"Payment for {booking.customer_name} has been updated."
            )
            logger.info("Payment saved for %s, status %s", booking.id, new_status.value)
            self.close_dialog()
            return True

    async def save_service(self, request: ServiceCreate) -> Optional[str]:
        with client_scope(CLIENT_ID):
            try:
                service_id = await self.catalog.add_service(request)
            except StoreError as exc:
                self._report_failure("add service", exc)
                return None
            self.notifications.notify("Service Added", f"{request.name} has been added.")
            self.close_add_service()
            return service_id
