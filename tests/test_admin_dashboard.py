"""Tests for the admin dashboard controller."""

from datetime import timedelta

import pytest

from parlourease.apps.admin_dashboard import AdminDashboard, DialogMode
from parlourease.apps.notifications import NotificationVariant
from parlourease.booking.state_machine import BookingAction, InvalidTransitionError
from parlourease.config import settings
from parlourease.schemas.booking_schema import (
    BookingRequest,
    BookingStatus,
    PaymentMethod,
    PaymentRequest,
    PaymentStatus,
)
from parlourease.schemas.service_schema import ServiceCreate
from parlourease.store.base import Query
from parlourease.store.memory import StoreTimestamp
from tests.conftest import TODAY, add_booking, add_service, local_at

BOOKINGS = settings.store.bookings_collection


async def open_dashboard(store):
    """Dashboard over a catalog with a 50 and a 35 service; returns (dashboard, cut_id, mani_id)."""
    cut_id = await add_service(store, "Haircut & Style", 50, "Scissors")
    mani_id = await add_service(store, "Manicure", 35, "Hand")
    dashboard = AdminDashboard(store)
    dashboard.start()
    return dashboard, cut_id, mani_id


class TestLifecycle:
    def test_start_and_close_release_listeners(self, store):
        dashboard = AdminDashboard(store)
        dashboard.start()
        assert store.listener_count == 2
        assert dashboard.active
        dashboard.close()
        assert store.listener_count == 0
        assert not dashboard.active

    def test_context_manager(self, store):
        with AdminDashboard(store):
            assert store.listener_count == 2
        assert store.listener_count == 0

    def test_released_when_body_raises(self, store):
        with pytest.raises(RuntimeError):
            with AdminDashboard(store):
                raise RuntimeError("view crashed")
        assert store.listener_count == 0


class TestTodayQueue:
    def test_empty_queue(self, store, now):
        with AdminDashboard(store) as dashboard:
            assert dashboard.today_queue(now) == []

    @pytest.mark.asyncio
    async def test_only_today_in_time_order(self, store, now):
        dashboard, cut_id, mani_id = await open_dashboard(store)
        await add_booking(store, customer_name="Later", service_id=cut_id, appointment=local_at(TODAY, 16))
        await add_booking(store, customer_name="Earlier", service_id=mani_id, appointment=local_at(TODAY, 9, 30))
        await add_booking(store, customer_name="Tomorrow", service_id=cut_id,
                          appointment=local_at(TODAY + timedelta(days=1), 9))
        queue = dashboard.today_queue(now)
        assert [e.booking.customer_name for e in queue] == ["Earlier", "Later"]
        assert queue[0].time_label == "09:30"
        assert queue[0].service_names == "Manicure"
        dashboard.close()

    @pytest.mark.asyncio
    async def test_multi_service_entry(self, store, now):
        dashboard, cut_id, mani_id = await open_dashboard(store)
        await add_booking(store, service_id=[cut_id, mani_id])
        entry = dashboard.today_queue(now)[0]
        assert entry.total_price == 85
        assert entry.actions == (BookingAction.START,)
        dashboard.close()

    @pytest.mark.asyncio
    async def test_deleted_service_shows_unknown(self, store, now):
        dashboard, _, _ = await open_dashboard(store)
        await add_booking(store, service_id="svc-gone")
        assert dashboard.today_queue(now)[0].service_names == "Unknown Service"
        dashboard.close()

    @pytest.mark.asyncio
    async def test_malformed_booking_skipped(self, store, now):
        dashboard, cut_id, _ = await open_dashboard(store)
        await add_booking(store, service_id=cut_id)
        await store.add(BOOKINGS, {"customerName": "Broken", "appointmentDateTime": "soon"})
        assert [e.booking.customer_name for e in dashboard.today_queue(now)] == ["Alice Johnson"]
        dashboard.close()


class TestBookingActions:
    @pytest.mark.asyncio
    async def test_start_writes_in_progress(self, store):
        dashboard, cut_id, _ = await open_dashboard(store)
        booking_id = await add_booking(store, service_id=cut_id)
        assert await dashboard.handle_booking_action(booking_id, BookingAction.START)
        assert store.document(BOOKINGS, booking_id)["status"] == "In Progress"
        assert dashboard.find_booking(booking_id).status == BookingStatus.IN_PROGRESS
        assert dashboard.notifications.latest.title == "Status Updated"
        assert not dashboard.dialog.open
        dashboard.close()

    @pytest.mark.asyncio
    async def test_full_lifecycle_opens_prefilled_payment(self, store):
        dashboard, cut_id, mani_id = await open_dashboard(store)
        booking_id = await add_booking(store, service_id=[cut_id, mani_id])

        await dashboard.handle_booking_action(booking_id, BookingAction.START)
        await dashboard.handle_booking_action(booking_id, BookingAction.COMPLETE)

        assert store.document(BOOKINGS, booking_id)["status"] == "Completed"
        assert dashboard.dialog.open
        assert dashboard.dialog.mode == DialogMode.PAYMENT
        assert dashboard.dialog.active_booking.id == booking_id
        assert dashboard.dialog.payment_draft.amount == 85
        dashboard.close()

    @pytest.mark.asyncio
    async def test_manage_payment_writes_nothing(self, store):
        dashboard, cut_id, _ = await open_dashboard(store)
        booking_id = await add_booking(
            store, service_id=cut_id, status="Completed",
            payment={"amount": 50, "method": "UPI", "status": "Paid"},
        )
        await dashboard.handle_booking_action(booking_id, BookingAction.MANAGE_PAYMENT)
        assert dashboard.dialog.mode == DialogMode.PAYMENT
        assert dashboard.dialog.payment_draft.method == PaymentMethod.UPI
        assert dashboard.notifications.active == []
        dashboard.close()

    @pytest.mark.asyncio
    async def test_invalid_action_raises(self, store):
        dashboard, cut_id, _ = await open_dashboard(store)
        booking_id = await add_booking(store, service_id=cut_id)
        with pytest.raises(InvalidTransitionError):
            await dashboard.handle_booking_action(booking_id, BookingAction.COMPLETE)
        dashboard.close()

    @pytest.mark.asyncio
    async def test_unknown_booking(self, store):
        dashboard, _, _ = await open_dashboard(store)
        assert not await dashboard.handle_booking_action("missing", BookingAction.START)
        assert dashboard.notifications.latest.variant == NotificationVariant.DESTRUCTIVE
        dashboard.close()

    @pytest.mark.asyncio
    async def test_write_failure_surfaces_destructive_notification(self, store):
        dashboard, cut_id, _ = await open_dashboard(store)
        booking_id = await add_booking(store, service_id=cut_id)
        store.fail_writes = True
        assert not await dashboard.handle_booking_action(booking_id, BookingAction.START)
        notification = dashboard.notifications.latest
        assert notification.title == "Error"
        assert notification.is_error
        assert store.document(BOOKINGS, booking_id)["status"] == "Pending"
        assert dashboard.find_booking(booking_id).status == BookingStatus.PENDING
        dashboard.close()


class TestSavePayment:
    @pytest.mark.asyncio
    async def test_paid_cash_counts_in_revenue(self, store, now):
        dashboard, cut_id, mani_id = await open_dashboard(store)
        booking_id = await add_booking(store, service_id=[cut_id, mani_id], status="In Progress")
        await dashboard.handle_booking_action(booking_id, BookingAction.COMPLETE)

        draft = dashboard.dialog.payment_draft
        request = PaymentRequest(amount=draft.amount, method=PaymentMethod.CASH, status=PaymentStatus.PAID)
        assert await dashboard.save_payment(request)

        raw = store.document(BOOKINGS, booking_id)
        assert raw["payment"] == {"amount": 85.0, "method": "Cash", "status": "Paid"}
        assert raw["status"] == "Completed"
        assert not dashboard.dialog.open
        assert dashboard.notifications.latest.title == "Payment Updated"
        assert dashboard.revenue(now).by_method[PaymentMethod.CASH] == 85
        dashboard.close()

    @pytest.mark.asyncio
    async def test_payment_completes_pending_booking(self, store):
        dashboard, cut_id, _ = await open_dashboard(store)
        booking_id = await add_booking(store, service_id=cut_id)
        dashboard.open_payment(dashboard.find_booking(booking_id))
        await dashboard.save_payment(PaymentRequest(amount=50, method="Card", status="Unpaid"))
        raw = store.document(BOOKINGS, booking_id)
        assert raw["status"] == "Completed"
        assert raw["payment"]["status"] == "Unpaid"
        dashboard.close()

    @pytest.mark.asyncio
    async def test_save_payment_twice_is_stable(self, store):
        dashboard, cut_id, _ = await open_dashboard(store)
        booking_id = await add_booking(store, service_id=cut_id)
        request = PaymentRequest(amount=50, method="UPI", status="Paid")
        for _ in range(2):
            dashboard.open_payment(dashboard.find_booking(booking_id))
            await dashboard.save_payment(request)
        assert store.document(BOOKINGS, booking_id)["payment"]["amount"] == 50
        dashboard.close()

    @pytest.mark.asyncio
    async def test_payment_logs_completed_transition(self, store, caplog):
        dashboard, cut_id, _ = await open_dashboard(store)
        booking_id = await add_booking(store, service_id=cut_id, status="In Progress")
        dashboard.open_payment(dashboard.find_booking(booking_id))
        with caplog.at_level("INFO", logger="parlourease.apps.admin_dashboard"):
            await dashboard.save_payment(PaymentRequest(amount=50, method="Cash", status="Paid"))
        assert f"Payment saved for {booking_id}, status Completed" in caplog.text
        dashboard.close()

    @pytest.mark.asyncio
    async def test_failed_payment_keeps_dialog_open(self, store):
        dashboard, cut_id, _ = await open_dashboard(store)
        booking_id = await add_booking(store, service_id=cut_id)
        dashboard.open_payment(dashboard.find_booking(booking_id))
        store.fail_writes = True
        assert not await dashboard.save_payment(PaymentRequest(amount=50, method="Cash"))
        assert dashboard.dialog.open
        assert dashboard.notifications.latest.is_error
        dashboard.close()

    @pytest.mark.asyncio
    async def test_requires_open_payment_dialog(self, store):
        dashboard, _, _ = await open_dashboard(store)
        with pytest.raises(RuntimeError):
            await dashboard.save_payment(PaymentRequest(amount=50, method="Cash"))
        dashboard.close()


class TestSaveBooking:
    @pytest.mark.asyncio
    async def test_create(self, store, now):
        dashboard, cut_id, _ = await open_dashboard(store)
        dashboard.open_new_booking()
        request = BookingRequest(
            customer_name="Maya Patel",
            contact="9876543210",
            service_id=cut_id,
            appointment_date=TODAY,
            appointment_time="14:15",
            notes="First visit",
        )
        booking_id = await dashboard.save_booking(request, now)

        raw = store.document(BOOKINGS, booking_id)
        assert raw["serviceId"] == cut_id
        assert raw["status"] == "Pending"
        assert raw["payment"] == {"amount": 50.0, "method": None, "status": "Unpaid"}
        assert isinstance(raw["appointmentDateTime"], StoreTimestamp)
        assert dashboard.notifications.latest.title == "Booking Created"
        assert not dashboard.dialog.open
        assert dashboard.today_queue(now)[0].time_label == "14:15"
        dashboard.close()

    @pytest.mark.asyncio
    async def test_edit_keeps_status_and_payment(self, store, now):
        dashboard, cut_id, mani_id = await open_dashboard(store)
        booking_id = await add_booking(
            store, service_id=cut_id, status="In Progress",
            payment={"amount": 50, "method": "Cash", "status": "Paid"},
        )
        dashboard.open_edit_booking(dashboard.find_booking(booking_id))
        request = BookingRequest(
            customer_name="Alice J.",
            contact="123-456-7890",
            service_id=mani_id,
            appointment_date=TODAY,
            appointment_time="11:00",
        )
        assert await dashboard.save_booking(request, now) == booking_id

        raw = store.document(BOOKINGS, booking_id)
        assert raw["customerName"] == "Alice J."
        assert raw["serviceId"] == mani_id
        assert raw["status"] == "In Progress"
        assert raw["payment"]["status"] == "Paid"
        assert dashboard.notifications.latest.title == "Booking Updated"
        dashboard.close()

    @pytest.mark.asyncio
    async def test_create_failure(self, store, now):
        dashboard, cut_id, _ = await open_dashboard(store)
        dashboard.open_new_booking()
        store.fail_writes = True
        request = BookingRequest(
            customer_name="Maya Patel", contact="9876543210", service_id=cut_id,
            appointment_date=TODAY, appointment_time="14:15",
        )
        assert await dashboard.save_booking(request, now) is None
        assert dashboard.dialog.open
        assert dashboard.notifications.latest.variant == NotificationVariant.DESTRUCTIVE
        dashboard.close()

    @pytest.mark.asyncio
    async def test_past_date_refused(self, store, now):
        dashboard, cut_id, _ = await open_dashboard(store)
        dashboard.open_new_booking()
        request = BookingRequest(
            customer_name="Maya Patel", contact="9876543210", service_id=cut_id,
            appointment_date=TODAY - timedelta(days=1), appointment_time="14:15",
        )
        assert await dashboard.save_booking(request, now) is None
        assert dashboard.bookings == []
        assert dashboard.notifications.latest.is_error
        dashboard.close()

    @pytest.mark.asyncio
    async def test_edit_may_keep_past_day(self, store, now):
        dashboard, cut_id, _ = await open_dashboard(store)
        yesterday = TODAY - timedelta(days=1)
        booking_id = await add_booking(store, service_id=cut_id, appointment=local_at(yesterday, 10))
        dashboard.open_edit_booking(dashboard.find_booking(booking_id))
        request = BookingRequest(
            customer_name="Alice J.", contact="123-456-7890", service_id=cut_id,
            appointment_date=yesterday, appointment_time="10:00",
        )
        assert await dashboard.save_booking(request, now) == booking_id
        dashboard.close()

    @pytest.mark.asyncio
    async def test_off_schedule_time_refused(self, store, now):
        dashboard, cut_id, _ = await open_dashboard(store)
        dashboard.open_new_booking()
        request = BookingRequest(
            customer_name="Maya Patel", contact="9876543210", service_id=cut_id,
            appointment_date=TODAY + timedelta(days=1), appointment_time="23:47",
        )
        assert await dashboard.save_booking(request, now) is None
        assert (await store.get(Query(BOOKINGS))).empty
        assert dashboard.notifications.latest.is_error
        assert dashboard.dialog.open
        dashboard.close()

    @pytest.mark.asyncio
    async def test_festival_mode_refuses_quarter_hours(self, store, now):
        dashboard, cut_id, _ = await open_dashboard(store)
        dashboard.set_festival_mode(True)
        dashboard.open_new_booking()
        request = BookingRequest(
            customer_name="Maya Patel", contact="9876543210", service_id=cut_id,
            appointment_date=TODAY, appointment_time="14:15",
        )
        assert await dashboard.save_booking(request, now) is None
        assert await dashboard.save_booking(request.model_copy(update={"appointment_time": "14:30"}), now)
        dashboard.close()

    @pytest.mark.asyncio
    async def test_edit_may_keep_off_schedule_time(self, store, now):
        dashboard, cut_id, _ = await open_dashboard(store)
        booking_id = await add_booking(store, service_id=cut_id, appointment=local_at(TODAY, 11, 30))
        dashboard.set_festival_mode(True)
        dashboard.open_edit_booking(dashboard.find_booking(booking_id))
        request = BookingRequest(
            customer_name="Alice J.", contact="123-456-7890", service_id=cut_id,
            appointment_date=TODAY, appointment_time="11:30",
        )
        assert await dashboard.save_booking(request, now) == booking_id
        dashboard.close()

    @pytest.mark.asyncio
    async def test_edit_without_notes_writes_no_notes_key(self, store, now):
        dashboard, cut_id, _ = await open_dashboard(store)
        booking_id = await add_booking(store, service_id=cut_id)
        dashboard.open_edit_booking(dashboard.find_booking(booking_id))
        request = BookingRequest(
            customer_name="Alice J.", contact="123-456-7890", service_id=cut_id,
            appointment_date=TODAY, appointment_time="10:00",
        )
        await dashboard.save_booking(request, now)
        assert "notes" not in store.document(BOOKINGS, booking_id)
        dashboard.close()

    @pytest.mark.asyncio
    async def test_edit_keeps_multi_service_list(self, store, now):
        dashboard, cut_id, mani_id = await open_dashboard(store)
        booking_id = await add_booking(store, service_id=[cut_id, mani_id])
        dashboard.open_edit_booking(dashboard.find_booking(booking_id))
        request = BookingRequest(
            customer_name="Alice J.", contact="123-456-7890", service_id=mani_id,
            appointment_date=TODAY, appointment_time="10:00",
        )
        await dashboard.save_booking(request, now)
        assert store.document(BOOKINGS, booking_id)["serviceId"] == [cut_id, mani_id]
        dashboard.close()

    @pytest.mark.asyncio
    async def test_edit_replaces_list_with_other_service(self, store, now):
        dashboard, cut_id, mani_id = await open_dashboard(store)
        facial_id = await add_service(store, "Facial", 75, "Sparkles")
        booking_id = await add_booking(store, service_id=[cut_id, mani_id])
        dashboard.open_edit_booking(dashboard.find_booking(booking_id))
        request = BookingRequest(
            customer_name="Alice J.", contact="123-456-7890", service_id=facial_id,
            appointment_date=TODAY, appointment_time="10:00",
        )
        await dashboard.save_booking(request, now)
        assert store.document(BOOKINGS, booking_id)["serviceId"] == facial_id
        dashboard.close()


class TestServicesAndSlots:
    @pytest.mark.asyncio
    async def test_add_service(self, store):
        dashboard, _, _ = await open_dashboard(store)
        dashboard.open_add_service()
        await dashboard.save_service(ServiceCreate(name="Bridal Makeup", price=200, duration=120, icon="Gem"))
        names = [s.name for s in dashboard.services]
        assert names == ["Bridal Makeup", "Haircut & Style", "Manicure"]
        assert dashboard.services[0].glyph.value == "bridal"
        assert not dashboard.service_dialog_open
        assert dashboard.notifications.latest.title == "Service Added"
        dashboard.close()

    def test_festival_mode_drives_slots(self, store):
        dashboard = AdminDashboard(store)
        assert len(dashboard.time_slots()) == 37
        dashboard.set_festival_mode(True)
        assert len(dashboard.time_slots()) == 19
        dashboard.set_festival_mode(False)
        assert len(dashboard.time_slots()) == 37

    @pytest.mark.asyncio
    async def test_income_report(self, store, now):
        dashboard, cut_id, _ = await open_dashboard(store)
        await add_booking(store, service_id=cut_id, status="Completed",
                          payment={"amount": 50, "method": "UPI", "status": "Paid"})
        report = dashboard.income_report(now)
        assert "INCOME OVERVIEW" in report
        assert dashboard.revenue(now).daily == 50
        dashboard.close()
