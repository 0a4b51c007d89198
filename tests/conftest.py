"""Shared test fixtures and helpers."""

from datetime import date, datetime, time
from typing import Optional, Union

import pytest

from parlourease.booking.state_machine import BookingStateMachine
from parlourease.config import settings
from parlourease.schemas.booking_schema import (
    Booking,
    BookingStatus,
    Payment,
    PaymentMethod,
    PaymentStatus,
)
from parlourease.schemas.service_schema import Service
from parlourease.store.memory import InMemoryDocumentStore

# Mid-June keeps the fixed clock clear of daylight-saving changes.
TODAY = date(2026, 6, 15)


def local_at(day: date, hour: int, minute: int = 0) -> datetime:
    """Host-local wall-clock time as an aware datetime."""
    return datetime.combine(day, time(hour, minute)).astimezone()


@pytest.fixture
def now() -> datetime:
    return local_at(TODAY, 12, 0)


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def booking_state_machine():
    return BookingStateMachine()


@pytest.fixture
def services() -> list[Service]:
    return [
        Service(id="svc-cut", name="Haircut & Style", price=50, duration=60, icon="Scissors"),
        Service(id="svc-mani", name="Manicure", price=35, duration=45, icon="Hand"),
        Service(id="svc-bridal", name="Bridal Makeup", price=200, duration=120, icon="Gem"),
    ]


def make_booking(
    booking_id: str = "bk-1",
    service_id: Union[str, list[str]] = "svc-cut",
    appointment: Optional[datetime] = None,
    status: BookingStatus = BookingStatus.PENDING,
    amount: float = 0.0,
    method: Optional[PaymentMethod] = None,
    payment_status: PaymentStatus = PaymentStatus.UNPAID,
    customer_name: str = "Alice Johnson",
) -> Booking:
    """Helper to create a Booking with sensible defaults."""
    return Booking(
        id=booking_id,
        customer_name=customer_name,
        contact="123-456-7890",
        service_id=service_id,
        appointment_datetime=appointment or local_at(TODAY, 10, 0),
        status=status,
        payment=Payment(amount=amount, method=method, status=payment_status),
    )


def booking_document(
    customer_name: str = "Alice Johnson",
    service_id: Union[str, list[str]] = "svc-cut",
    appointment: Optional[datetime] = None,
    status: str = "Pending",
    payment: Optional[dict] = None,
) -> dict:
    """Raw booking document as the apps write it."""
    return {
        "customerName": customer_name,
        "contact": "123-456-7890",
        "serviceId": service_id,
        "appointmentDateTime": appointment or local_at(TODAY, 10, 0),
        "status": status,
        "payment": payment or {"amount": 0, "method": None, "status": "Unpaid"},
    }


async def add_service(store: InMemoryDocumentStore, name: str, price: float, icon: str = "Hand") -> str:
    return await store.add(
        settings.store.services_collection,
        {"name": name, "price": price, "duration": 30, "icon": icon},
    )


async def add_booking(store: InMemoryDocumentStore, **kwargs) -> str:
    return await store.add(settings.store.bookings_collection, booking_document(**kwargs))
