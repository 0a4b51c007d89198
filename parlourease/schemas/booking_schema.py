"""Booking, payment, and booking-form data models."""

from datetime import date, datetime, tzinfo
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from parlourease.normalization import normalize_instant
from parlourease.utils import normalize_phone, parse_time_label

MIN_NAME_LENGTH = 2
MIN_CONTACT_LENGTH = 10


class BookingStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class PaymentMethod(str, Enum):
    CASH = "Cash"
    UPI = "UPI"
    CARD = "Card"


class PaymentStatus(str, Enum):
    PAID = "Paid"
    UNPAID = "Unpaid"


class Payment(BaseModel):
    """Payment record embedded in a booking."""
    amount: float = 0.0
    method: Optional[PaymentMethod] = None
    status: PaymentStatus = PaymentStatus.UNPAID

    @property
    def is_paid(self) -> bool:
        return self.status == PaymentStatus.PAID

    def to_document(self) -> dict:
        return {
            "amount": self.amount,
            "method": self.method.value if self.method else None,
            "status": self.status.value,
        }


class Booking(BaseModel):
    """
    A booking as projected from the store.

    ``service_id`` keeps whichever shape the document used: the admin
    dashboard writes a single id, the customer form writes a list.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str
    customer_name: str = Field(alias="customerName")
    contact: str
    service_id: Union[str, list[str]] = Field(alias="serviceId")
    appointment_datetime: datetime = Field(alias="appointmentDateTime")
    notes: Optional[str] = None
    status: BookingStatus = BookingStatus.PENDING
    payment: Payment = Field(default_factory=Payment)

    @property
    def service_ids(self) -> list[str]:
        if isinstance(self.service_id, list):
            return list(self.service_id)
        return [self.service_id]


def _check_name(value: str) -> str:
    value = value.strip()
    if len(value) < MIN_NAME_LENGTH:
        raise ValueError("Name must be at least 2 characters.")
    return value


def _check_contact(value: str) -> str:
    value = value.strip()
    if len(value) < MIN_CONTACT_LENGTH or len(normalize_phone(value).lstrip("+")) < MIN_CONTACT_LENGTH:
        raise ValueError("Please enter a valid contact number.")
    return value


def _check_time(value: str) -> str:
    try:
        parse_time_label(value)
    except ValueError:
        raise ValueError("An appointment time is required.") from None
    return value.strip()


class _AppointmentForm(BaseModel):
    customer_name: str
    contact: str
    appointment_date: date
    appointment_time: str
    notes: Optional[str] = None

    @field_validator("customer_name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return _check_name(value)

    @field_validator("contact")
    @classmethod
    def check_contact(cls, value: str) -> str:
        return _check_contact(value)

    @field_validator("appointment_time")
    @classmethod
    def check_time(cls, value: str) -> str:
        return _check_time(value)

    def appointment_at(self, tz: Optional[tzinfo] = None) -> datetime:
        """Combine the picked day and time into a canonical instant."""
        naive = datetime.combine(self.appointment_date, parse_time_label(self.appointment_time))
        return normalize_instant(naive, tz)


class BookingRequest(_AppointmentForm):
    """Admin dialog form: exactly one service."""
    service_id: str

    @field_validator("service_id")
    @classmethod
    def service_selected(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Please select a service.")
        return value


class ClientBookingRequest(_AppointmentForm):
    """Customer form: one or more services."""
    service_ids: list[str]

    @field_validator("service_ids")
    @classmethod
    def at_least_one(cls, value: list[str]) -> list[str]:
        selected = [sid for sid in value if sid]
        if not selected:
            raise ValueError("You have to select at least one service.")
        return selected


class PaymentRequest(BaseModel):
    """Manage-payment form data."""
    amount: float = Field(gt=0)
    method: PaymentMethod
    status: PaymentStatus = PaymentStatus.UNPAID

    def to_payment(self) -> Payment:
        return Payment(amount=self.amount, method=self.method, status=self.status)
