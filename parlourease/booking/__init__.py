from parlourease.booking.pricing import PaymentDraft, ServiceSummary, prefill_payment, summarize_services
from parlourease.booking.state_machine import (
    BookingAction,
    BookingStateMachine,
    InvalidTransitionError,
)
from parlourease.booking.time_slots import TimeSlotPicker, TimeSlotSchedule, generate_time_slots

__all__ = [
    "BookingStateMachine",
    "BookingAction",
    "InvalidTransitionError",
    "TimeSlotSchedule",
    "TimeSlotPicker",
    "generate_time_slots",
    "ServiceSummary",
    "PaymentDraft",
    "summarize_services",
    "prefill_payment",
]
