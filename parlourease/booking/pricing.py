"""Resolve a booking's service references and pre-fill its payment form."""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from parlourease.schemas.booking_schema import Booking, PaymentMethod, PaymentStatus
from parlourease.schemas.service_schema import Service

logger = logging.getLogger(__name__)

UNKNOWN_SERVICE = "Unknown Service"


@dataclass(frozen=True)
class ServiceSummary:
    """Display names and combined price of the services on one booking."""
    names: str
    total_price: float
    resolved_ids: tuple[str, ...] = ()
    missing_ids: tuple[str, ...] = ()


def summarize_services(service_ids: Iterable[str], services: Iterable[Service]) -> ServiceSummary:
    """
    Look up booked service ids in the catalog.

    References that no longer resolve are skipped rather than treated as an
    error; when nothing resolves the booking shows as "Unknown Service".
    """
    wanted = list(service_ids)
    matched = [s for s in services if s.id in wanted]
    found = {s.id for s in matched}
    missing = tuple(sid for sid in wanted if sid not in found)
    if missing:
        logger.debug("Unresolved service reference(s): %s", ", ".join(missing))
    return ServiceSummary(
        names=", ".join(s.name for s in matched) or UNKNOWN_SERVICE,
        total_price=sum(s.price for s in matched),
        resolved_ids=tuple(s.id for s in matched),
        missing_ids=missing,
    )


@dataclass
class PaymentDraft:
    """Initial values for the Manage Payment form."""
    amount: float
    method: Optional[PaymentMethod]
    status: PaymentStatus


def prefill_payment(booking: Booking, services: Iterable[Service]) -> PaymentDraft:
    """Keep a positive recorded amount; otherwise default to the services' total."""
    if booking.payment.amount > 0:
        amount = booking.payment.amount
    else:
        amount = summarize_services(booking.service_ids, services).total_price
    return PaymentDraft(
        amount=amount,
        method=booking.payment.method,
        status=booking.payment.status,
    )
