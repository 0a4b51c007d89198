"""Conversion between store documents and domain models.

This is the one place raw document values are interpreted. Appointment
times are tagged and normalized here, before anything downstream sees them.
"""

import logging
from typing import Optional

from pydantic import ValidationError

from parlourease.config import settings
from parlourease.normalization import InvalidInstantError, classify_instant, normalize_instant
from parlourease.schemas.booking_schema import Booking
from parlourease.schemas.service_schema import Service
from parlourease.store.base import DocumentSnapshot, Query

logger = logging.getLogger(__name__)


def services_query() -> Query:
    """All services, ordered by name."""
    return Query(settings.store.services_collection).order_by("name")


def bookings_query() -> Query:
    """All bookings, ordered by appointment time."""
    return Query(settings.store.bookings_collection).order_by("appointmentDateTime")


def service_from_snapshot(doc: DocumentSnapshot) -> Optional[Service]:
    """Build a Service from a document, or None if the document is malformed."""
    try:
        return Service.model_validate({**doc.to_dict(), "id": doc.id})
    except ValidationError as exc:
        logger.warning("Skipping malformed service %s: %s", doc.id, exc.errors()[0]["msg"])
        return None


def booking_from_snapshot(doc: DocumentSnapshot) -> Optional[Booking]:
    """Build a Booking from a document, or None if the document is malformed."""
    data = doc.to_dict()
    try:
        instant = normalize_instant(classify_instant(data.get("appointmentDateTime")))
        return Booking.model_validate({**data, "id": doc.id, "appointmentDateTime": instant})
    except InvalidInstantError as exc:
        logger.warning("Skipping booking %s with bad appointment time: %s", doc.id, exc)
    except ValidationError as exc:
        logger.warning("Skipping malformed booking %s: %s", doc.id, exc.errors()[0]["msg"])
    return None
