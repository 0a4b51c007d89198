from parlourease.repositories.bookings import BookingRepository, new_booking_document
from parlourease.repositories.services import ServiceCatalog, get_icon_choices

__all__ = ["BookingRepository", "ServiceCatalog", "new_booking_document", "get_icon_choices"]
