"""
Income figures for the admin dashboard.

Three derived values, recomputed from the full booking list on every
snapshot: today's paid revenue, this month's paid revenue, and all-time
paid revenue per payment method. Unpaid bookings never count, whatever
amount or method they carry.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from parlourease.config import settings
from parlourease.normalization import local_now, normalize_instant
from parlourease.schemas.booking_schema import Booking, PaymentMethod
from parlourease.utils import format_currency

logger = logging.getLogger(__name__)


def _empty_buckets() -> dict[PaymentMethod, float]:
    return {method: 0.0 for method in PaymentMethod}


@dataclass
class RevenueSummary:
    """Aggregated income as of one instant."""

    as_of: datetime
    daily: float = 0.0
    monthly: float = 0.0
    by_method: dict[PaymentMethod, float] = field(default_factory=_empty_buckets)
    paid_bookings: int = 0


class RevenueAggregator:
    """Calculates income figures from booking snapshots."""

    def calculate(self, bookings: Iterable[Booking], now: Optional[datetime] = None) -> RevenueSummary:
        """Aggregate paid revenue relative to ``now`` (defaults to wall-clock time)."""
        now = local_now() if now is None else normalize_instant(now)
        summary = RevenueSummary(as_of=now)

        paid = [b for b in bookings if b.payment.is_paid]
        summary.paid_bookings = len(paid)

        for booking in paid:
            # Compare calendar fields in the same timezone as "now".
            appointment = booking.appointment_datetime.astimezone(now.tzinfo)
            amount = booking.payment.amount

            if appointment.date() == now.date():
                summary.daily += amount
            if (appointment.year, appointment.month) == (now.year, now.month):
                summary.monthly += amount
            if booking.payment.method is not None:
                summary.by_method[booking.payment.method] += amount

        logger.debug(
            "Revenue as of %s: daily=%.2f monthly=%.2f from %d paid booking(s)",
            now.isoformat(), summary.daily, summary.monthly, summary.paid_bookings,
        )
        return summary

    def format_report(self, summary: RevenueSummary) -> str:
        """Format an income summary into a human-readable report."""
        symbol = settings.salon.currency_symbol
        lines = [
            "=" * 44,
            "INCOME OVERVIEW",
            "=" * 44,
            f"  Today's revenue:      {format_currency(summary.daily, symbol)}",
            f"    Total for {summary.as_of.strftime('%B %d, %Y')}",
            f"  This month's revenue: {format_currency(summary.monthly, symbol)}",
            f"    Total for {summary.as_of.strftime('%B %Y')}",
            "",
            "PAYMENT METHODS (ALL TIME)",
        ]
        for method in PaymentMethod:
            lines.append(f"  {method.value:<6}{format_currency(summary.by_method[method], symbol):>16}")
        lines.append("=" * 44)
        return "\n".join(lines)
