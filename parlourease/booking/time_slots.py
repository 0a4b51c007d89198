"""
Bookable time-slot generation and the date/time picker used by both forms.

Slots cover the operating window (09:00 through 18:00 by default, both
ends included) at a fixed interval: 15 minutes normally, 30 minutes in
festival mode to leave buffer between appointments.

The customer form hides slots that have already passed when the chosen
day is today, and choosing a date re-checks any time picked earlier:

    picker = TimeSlotPicker(filter_past=True)
    picker.select_time("09:00", now)
    ok, msg = picker.select_date(now.date(), now)   # clears 09:00 after nine
"""

import logging
from datetime import date, datetime, time
from enum import Enum
from typing import Iterator, Optional

from parlourease.config import settings
from parlourease.utils import format_time_label, parse_time_label

logger = logging.getLogger(__name__)


class TimeSlotSchedule:
    """Lazy, finite, restartable sequence of ``HH:MM`` slot labels.

    Each iteration starts again from the opening time; nothing is
    precomputed.
    """

    def __init__(
        self,
        festival_mode: bool = False,
        open_hour: Optional[int] = None,
        close_hour: Optional[int] = None,
        interval_minutes: Optional[int] = None,
    ) -> None:
        schedule = settings.schedule
        self.festival_mode = festival_mode
        self.open_hour = schedule.open_hour if open_hour is None else open_hour
        self.close_hour = schedule.close_hour if close_hour is None else close_hour
        if interval_minutes is None:
            interval_minutes = (
                schedule.festival_slot_interval_minutes
                if festival_mode
                else schedule.slot_interval_minutes
            )
        if interval_minutes <= 0:
            raise ValueError(f"Slot interval must be positive, got {interval_minutes}")
        self.interval_minutes = interval_minutes

    def times(self) -> Iterator[time]:
        minute = self.open_hour * 60
        last = self.close_hour * 60
        while minute <= last:
            yield time(minute // 60, minute % 60)
            minute += self.interval_minutes

    def __iter__(self) -> Iterator[str]:
        return (format_time_label(t) for t in self.times())

    def __len__(self) -> int:
        span = (self.close_hour - self.open_hour) * 60
        return span // self.interval_minutes + 1

    def __contains__(self, label: object) -> bool:
        if not isinstance(label, str):
            return False
        try:
            parsed = parse_time_label(label)
        except ValueError:
            return False
        return parsed in set(self.times())

    def __repr__(self) -> str:
        return (
            f"TimeSlotSchedule({self.open_hour:02d}:00-{self.close_hour:02d}:00 "
            f"every {self.interval_minutes} min)"
        )


def generate_time_slots(festival_mode: bool = False) -> TimeSlotSchedule:
    """Slot schedule for the configured window and the given booking policy."""
    return TimeSlotSchedule(festival_mode=festival_mode)


def slot_instant(day: date, label: str, now: datetime) -> datetime:
    """The instant a slot label denotes on ``day``, in ``now``'s timezone."""
    return datetime.combine(day, parse_time_label(label), tzinfo=now.tzinfo)


def is_slot_open(day: date, label: str, now: datetime) -> bool:
    """A slot is open unless the day is today and its time has already passed."""
    if day != now.date():
        return True
    return slot_instant(day, label, now) >= now


def available_time_slots(schedule: TimeSlotSchedule, day: Optional[date], now: datetime) -> list[str]:
    """Labels that can still be booked on ``day``; future days are unfiltered."""
    if day is None or day != now.date():
        return list(schedule)
    return [label for label in schedule if is_slot_open(day, label, now)]


class SelectionStatus(str, Enum):
    """State of the picker's time field."""
    EMPTY = "empty"
    SELECTED = "selected"
    CLEARED = "cleared"


class TimeSlotPicker:
    """
    Date and time fields of a booking form.

    Selecting a date re-validates the time picked earlier and clears it
    when it is no longer bookable. ``filter_past`` switches on the
    today-only filtering the customer form applies; the admin dialog keeps
    every slot of the day on offer.
    """

    def __init__(self, festival_mode: bool = False, filter_past: bool = True) -> None:
        self.filter_past = filter_past
        self.schedule = generate_time_slots(festival_mode)
        self.appointment_date: Optional[date] = None
        self.appointment_time: Optional[str] = None
        self.status = SelectionStatus.EMPTY
        self.cleared_times: list[str] = []

    @property
    def festival_mode(self) -> bool:
        return self.schedule.festival_mode

    def set_festival_mode(self, enabled: bool) -> None:
        """Switch slot spacing; a picked time missing from the new schedule is dropped."""
        if enabled == self.festival_mode:
            return
        self.schedule = generate_time_slots(enabled)
        if self.appointment_time is not None and self.appointment_time not in self.schedule:
            self._clear_time(f"not offered with festival mode {'on' if enabled else 'off'}")

    def available_slots(self, now: datetime) -> list[str]:
        if not self.filter_past:
            return list(self.schedule)
        return available_time_slots(self.schedule, self.appointment_date, now)

    def select_date(self, day: date, now: datetime) -> tuple[bool, str]:
        """
        Pick the appointment day.

        Returns:
            (success, message): success=False if the day is in the past.
            A previously chosen time that has gone stale is cleared and
            reported in the message.
        """
        if day < now.date():
            return False, "Please pick today or a later date."
        self.appointment_date = day
        if self.revalidate(now):
            return True, f"Date set to {day.isoformat()}"
        return True, f"Date set to {day.isoformat()}; please pick a new time."

    def select_time(self, label: str, now: datetime) -> tuple[bool, str]:
        """Pick a time label; rejected if it is not on offer for the chosen day."""
        label = label.strip()
        if label not in self.schedule:
            return False, f"The time '{label}' is not a bookable slot."
        if self.filter_past and self.appointment_date is not None:
            if not is_slot_open(self.appointment_date, label, now):
                return False, f"The time '{label}' has already passed today."
        self.appointment_time = label
        self.status = SelectionStatus.SELECTED
        return True, f"Time set to {label}"

    def revalidate(self, now: datetime) -> bool:
        """Re-check the chosen time against the chosen day. False if it was cleared."""
        if self.appointment_time is None or self.appointment_date is None:
            return True
        if not self.filter_past or is_slot_open(self.appointment_date, self.appointment_time, now):
            return True
        self._clear_time("already passed today")
        return False

    def _clear_time(self, reason: str) -> None:
        logger.info("Clearing selected time %s: %s", self.appointment_time, reason)
        self.cleared_times.append(self.appointment_time)
        self.appointment_time = None
        self.status = SelectionStatus.CLEARED

    def reset(self) -> None:
        self.appointment_date = None
        self.appointment_time = None
        self.status = SelectionStatus.EMPTY
        self.cleared_times.clear()
