"""
Finite state machine for the booking status lifecycle.

Bookings only move forward: Pending -> In Progress -> Completed. The admin
dashboard offers exactly the actions valid from the current status, so the
store never needs to enforce ordering itself. Entering Completed, or
choosing Manage Payment on a completed booking, opens the payment form.
Recording a payment completes the booking from any status.

Usage:
    sm = BookingStateMachine(BookingStatus.PENDING)
    sm.transition(BookingAction.START)
    assert sm.current_status == BookingStatus.IN_PROGRESS
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from parlourease.schemas.booking_schema import BookingStatus

logger = logging.getLogger(__name__)


class BookingAction(str, Enum):
    """Events that cause status transitions."""
    START = "start"
    COMPLETE = "complete"
    MANAGE_PAYMENT = "manage_payment"
    RECORD_PAYMENT = "record_payment"


# Shown in the admin queue's action menu.
MENU_ACTIONS: tuple[BookingAction, ...] = (
    BookingAction.START,
    BookingAction.COMPLETE,
    BookingAction.MANAGE_PAYMENT,
)

ACTION_LABELS: dict[BookingAction, str] = {
    BookingAction.START: "Start",
    BookingAction.COMPLETE: "Complete",
    BookingAction.MANAGE_PAYMENT: "Manage Payment",
    BookingAction.RECORD_PAYMENT: "Save Payment",
}


@dataclass
class Transition:
    """A single valid status transition."""
    from_status: BookingStatus
    to_status: BookingStatus
    action: BookingAction
    opens_payment: bool = False


@dataclass
class StatusEntry:
    """Recorded history entry for a status visit."""
    status: BookingStatus
    entered_at: datetime
    action: Optional[BookingAction] = None


class InvalidTransitionError(Exception):
    """Raised when an action is not valid from the current status."""


class BookingStateMachine:
    """
    Deterministic status lifecycle for one booking.

    There is no backward path and no cancellation; Completed only loops to
    itself for payment management.
    """

    TRANSITIONS: list[Transition] = [
        Transition(BookingStatus.PENDING, BookingStatus.IN_PROGRESS, BookingAction.START),
        Transition(BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED, BookingAction.COMPLETE,
                   opens_payment=True),
        Transition(BookingStatus.COMPLETED, BookingStatus.COMPLETED, BookingAction.MANAGE_PAYMENT,
                   opens_payment=True),

        # --- Payment save completes from anywhere ---
        Transition(BookingStatus.PENDING, BookingStatus.COMPLETED, BookingAction.RECORD_PAYMENT),
        Transition(BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED, BookingAction.RECORD_PAYMENT),
        Transition(BookingStatus.COMPLETED, BookingStatus.COMPLETED, BookingAction.RECORD_PAYMENT),
    ]

    def __init__(self, status: BookingStatus = BookingStatus.PENDING) -> None:
        self._current_status = status
        self._history: list[StatusEntry] = [
            StatusEntry(status=status, entered_at=datetime.now(timezone.utc))
        ]

    @property
    def current_status(self) -> BookingStatus:
        return self._current_status

    def _find(self, action: BookingAction) -> Optional[Transition]:
        for t in self.TRANSITIONS:
            if t.from_status == self._current_status and t.action == action:
                return t
        return None

    def transition(self, action: BookingAction) -> BookingStatus:
        """
        Execute a status transition.

        Args:
            action: The admin action or payment save triggering the move.

        Returns:
            The new booking status.

        Raises:
            InvalidTransitionError: If the action is not valid right now.
        """
        t = self._find(action)
        if t is None:
            valid = [a.value for a in self.get_valid_actions()]
            raise InvalidTransitionError(
                f"No valid transition from '{self._current_status.value}' "
                f"with action '{action.value}'. Valid actions: {valid}"
            )

        old_status = self._current_status
        self._current_status = t.to_status
        self._history.append(StatusEntry(
            status=self._current_status,
            entered_at=datetime.now(timezone.utc),
            action=action,
        ))
        logger.debug(
            "Status transition: %s -> %s (action: %s)",
            old_status.value, self._current_status.value, action.value,
        )
        return self._current_status

    def opens_payment(self, action: BookingAction) -> bool:
        """Whether taking ``action`` from the current status opens the payment form."""
        t = self._find(action)
        return t is not None and t.opens_payment

    def get_valid_actions(self) -> list[BookingAction]:
        """Return all actions valid from the current status."""
        return [t.action for t in self.TRANSITIONS if t.from_status == self._current_status]

    def get_menu_actions(self) -> list[BookingAction]:
        """Return the actions the admin queue offers for the current status."""
        return [a for a in self.get_valid_actions() if a in MENU_ACTIONS]

    def get_history(self) -> list[StatusEntry]:
        """Return the full status transition history."""
        return list(self._history)

    def get_status_trace(self) -> list[str]:
        """Return ordered list of statuses visited."""
        return [entry.status.value for entry in self._history]

    def is_terminal(self) -> bool:
        return self._current_status == BookingStatus.COMPLETED


def menu_actions_for(status: BookingStatus) -> list[BookingAction]:
    """Actions offered for a booking currently in ``status``."""
    return BookingStateMachine(status).get_menu_actions()
