"""
Booking status transitions.

    pending   -> confirmed | cancelled | completed
    confirmed -> cancelled | completed

cancelled, completed, no_show and rescheduled have no outgoing edges.
This module only decides whether an edge is legal; who may take it is
enforced by the caller, using EDGE_ROLES as the convention.
"""

import logging
from datetime import datetime
from typing import Optional

from ...config import MEMBER_CANCEL_REASON, STAFF_CANCEL_REASON
from ...enums import BookingStatus
from .errors import Rejection, RejectionReason
from .slots import is_past_booking

logger = logging.getLogger(__name__)

ROLE_ADMIN = "admin"
ROLE_TRAINER = "trainer"
ROLE_MEMBER = "member"
STAFF_ROLES = frozenset({ROLE_ADMIN, ROLE_TRAINER})

TRANSITIONS: dict[BookingStatus, frozenset] = {
    BookingStatus.PENDING: frozenset(
        {BookingStatus.CONFIRMED, BookingStatus.CANCELLED, BookingStatus.COMPLETED}
    ),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED}),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.NO_SHOW: frozenset(),
    BookingStatus.RESCHEDULED: frozenset(),
}

# Which roles conventionally trigger each edge; members may only withdraw a pending booking
EDGE_ROLES: dict[tuple, frozenset] = {
    (BookingStatus.PENDING, BookingStatus.CONFIRMED): STAFF_ROLES,
    (BookingStatus.PENDING, BookingStatus.CANCELLED): STAFF_ROLES | {ROLE_MEMBER},
    (BookingStatus.PENDING, BookingStatus.COMPLETED): STAFF_ROLES,
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED): STAFF_ROLES,
    (BookingStatus.CONFIRMED, BookingStatus.COMPLETED): STAFF_ROLES,
}

TERMINAL_STATES = frozenset(status for status, targets in TRANSITIONS.items() if not targets)


def validate_status_transition(current_status, new_status) -> bool:
    """True when the lifecycle graph has an edge current_status -> new_status"""
    return BookingStatus(new_status) in TRANSITIONS[BookingStatus(current_status)]


def allowed_roles(current_status, new_status) -> frozenset:
    return EDGE_ROLES.get((BookingStatus(current_status), BookingStatus(new_status)), frozenset())


def is_cancellable(booking, now: datetime) -> bool:
    status = BookingStatus(booking.status)
    if status in (BookingStatus.CANCELLED, BookingStatus.COMPLETED, BookingStatus.NO_SHOW):
        return False
    return not is_past_booking(booking.booking_date, booking.end_time, now)


def is_editable(booking, now: datetime) -> bool:
    if BookingStatus(booking.status) != BookingStatus.PENDING:
        return False
    return not is_past_booking(booking.booking_date, booking.end_time, now)


def apply_transition(
    booking,
    target_status,
    actor_role: str,
    now: datetime,
    reason: Optional[str] = None,
    note: Optional[str] = None,
):
    """
    Move ``booking`` to ``target_status`` in place.
    Returns (booking, None) on success or (None, rejection).
    """
    current = BookingStatus(booking.status)
    target = BookingStatus(target_status)

    if current == BookingStatus.CANCELLED and target == BookingStatus.CANCELLED:
        return None, Rejection(
            RejectionReason.INVALID_TRANSITION,
            "This booking is already cancelled.",
            {"from": current.value, "to": target.value},
        )

    if not validate_status_transition(current, target):
        return None, Rejection(
            RejectionReason.INVALID_TRANSITION,
            f"A {current.value} booking cannot be moved to {target.value}.",
            {"from": current.value, "to": target.value},
        )

    if target == BookingStatus.CANCELLED and is_past_booking(
        booking.booking_date, booking.end_time, now
    ):
        return None, Rejection(
            RejectionReason.INVALID_TRANSITION,
            "Past bookings cannot be cancelled.",
            {"from": current.value, "to": target.value, "date": booking.booking_date.isoformat()},
        )

    booking.status = target
    booking.updated_at = now

    if target == BookingStatus.CANCELLED:
        default_reason = MEMBER_CANCEL_REASON if actor_role == ROLE_MEMBER else STAFF_CANCEL_REASON
        booking.cancellation_reason = reason or default_reason
    elif target == BookingStatus.COMPLETED and note is not None:
        booking.trainer_note = note

    logger.info(f"Booking {getattr(booking, 'id', None)} transitioned: {current.value} → {target.value} by {actor_role}")
    return booking, None
