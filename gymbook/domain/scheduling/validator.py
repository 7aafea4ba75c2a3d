"""
Booking validation.

Rules run in a fixed order and the first failure wins, so the same request
always reports the same reason:

1. service exists and is active
2. trainer exists and is active
3. date is not before today
4. today: start is strictly after the current time
5. an available window exists for the weekday
6. [start, start + duration) fits inside one such window
7. no overlap with the trainer's non-cancelled bookings that day
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from ...enums import BookingStatus
from .errors import Rejection, RejectionReason
from .slots import available_windows, overlaps

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingRequest:
    member_id: int
    trainer_id: int
    service_id: int
    booking_date: date
    start_time: time
    member_note: Optional[str] = None


@dataclass(frozen=True)
class BookingDraft:
    """Fully derived booking that has not been persisted yet"""

    member_id: int
    trainer_id: int
    service_id: int
    booking_date: date
    start_time: time
    end_time: time
    price: Decimal
    status: BookingStatus
    member_note: Optional[str]
    created_at: datetime


def _hhmm(value: time) -> str:
    return value.strftime("%H:%M")


def _money(value) -> Decimal:
    return Decimal(str(value if value is not None else 0))


def validate_booking(
    request: BookingRequest,
    service,
    trainer,
    windows: Iterable,
    bookings: Iterable,
    now: datetime,
) -> tuple[Optional[BookingDraft], Optional[Rejection]]:
    """
    Decide whether ``request`` may be booked.
    Returns (draft, None) on success or (None, rejection).

    ``windows`` are the trainer's windows for the requested weekday and
    ``bookings`` the trainer's non-cancelled bookings on the requested date.
    """
    if service is None or not getattr(service, "is_active", True):
        return None, Rejection(
            RejectionReason.INVALID_SERVICE,
            "Invalid service selection.",
            {"service_id": request.service_id},
        )

    if trainer is None or not getattr(trainer, "is_active", True):
        return None, Rejection(
            RejectionReason.INVALID_TRAINER,
            "Invalid trainer selection.",
            {"trainer_id": request.trainer_id},
        )

    today = now.date()
    if request.booking_date < today:
        return None, Rejection(
            RejectionReason.PAST_DATE,
            "You cannot book a date in the past.",
            {"date": request.booking_date.isoformat(), "today": today.isoformat()},
        )

    if request.booking_date == today and request.start_time <= now.time():
        return None, Rejection(
            RejectionReason.PAST_TIME,
            "You cannot book a time that has already passed.",
            {"start_time": _hhmm(request.start_time), "now": _hhmm(now.time())},
        )

    open_windows = available_windows(windows)
    if not open_windows:
        return None, Rejection(
            RejectionReason.TRAINER_UNAVAILABLE_THIS_DAY,
            "The selected trainer is not available on this day.",
            {"weekday": request.booking_date.weekday()},
        )

    start = datetime.combine(request.booking_date, request.start_time)
    end = start + timedelta(minutes=service.duration_minutes)

    fits = any(
        datetime.combine(request.booking_date, w.start_time) <= start
        and end <= datetime.combine(request.booking_date, w.end_time)
        for w in open_windows
    )
    if not fits:
        bounds = [{"start": _hhmm(w.start_time), "end": _hhmm(w.end_time)} for w in open_windows]
        ranges = ", ".join(f"{b['start']} - {b['end']}" for b in bounds)
        return None, Rejection(
            RejectionReason.OUTSIDE_WORKING_HOURS,
            f"The trainer is available between {ranges}.",
            {"windows": bounds, "start_time": _hhmm(request.start_time), "end_time": _hhmm(end.time())},
        )

    for booking in bookings:
        other_start = datetime.combine(request.booking_date, booking.start_time)
        other_end = datetime.combine(request.booking_date, booking.end_time)
        if overlaps(start, end, other_start, other_end):
            return None, Rejection(
                RejectionReason.SLOT_CONFLICT,
                "The trainer already has a booking at this time. Please choose another time.",
                {"conflict_start": _hhmm(booking.start_time), "conflict_end": _hhmm(booking.end_time)},
            )

    draft = BookingDraft(
        member_id=request.member_id,
        trainer_id=request.trainer_id,
        service_id=request.service_id,
        booking_date=request.booking_date,
        start_time=request.start_time,
        end_time=end.time(),
        price=_money(service.price) + _money(trainer.session_fee),
        status=BookingStatus.PENDING,
        member_note=request.member_note,
        created_at=now,
    )
    logger.debug(f"Booking draft accepted for trainer {request.trainer_id} on {request.booking_date}")
    return draft, None
