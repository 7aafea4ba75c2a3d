"""
Free-slot resolution for a trainer on a single calendar date.

Everything here is pure: callers pass in the availability windows for the
date's weekday, the trainer's non-cancelled bookings on that date and the
current wall-clock instant. Windows and bookings are read by attribute
(start_time, end_time, is_available), so ORM rows and the light tuples below
are interchangeable.
"""

import heapq
from datetime import date, datetime, time, timedelta
from typing import Iterable, Iterator, NamedTuple, Optional

from ...config import SLOT_STEP_MINUTES


class Window(NamedTuple):
    start_time: time
    end_time: time
    is_available: bool = True
    note: Optional[str] = None


class BookedInterval(NamedTuple):
    start_time: time
    end_time: time


def overlaps(start, end, other_start, other_end) -> bool:
    """Half-open interval test: [start, end) and [other_start, other_end) share time"""
    return start < other_end and end > other_start


def available_windows(windows: Iterable) -> list:
    """Windows with the available flag set, ordered by start"""
    return sorted((w for w in windows if w.is_available), key=lambda w: (w.start_time, w.end_time))


def is_past_booking(booking_date: date, end_time: time, now: datetime) -> bool:
    """A booking is past once its date is gone or, today, once its end has elapsed"""
    today = now.date()
    if booking_date < today:
        return True
    return booking_date == today and end_time < now.time()


class SlotSequence:
    """
    Ascending, de-duplicated bookable start times.

    Iteration is lazy and restartable: each ``iter()`` walks the windows
    again from the stored snapshot, so two passes always agree.
    """

    def __init__(
        self,
        target_date: date,
        duration_minutes: int,
        windows: Iterable,
        bookings: Iterable,
        now: datetime,
        step_minutes: int = SLOT_STEP_MINUTES,
    ):
        if step_minutes <= 0:
            raise ValueError("step_minutes must be positive")
        self.target_date = target_date
        self.duration = timedelta(minutes=duration_minutes)
        self.step = timedelta(minutes=step_minutes)
        self.windows = available_windows(windows)
        self.busy = [
            (self._at(b.start_time), self._at(b.end_time)) for b in bookings
        ]
        self.now = now

    def _at(self, value: time) -> datetime:
        return datetime.combine(self.target_date, value)

    def _window_candidates(self, window) -> Iterator[datetime]:
        current = self._at(window.start_time)
        last_start = self._at(window.end_time) - self.duration
        while current <= last_start:
            yield current
            current += self.step

    def _is_free(self, start: datetime) -> bool:
        end = start + self.duration
        return not any(overlaps(start, end, b_start, b_end) for b_start, b_end in self.busy)

    def __iter__(self) -> Iterator[time]:
        is_today = self.target_date == self.now.date()
        previous = None
        merged = heapq.merge(*(self._window_candidates(w) for w in self.windows))
        for candidate in merged:
            if candidate == previous:
                continue
            previous = candidate
            if is_today and candidate <= self.now:
                continue
            if self._is_free(candidate):
                yield candidate.time()

    def __repr__(self) -> str:
        return f"<SlotSequence date={self.target_date} duration={self.duration} windows={len(self.windows)}>"


def resolve_free_slots(
    target_date: date,
    duration_minutes: int,
    windows: Iterable,
    bookings: Iterable,
    now: datetime,
    step_minutes: int = SLOT_STEP_MINUTES,
) -> SlotSequence:
    """
    Enumerate free start times for one trainer on ``target_date``.

    Impossible configurations (no window, window switched off, service longer
    than the window) simply produce an empty sequence.
    """
    return SlotSequence(target_date, duration_minutes, windows, bookings, now, step_minutes)
