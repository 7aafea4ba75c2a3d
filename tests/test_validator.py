"""Booking validation rules and draft derivation."""
import os
import subprocess
import sys
from datetime import date, datetime, time
from decimal import Decimal
from pathlib import Path
from types import SimpleNamespace

import pytest

from gymbook.domain.scheduling.errors import RejectionReason
from gymbook.domain.scheduling.slots import BookedInterval, Window
from gymbook.domain.scheduling.validator import BookingRequest, validate_booking
from gymbook.models import BookingStatus

MONDAY = date(2026, 10, 19)
NOW = datetime(2026, 10, 19, 8, 0)


@pytest.fixture
def service():
    return SimpleNamespace(id=3, is_active=True, duration_minutes=60, price=Decimal("150.00"))


@pytest.fixture
def trainer():
    return SimpleNamespace(id=7, is_active=True, session_fee=Decimal("50.00"))


@pytest.fixture
def windows():
    return [Window(time(9, 0), time(18, 0))]


def _request(start=time(10, 0), booking_date=MONDAY, note=None):
    return BookingRequest(
        member_id=1,
        trainer_id=7,
        service_id=3,
        booking_date=booking_date,
        start_time=start,
        member_note=note,
    )


class TestValidateBooking:
    def test_accepts_and_derives_draft(self, service, trainer, windows):
        draft, rejection = validate_booking(
            _request(note="Knee is sore"), service, trainer, windows, [], NOW
        )

        assert rejection is None
        assert draft.end_time == time(11, 0)
        assert draft.price == Decimal("200.00")
        assert draft.status == BookingStatus.PENDING
        assert draft.created_at == NOW
        assert draft.member_note == "Knee is sore"

    def test_missing_service(self, trainer, windows):
        draft, rejection = validate_booking(_request(), None, trainer, windows, [], NOW)

        assert draft is None
        assert rejection.reason == RejectionReason.INVALID_SERVICE
        assert rejection.status_code == 404

    def test_inactive_service(self, service, trainer, windows):
        service.is_active = False
        _, rejection = validate_booking(_request(), service, trainer, windows, [], NOW)

        assert rejection.reason == RejectionReason.INVALID_SERVICE

    def test_missing_trainer(self, service, windows):
        _, rejection = validate_booking(_request(), service, None, windows, [], NOW)

        assert rejection.reason == RejectionReason.INVALID_TRAINER

    def test_inactive_trainer(self, service, trainer, windows):
        trainer.is_active = False
        _, rejection = validate_booking(_request(), service, trainer, windows, [], NOW)

        assert rejection.reason == RejectionReason.INVALID_TRAINER

    def test_past_date_wins_over_later_rules(self, service, trainer):
        yesterday = date(2026, 10, 18)
        _, rejection = validate_booking(
            _request(start=time(3, 0), booking_date=yesterday), service, trainer, [], [], NOW
        )

        assert rejection.reason == RejectionReason.PAST_DATE
        assert rejection.status_code == 422

    def test_past_time_today(self, service, trainer, windows):
        now = datetime.combine(MONDAY, time(14, 0))
        _, rejection = validate_booking(_request(start=time(13, 30)), service, trainer, windows, [], now)

        assert rejection.reason == RejectionReason.PAST_TIME

    def test_start_equal_to_now_is_past(self, service, trainer, windows):
        now = datetime.combine(MONDAY, time(14, 0))
        _, rejection = validate_booking(_request(start=time(14, 0)), service, trainer, windows, [], now)

        assert rejection.reason == RejectionReason.PAST_TIME

    def test_no_window_that_day(self, service, trainer):
        _, rejection = validate_booking(_request(), service, trainer, [], [], NOW)

        assert rejection.reason == RejectionReason.TRAINER_UNAVAILABLE_THIS_DAY

    def test_switched_off_window(self, service, trainer):
        windows = [Window(time(9, 0), time(18, 0), is_available=False)]
        _, rejection = validate_booking(_request(), service, trainer, windows, [], NOW)

        assert rejection.reason == RejectionReason.TRAINER_UNAVAILABLE_THIS_DAY

    def test_start_before_window(self, service, trainer, windows):
        _, rejection = validate_booking(_request(start=time(8, 30)), service, trainer, windows, [], NOW)

        assert rejection.reason == RejectionReason.OUTSIDE_WORKING_HOURS
        assert "09:00 - 18:00" in rejection.message
        assert rejection.context["windows"] == [{"start": "09:00", "end": "18:00"}]

    def test_end_after_window(self, service, trainer, windows):
        _, rejection = validate_booking(_request(start=time(17, 30)), service, trainer, windows, [], NOW)

        assert rejection.reason == RejectionReason.OUTSIDE_WORKING_HOURS
        assert rejection.context["end_time"] == "18:30"

    def test_late_start_does_not_wrap_past_midnight(self, service, trainer):
        windows = [Window(time(20, 0), time(23, 30))]
        _, rejection = validate_booking(_request(start=time(23, 15)), service, trainer, windows, [], NOW)

        assert rejection.reason == RejectionReason.OUTSIDE_WORKING_HOURS

    def test_must_fit_inside_a_single_window(self, service, trainer):
        windows = [Window(time(9, 0), time(10, 30)), Window(time(10, 30), time(12, 0))]
        _, rejection = validate_booking(_request(start=time(10, 0)), service, trainer, windows, [], NOW)

        assert rejection.reason == RejectionReason.OUTSIDE_WORKING_HOURS

    def test_overlapping_booking(self, service, trainer, windows):
        bookings = [BookedInterval(time(10, 30), time(11, 30))]
        _, rejection = validate_booking(_request(), service, trainer, windows, bookings, NOW)

        assert rejection.reason == RejectionReason.SLOT_CONFLICT
        assert rejection.status_code == 409
        assert rejection.context == {"conflict_start": "10:30", "conflict_end": "11:30"}

    def test_adjacent_bookings_are_fine(self, service, trainer, windows):
        bookings = [BookedInterval(time(9, 0), time(10, 0)), BookedInterval(time(11, 0), time(12, 0))]
        draft, rejection = validate_booking(_request(), service, trainer, windows, bookings, NOW)

        assert rejection is None
        assert draft.start_time == time(10, 0)

    def test_rejection_detail_shape(self, trainer, windows):
        _, rejection = validate_booking(_request(), None, trainer, windows, [], NOW)

        assert rejection.to_detail() == {
            "code": "invalid_service",
            "message": "Invalid service selection.",
            "context": {"service_id": 3},
        }


def test_scheduling_core_imports_without_the_orm():
    code = (
        "import sys\n"
        "import gymbook.domain.scheduling.lifecycle\n"
        "import gymbook.domain.scheduling.slots\n"
        "import gymbook.domain.scheduling.validator\n"
        "assert 'sqlalchemy' not in sys.modules, 'sqlalchemy loaded'\n"
        "assert 'gymbook.database' not in sys.modules, 'database loaded'\n"
    )
    result = subprocess.run(
        [sys.executable, "-c", code],
        capture_output=True,
        text=True,
        cwd=Path(__file__).resolve().parent.parent,
        env={**os.environ, "SECRET_KEY": "test-secret-key"},
    )

    assert result.returncode == 0, result.stderr
