"""SchedulingService: atomic creation and the stale-snapshot race."""
from datetime import date, datetime, time

import pytest
from sqlalchemy.orm import sessionmaker

from gymbook.clock import FixedClock
from gymbook.domain.scheduling.errors import RejectionReason
from gymbook.domain.scheduling.repository import SchedulingRepository
from gymbook.domain.scheduling.service import SchedulingService
from gymbook.domain.scheduling.validator import BookingRequest
from gymbook.models import Booking, BookingStatus

NOW = datetime(2026, 10, 19, 8, 0)
NEXT_MONDAY = date(2026, 10, 26)


@pytest.fixture
def scheduling(db):
    return SchedulingService(db, FixedClock(NOW))


@pytest.fixture
def stale_snapshot(monkeypatch):
    """Pretend the conflict read ran before a competing insert landed"""
    monkeypatch.setattr(
        SchedulingRepository, "get_bookings", staticmethod(lambda db, trainer_id, booking_date: [])
    )


def _request(member, trainer, service, start):
    return BookingRequest(
        member_id=member.id,
        trainer_id=trainer.id,
        service_id=service.id,
        booking_date=NEXT_MONDAY,
        start_time=start,
    )


def _live_bookings(db):
    return db.query(Booking).filter(Booking.status != BookingStatus.CANCELLED).all()


class TestCreateBooking:
    def test_persists_draft(self, scheduling, db, member, trainer, service, monday_window):
        booking, rejection = scheduling.create_booking(_request(member, trainer, service, time(10, 0)))

        assert rejection is None
        assert booking.id is not None
        assert booking.end_time == time(11, 0)
        assert booking.created_at == NOW
        assert len(_live_bookings(db)) == 1

    def test_validate_only_writes_nothing(self, scheduling, db, member, trainer, service, monday_window):
        draft, rejection = scheduling.validate_and_draft_booking(
            _request(member, trainer, service, time(10, 0))
        )

        assert rejection is None
        assert draft.start_time == time(10, 0)
        assert db.query(Booking).count() == 0

    def test_same_start_caught_by_unique_index(
        self, scheduling, db, member, other_member, trainer, service, monday_window, make_booking, stale_snapshot
    ):
        make_booking(time(10, 0), time(11, 0), owner=other_member)

        booking, rejection = scheduling.create_booking(_request(member, trainer, service, time(10, 0)))

        assert booking is None
        assert rejection.reason == RejectionReason.SLOT_CONFLICT
        assert len(_live_bookings(db)) == 1

    def test_overlap_caught_after_insert(
        self, scheduling, db, member, other_member, trainer, service, monday_window, make_booking, stale_snapshot
    ):
        make_booking(time(10, 0), time(11, 0), owner=other_member)

        booking, rejection = scheduling.create_booking(_request(member, trainer, service, time(10, 30)))

        assert booking is None
        assert rejection.reason == RejectionReason.SLOT_CONFLICT
        remaining = _live_bookings(db)
        assert len(remaining) == 1
        assert remaining[0].start_time == time(10, 0)

    def test_non_overlapping_request_survives_stale_snapshot(
        self, scheduling, db, member, other_member, trainer, service, monday_window, make_booking, stale_snapshot
    ):
        make_booking(time(10, 0), time(11, 0), owner=other_member)

        booking, rejection = scheduling.create_booking(_request(member, trainer, service, time(11, 0)))

        assert rejection is None
        assert len(_live_bookings(db)) == 2

    def test_free_slots_for_inactive_service(self, scheduling, db, trainer, service, monday_window):
        service.is_active = False
        db.commit()

        assert scheduling.resolve_free_slots(trainer.id, NEXT_MONDAY, service.id) == []


class TestConcurrentTransitions:
    """Two sessions acting on the same booking"""

    @pytest.fixture
    def second_session(self, engine):
        session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
        yield session
        session.close()

    def test_cancel_after_completion_elsewhere_is_refused(
        self, db, second_session, member, admin, make_booking
    ):
        booking_id = make_booking(time(10, 0), time(11, 0)).id
        seen_elsewhere = second_session.get(Booking, booking_id)
        assert seen_elsewhere.status == BookingStatus.PENDING

        _, first_rejection = SchedulingService(db, FixedClock(NOW)).complete_booking(booking_id, admin)
        booking, rejection = SchedulingService(second_session, FixedClock(NOW)).cancel_booking(
            booking_id, member
        )

        assert first_rejection is None
        assert booking is None
        assert rejection.reason == RejectionReason.INVALID_TRANSITION
        db.expire_all()
        assert db.get(Booking, booking_id).status == BookingStatus.COMPLETED

    def test_write_is_refused_when_status_moved_after_read(
        self, db, second_session, admin, make_booking, monkeypatch
    ):
        booking_id = make_booking(time(10, 0), time(11, 0)).id
        stale = second_session.get(Booking, booking_id)
        assert stale.status == BookingStatus.PENDING

        SchedulingService(db, FixedClock(NOW)).confirm_booking(booking_id, admin)
        # The late request keeps working from its own out-of-date copy
        monkeypatch.setattr(
            SchedulingRepository,
            "get_booking",
            staticmethod(lambda db, booking_id, for_update=False: stale),
        )
        booking, rejection = SchedulingService(second_session, FixedClock(NOW)).complete_booking(
            booking_id, admin
        )

        assert booking is None
        assert rejection.reason == RejectionReason.INVALID_TRANSITION
        assert rejection.context == {"from": "pending", "to": "completed"}
        db.expire_all()
        assert db.get(Booking, booking_id).status == BookingStatus.CONFIRMED
