"""Scheduling repository - Database operations for availability and bookings"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import AvailabilityWindow, Booking, BookingStatus, Service, Trainer


class SchedulingRepository:
    """Repository for availability and booking database operations"""

    @staticmethod
    def get_service(db: Session, service_id: int) -> Optional[Service]:
        return db.query(Service).filter(Service.id == service_id).first()

    @staticmethod
    def get_trainer(db: Session, trainer_id: int, for_update: bool = False) -> Optional[Trainer]:
        """Get a trainer; with for_update the row stays locked until commit"""
        query = db.query(Trainer).filter(Trainer.id == trainer_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def get_availability(db: Session, trainer_id: int, weekday: int) -> list[AvailabilityWindow]:
        """All windows a trainer has on a weekday, including switched-off ones"""
        return (
            db.query(AvailabilityWindow)
            .filter(
                AvailabilityWindow.trainer_id == trainer_id,
                AvailabilityWindow.weekday == weekday,
            )
            .order_by(AvailabilityWindow.start_time)
            .all()
        )

    @staticmethod
    def get_bookings(db: Session, trainer_id: int, booking_date: date) -> list[Booking]:
        """Non-cancelled bookings of a trainer on a date, used for conflict checks"""
        return (
            db.query(Booking)
            .filter(
                Booking.trainer_id == trainer_id,
                Booking.booking_date == booking_date,
                Booking.status != BookingStatus.CANCELLED,
            )
            .order_by(Booking.start_time)
            .all()
        )

    @staticmethod
    def get_booking(db: Session, booking_id: int, for_update: bool = False) -> Optional[Booking]:
        """Get a booking; with for_update the row is locked and re-read from the database"""
        query = (
            db.query(Booking)
            .options(
                joinedload(Booking.trainer),
                joinedload(Booking.service),
                joinedload(Booking.member),
            )
            .filter(Booking.id == booking_id)
        )
        if for_update:
            query = query.with_for_update(of=Booking).populate_existing()
        return query.first()

    @staticmethod
    def update_status(db: Session, booking_id: int, expected_status: BookingStatus, **values) -> bool:
        """
        Write a status change only if the row still has ``expected_status``.
        Returns False when another transaction moved the booking first.
        """
        with db.no_autoflush:
            matched = (
                db.query(Booking)
                .filter(Booking.id == booking_id, Booking.status == expected_status)
                .update(values, synchronize_session=False)
            )
        return matched == 1

    @staticmethod
    def add_booking(db: Session, **booking_data) -> Booking:
        """Stage a booking and flush so it is visible to the overlap re-check"""
        booking = Booking(**booking_data)
        db.add(booking)
        db.flush()
        return booking

    @staticmethod
    def find_overlapping(db: Session, booking: Booking) -> list[Booking]:
        """Other non-cancelled bookings of the same trainer that overlap ``booking``"""
        return (
            db.query(Booking)
            .filter(
                Booking.id != booking.id,
                Booking.trainer_id == booking.trainer_id,
                Booking.booking_date == booking.booking_date,
                Booking.status != BookingStatus.CANCELLED,
                Booking.start_time < booking.end_time,
                Booking.end_time > booking.start_time,
            )
            .all()
        )

    @staticmethod
    def get_member_bookings(db: Session, member_id: int) -> list[Booking]:
        return (
            db.query(Booking)
            .options(joinedload(Booking.trainer), joinedload(Booking.service))
            .filter(Booking.member_id == member_id)
            .order_by(Booking.booking_date.desc(), Booking.start_time.desc())
            .all()
        )

    @staticmethod
    def get_trainer_bookings(
        db: Session,
        trainer_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[Booking]:
        """Non-cancelled bookings of a trainer in an optional date range, soonest first"""
        query = (
            db.query(Booking)
            .options(joinedload(Booking.member), joinedload(Booking.service))
            .filter(Booking.trainer_id == trainer_id, Booking.status != BookingStatus.CANCELLED)
        )
        if date_from:
            query = query.filter(Booking.booking_date >= date_from)
        if date_to:
            query = query.filter(Booking.booking_date <= date_to)
        return query.order_by(Booking.booking_date, Booking.start_time).all()

    @staticmethod
    def search_bookings(
        db: Session,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        status: Optional[BookingStatus] = None,
    ) -> list[Booking]:
        """Back-office listing with optional filters, newest first"""
        query = db.query(Booking).options(
            joinedload(Booking.member), joinedload(Booking.trainer), joinedload(Booking.service)
        )
        if date_from:
            query = query.filter(Booking.booking_date >= date_from)
        if date_to:
            query = query.filter(Booking.booking_date <= date_to)
        if status:
            query = query.filter(Booking.status == status)
        return query.order_by(Booking.booking_date.desc(), Booking.start_time.desc()).all()
