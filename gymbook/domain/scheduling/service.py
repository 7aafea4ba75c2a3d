"""Scheduling service - Business logic for slots, bookings and status changes"""

import logging
from contextlib import contextmanager
from dataclasses import asdict
from datetime import date
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import Booking, BookingStatus, Member
from .errors import Rejection, RejectionReason, StoreUnavailableError
from .lifecycle import (
    ROLE_ADMIN,
    ROLE_MEMBER,
    ROLE_TRAINER,
    allowed_roles,
    apply_transition,
    is_cancellable,
    is_editable,
)
from .repository import SchedulingRepository
from .slots import resolve_free_slots
from .validator import BookingDraft, BookingRequest, validate_booking

logger = logging.getLogger(__name__)


def _conflict(booking_date: date, start) -> Rejection:
    return Rejection(
        RejectionReason.SLOT_CONFLICT,
        "The trainer already has a booking at this time. Please choose another time.",
        {"date": booking_date.isoformat(), "start_time": start.strftime("%H:%M")},
    )


class SchedulingService:
    """Service layer for scheduling business logic"""

    def __init__(self, db: Session, clock):
        self.db = db
        self.clock = clock
        self.repo = SchedulingRepository()

    @contextmanager
    def _store(self):
        """Turn database failures into StoreUnavailableError"""
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Booking store unavailable: {type(e).__name__}: {e}")
            raise StoreUnavailableError(str(e)) from e

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------

    def resolve_free_slots(self, trainer_id: int, target_date: date, service_id: int):
        """Free start times; unknown or inactive services give an empty list"""
        with self._store():
            service = self.repo.get_service(self.db, service_id)
            if service is None or not service.is_active:
                return []
            windows = self.repo.get_availability(self.db, trainer_id, target_date.weekday())
            bookings = self.repo.get_bookings(self.db, trainer_id, target_date)

        return resolve_free_slots(
            target_date, service.duration_minutes, windows, bookings, self.clock.now()
        )

    # ------------------------------------------------------------------
    # Booking creation
    # ------------------------------------------------------------------

    def _validate(self, request: BookingRequest, lock_trainer: bool):
        trainer = self.repo.get_trainer(self.db, request.trainer_id, for_update=lock_trainer)
        service = self.repo.get_service(self.db, request.service_id)
        windows = self.repo.get_availability(
            self.db, request.trainer_id, request.booking_date.weekday()
        )
        bookings = self.repo.get_bookings(self.db, request.trainer_id, request.booking_date)
        return validate_booking(request, service, trainer, windows, bookings, self.clock.now())

    def validate_and_draft_booking(
        self, request: BookingRequest
    ) -> tuple[Optional[BookingDraft], Optional[Rejection]]:
        """Run every booking rule without writing anything"""
        with self._store():
            return self._validate(request, lock_trainer=False)

    def create_booking(self, request: BookingRequest) -> tuple[Optional[Booking], Optional[Rejection]]:
        """
        Validate and persist a booking in one transaction.

        The trainer row is locked before existing bookings are read, so
        concurrent requests for the same trainer run one after another. The
        partial unique index and the post-insert overlap check catch anything
        that still slips through; both roll back and report a slot conflict.
        """
        with self._store():
            draft, rejection = self._validate(request, lock_trainer=True)
            if rejection:
                self.db.rollback()
                logger.warning(
                    f"Booking rejected for member {request.member_id}: {rejection.reason.value}"
                )
                return None, rejection

            try:
                booking = self.repo.add_booking(self.db, **asdict(draft))
            except IntegrityError:
                self.db.rollback()
                logger.warning(
                    f"Duplicate slot for trainer {request.trainer_id} on {request.booking_date} at {request.start_time}"
                )
                return None, _conflict(request.booking_date, request.start_time)

            clashes = self.repo.find_overlapping(self.db, booking)
            if clashes:
                self.db.rollback()
                logger.warning(
                    f"Overlap detected after insert for trainer {request.trainer_id}: "
                    f"{[c.id for c in clashes]}"
                )
                return None, _conflict(request.booking_date, request.start_time)

            self.db.commit()
            self.db.refresh(booking)

        logger.info(f"New booking created: {booking.id} - member: {booking.member_id}")
        return booking, None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_booking(self, booking_id: int, for_update: bool = False) -> Booking:
        with self._store():
            booking = self.repo.get_booking(self.db, booking_id, for_update=for_update)
        if not booking:
            if for_update:
                self.db.rollback()
            raise HTTPException(status_code=404, detail="Booking not found")
        return booking

    def ensure_can_view(self, booking: Booking, user: Member) -> None:
        if user.role == ROLE_ADMIN or booking.member_id == user.id:
            return
        if user.role == ROLE_TRAINER and user.trainer_id == booking.trainer_id:
            return
        raise HTTPException(status_code=403, detail="Not allowed to access this booking")

    def booking_flags(self, booking: Booking) -> dict:
        now = self.clock.now()
        return {"cancellable": is_cancellable(booking, now), "editable": is_editable(booking, now)}

    def get_member_bookings(self, user: Member) -> list[Booking]:
        with self._store():
            return self.repo.get_member_bookings(self.db, user.id)

    def get_trainer_bookings(
        self,
        trainer_id: int,
        user: Member,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[Booking]:
        if user.role == ROLE_TRAINER and user.trainer_id != trainer_id:
            raise HTTPException(status_code=403, detail="Trainers can only view their own bookings")
        with self._store():
            return self.repo.get_trainer_bookings(self.db, trainer_id, date_from, date_to)

    def search_bookings(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        status: Optional[BookingStatus] = None,
    ) -> list[Booking]:
        with self._store():
            return self.repo.search_bookings(self.db, date_from, date_to, status)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _actor_role(self, booking: Booking, user: Member) -> str:
        """Role the user acts in for this booking; owners act as members"""
        if user.role == ROLE_ADMIN:
            return ROLE_ADMIN
        if user.role == ROLE_TRAINER and user.trainer_id == booking.trainer_id:
            return ROLE_TRAINER
        if booking.member_id == user.id:
            return ROLE_MEMBER
        raise HTTPException(status_code=403, detail="Not allowed to change this booking")

    def transition(
        self,
        booking_id: int,
        target: BookingStatus,
        user: Member,
        reason: Optional[str] = None,
        note: Optional[str] = None,
    ) -> tuple[Optional[Booking], Optional[Rejection]]:
        """
        Authorize the actor for the edge, then apply it and persist.

        The booking row is locked and re-read before the edge is checked, and
        the write only lands if the stored status is still the one the edge
        started from, so a booking that reached a terminal state never moves again.
        """
        booking = self.get_booking(booking_id, for_update=True)
        previous = BookingStatus(booking.status)
        try:
            actor_role = self._actor_role(booking, user)
        except HTTPException:
            self.db.rollback()
            raise

        roles = allowed_roles(previous, target)
        # Illegal edges fall through to the lifecycle so they report InvalidTransition
        if roles and actor_role not in roles:
            self.db.rollback()
            logger.warning(
                f"User {user.id} ({actor_role}) tried {previous.value} → {target.value} on booking {booking_id}"
            )
            raise HTTPException(status_code=403, detail="Not allowed to perform this action")

        updated, rejection = apply_transition(
            booking, target, actor_role, self.clock.now(), reason=reason, note=note
        )
        if rejection:
            self.db.rollback()
            logger.warning(f"Transition rejected for booking {booking_id}: {rejection.message}")
            return None, rejection

        with self._store():
            applied = self.repo.update_status(
                self.db,
                booking_id,
                previous,
                status=updated.status,
                updated_at=updated.updated_at,
                cancellation_reason=updated.cancellation_reason,
                trainer_note=updated.trainer_note,
            )
            if not applied:
                self.db.rollback()
                logger.warning(
                    f"Booking {booking_id} left {previous.value} before {target.value} was written"
                )
                return None, Rejection(
                    RejectionReason.INVALID_TRANSITION,
                    "This booking was changed by someone else. Please reload it and try again.",
                    {"from": previous.value, "to": target.value},
                )
            self.db.commit()
            self.db.refresh(updated)
        return updated, None

    def cancel_booking(self, booking_id: int, user: Member, reason: Optional[str] = None):
        return self.transition(booking_id, BookingStatus.CANCELLED, user, reason=reason)

    def confirm_booking(self, booking_id: int, user: Member):
        return self.transition(booking_id, BookingStatus.CONFIRMED, user)

    def complete_booking(self, booking_id: int, user: Member, note: Optional[str] = None):
        return self.transition(booking_id, BookingStatus.COMPLETED, user, note=note)
