"""Scheduling router - FastAPI endpoints for slots, bookings and status changes"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_roles
from ...clock import get_clock
from ...database import get_db
from ...models import Booking, BookingStatus, Member
from .errors import Rejection
from .lifecycle import ROLE_ADMIN, ROLE_MEMBER, ROLE_TRAINER
from .schemas import (
    BookingCreate,
    BookingDetailResponse,
    BookingResponse,
    CancelRequest,
    CompleteRequest,
    SlotsResponse,
)
from .service import SchedulingService
from .validator import BookingRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Scheduling"])


def get_scheduling_service(
    db: Session = Depends(get_db), clock=Depends(get_clock)
) -> SchedulingService:
    """Dependency injection for SchedulingService"""
    return SchedulingService(db, clock)


def _raise_rejection(rejection: Rejection):
    raise HTTPException(status_code=rejection.status_code, detail=rejection.to_detail())


def _to_response(booking: Booking) -> BookingResponse:
    return BookingResponse(
        id=booking.id,
        member_id=booking.member_id,
        trainer_id=booking.trainer_id,
        service_id=booking.service_id,
        trainer_name=booking.trainer.full_name if booking.trainer else None,
        service_name=booking.service.name if booking.service else None,
        booking_date=booking.booking_date,
        start_time=booking.start_time,
        end_time=booking.end_time,
        status=booking.status,
        price=booking.price,
        member_note=booking.member_note,
        trainer_note=booking.trainer_note,
        cancellation_reason=booking.cancellation_reason,
        created_at=booking.created_at,
        updated_at=booking.updated_at,
    )


# ============================================================================
# SLOTS
# ============================================================================


@router.get("/scheduling/slots", response_model=SlotsResponse)
async def get_free_slots(
    trainer_id: int = Query(...),
    target_date: date = Query(..., alias="date", description="YYYY-MM-DD"),
    service_id: int = Query(...),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Bookable start times for a trainer and service on a date"""
    slots = service.resolve_free_slots(trainer_id, target_date, service_id)
    return SlotsResponse(
        trainer_id=trainer_id,
        service_id=service_id,
        date=target_date,
        slots=[slot.strftime("%H:%M") for slot in slots],
    )


# ============================================================================
# BOOKINGS
# ============================================================================


@router.post("/bookings", response_model=BookingResponse, status_code=201)
async def create_booking(
    data: BookingCreate,
    current_user: Member = Depends(require_roles(ROLE_MEMBER, ROLE_ADMIN)),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Request a booking; it starts out pending until staff confirm it"""
    request = BookingRequest(
        member_id=current_user.id,
        trainer_id=data.trainer_id,
        service_id=data.service_id,
        booking_date=data.booking_date,
        start_time=data.start_time,
        member_note=data.member_note,
    )
    booking, rejection = service.create_booking(request)
    if rejection:
        _raise_rejection(rejection)
    return _to_response(booking)


@router.get("/bookings/me", response_model=list[BookingResponse])
async def get_my_bookings(
    current_user: Member = Depends(get_current_user),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Bookings of the current member, newest first"""
    return [_to_response(b) for b in service.get_member_bookings(current_user)]


@router.get("/bookings", response_model=list[BookingResponse])
async def search_bookings(
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    status: Optional[BookingStatus] = Query(None),
    current_user: Member = Depends(require_roles(ROLE_ADMIN)),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Back-office listing with optional date range and status filters"""
    return [_to_response(b) for b in service.search_bookings(date_from, date_to, status)]


@router.get("/bookings/{booking_id}", response_model=BookingDetailResponse)
async def get_booking(
    booking_id: int,
    current_user: Member = Depends(get_current_user),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Booking detail with cancellable/editable flags"""
    booking = service.get_booking(booking_id)
    service.ensure_can_view(booking, current_user)
    base = _to_response(booking).model_dump()
    return BookingDetailResponse(
        **base,
        member_name=booking.member.full_name if booking.member else None,
        **service.booking_flags(booking),
    )


@router.post("/bookings/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: int,
    data: Optional[CancelRequest] = None,
    current_user: Member = Depends(get_current_user),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Cancel a booking; members may only withdraw their own pending bookings"""
    reason = data.reason if data else None
    booking, rejection = service.cancel_booking(booking_id, current_user, reason)
    if rejection:
        _raise_rejection(rejection)
    return _to_response(booking)


@router.post("/bookings/{booking_id}/confirm", response_model=BookingResponse)
async def confirm_booking(
    booking_id: int,
    current_user: Member = Depends(require_roles(ROLE_ADMIN, ROLE_TRAINER)),
    service: SchedulingService = Depends(get_scheduling_service),
):
    booking, rejection = service.confirm_booking(booking_id, current_user)
    if rejection:
        _raise_rejection(rejection)
    return _to_response(booking)


@router.post("/bookings/{booking_id}/reject", response_model=BookingResponse)
async def reject_booking(
    booking_id: int,
    data: Optional[CancelRequest] = None,
    current_user: Member = Depends(require_roles(ROLE_ADMIN, ROLE_TRAINER)),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Staff cancellation, recorded with the staff default reason when none is given"""
    reason = data.reason if data else None
    booking, rejection = service.cancel_booking(booking_id, current_user, reason)
    if rejection:
        _raise_rejection(rejection)
    return _to_response(booking)


@router.post("/bookings/{booking_id}/complete", response_model=BookingResponse)
async def complete_booking(
    booking_id: int,
    data: Optional[CompleteRequest] = None,
    current_user: Member = Depends(require_roles(ROLE_ADMIN, ROLE_TRAINER)),
    service: SchedulingService = Depends(get_scheduling_service),
):
    note = data.trainer_note if data else None
    booking, rejection = service.complete_booking(booking_id, current_user, note)
    if rejection:
        _raise_rejection(rejection)
    return _to_response(booking)


@router.get("/trainers/{trainer_id}/bookings", response_model=list[BookingResponse])
async def get_trainer_bookings(
    trainer_id: int,
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    current_user: Member = Depends(require_roles(ROLE_ADMIN, ROLE_TRAINER)),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Non-cancelled bookings of a trainer, soonest first"""
    bookings = service.get_trainer_bookings(trainer_id, current_user, date_from, date_to)
    return [_to_response(b) for b in bookings]
