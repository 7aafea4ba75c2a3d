"""Scheduling domain schemas - Pydantic models for validation"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, field_validator

from ...models import BookingStatus


class BookingCreate(BaseModel):
    """Schema for a member requesting a booking"""

    trainer_id: int
    service_id: int
    booking_date: date
    start_time: time
    member_note: Optional[str] = None

    @field_validator("start_time")
    @classmethod
    def drop_seconds(cls, v: time) -> time:
        return v.replace(second=0, microsecond=0, tzinfo=None)

    @field_validator("member_note")
    @classmethod
    def validate_note(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if len(v) > 500:
            raise ValueError("member_note must be at most 500 characters")
        return v or None


class CancelRequest(BaseModel):
    """Schema for cancelling or rejecting a booking"""

    reason: Optional[str] = None

    @field_validator("reason")
    @classmethod
    def validate_reason(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if len(v) > 300:
            raise ValueError("reason must be at most 300 characters")
        return v or None


class CompleteRequest(BaseModel):
    """Schema for marking a booking completed"""

    trainer_note: Optional[str] = None

    @field_validator("trainer_note")
    @classmethod
    def validate_note(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) > 500:
            raise ValueError("trainer_note must be at most 500 characters")
        return v


class BookingResponse(BaseModel):
    """Schema for booking response"""

    id: int
    member_id: int
    trainer_id: int
    service_id: int
    trainer_name: Optional[str] = None
    service_name: Optional[str] = None
    booking_date: date
    start_time: time
    end_time: time
    status: BookingStatus
    price: Decimal
    member_note: Optional[str] = None
    trainer_note: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BookingDetailResponse(BookingResponse):
    """Booking plus what the viewer may still do with it"""

    member_name: Optional[str] = None
    cancellable: bool
    editable: bool


class SlotsResponse(BaseModel):
    trainer_id: int
    service_id: int
    date: date
    slots: list[str]
