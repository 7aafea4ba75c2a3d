"""Rejection reasons for booking requests and lifecycle changes"""

import enum
from dataclasses import dataclass, field
from typing import Any


class RejectionReason(str, enum.Enum):
    INVALID_SERVICE = "invalid_service"
    INVALID_TRAINER = "invalid_trainer"
    PAST_DATE = "past_date"
    PAST_TIME = "past_time"
    TRAINER_UNAVAILABLE_THIS_DAY = "trainer_unavailable_this_day"
    OUTSIDE_WORKING_HOURS = "outside_working_hours"
    SLOT_CONFLICT = "slot_conflict"
    INVALID_TRANSITION = "invalid_transition"


# HTTP status used when a rejection reaches the API
HTTP_STATUS = {
    RejectionReason.INVALID_SERVICE: 404,
    RejectionReason.INVALID_TRAINER: 404,
    RejectionReason.PAST_DATE: 422,
    RejectionReason.PAST_TIME: 422,
    RejectionReason.TRAINER_UNAVAILABLE_THIS_DAY: 422,
    RejectionReason.OUTSIDE_WORKING_HOURS: 422,
    RejectionReason.SLOT_CONFLICT: 409,
    RejectionReason.INVALID_TRANSITION: 409,
}


@dataclass(frozen=True)
class Rejection:
    """An expected, user-facing refusal with enough context to render it"""

    reason: RejectionReason
    message: str
    context: dict[str, Any] = field(default_factory=dict)

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.reason]

    def to_detail(self) -> dict:
        return {"code": self.reason.value, "message": self.message, "context": self.context}


class StoreUnavailableError(Exception):
    """The booking or availability store could not be reached"""
