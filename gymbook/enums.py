"""Booking and service enums shared by the ORM models and the scheduling core"""

import enum


class BookingStatus(str, enum.Enum):
    """Booking lifecycle states; PENDING is the only initial state"""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"
    RESCHEDULED = "rescheduled"


class ServiceCategory(str, enum.Enum):
    FITNESS = "fitness"
    YOGA = "yoga"
    PILATES = "pilates"
    CARDIO = "cardio"
    MUSCLE_BUILDING = "muscle_building"
    WEIGHT_LOSS = "weight_loss"
    CROSSFIT = "crossfit"
    SWIMMING = "swimming"
    BOXING = "boxing"
    GROUP_CLASS = "group_class"
    PERSONAL_TRAINING = "personal_training"
    OTHER = "other"
