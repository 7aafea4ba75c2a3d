
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Time,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base
from .enums import BookingStatus, ServiceCategory


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Member(Base):
    __tablename__ = "members"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(String(20), default="member", nullable=False)  # member, trainer, admin
    # Set for trainer accounts; links the login to the trainer profile it manages
    trainer_id = Column(Integer, ForeignKey("trainers.id"), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    joined_at = Column(DateTime, server_default=func.now())

    bookings = relationship("Booking", back_populates="member")
    trainer = relationship("Trainer")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Trainer(Base):
    __tablename__ = "trainers"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(100), nullable=False)
    phone = Column(String(15), nullable=True)
    specialties = Column(String(500), nullable=False, default="")
    bio = Column(Text, nullable=True)
    # Default working bounds shown on the profile; bookable hours come from availability windows
    work_start = Column(Time, nullable=False)
    work_end = Column(Time, nullable=False)
    session_fee = Column(Numeric(10, 2), nullable=False, default=0)
    experience_years = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    availability = relationship(
        "AvailabilityWindow", back_populates="trainer", cascade="all, delete-orphan"
    )
    trainer_services = relationship(
        "TrainerService", back_populates="trainer", cascade="all, delete-orphan"
    )
    bookings = relationship("Booking", back_populates="trainer")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Service(Base):
    __tablename__ = "services"
    __table_args__ = (
        CheckConstraint("duration_minutes BETWEEN 15 AND 240", name="ck_service_duration"),
        CheckConstraint("max_participants BETWEEN 1 AND 50", name="ck_service_participants"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    duration_minutes = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(
        Enum(ServiceCategory, native_enum=False, values_callable=_enum_values, length=30),
        nullable=False,
        default=ServiceCategory.OTHER,
    )
    max_participants = Column(Integer, nullable=False, default=1)
    is_active = Column(Boolean, default=True, nullable=False)

    trainer_services = relationship("TrainerService", back_populates="service")
    bookings = relationship("Booking", back_populates="service")


class TrainerService(Base):
    """Which services a trainer is assigned to deliver"""

    __tablename__ = "trainer_services"
    __table_args__ = (UniqueConstraint("trainer_id", "service_id", name="uq_trainer_service"),)

    id = Column(Integer, primary_key=True, index=True)
    trainer_id = Column(Integer, ForeignKey("trainers.id"), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)
    is_certified = Column(Boolean, default=False, nullable=False)
    certified_on = Column(Date, nullable=True)
    assigned_at = Column(DateTime, server_default=func.now())

    trainer = relationship("Trainer", back_populates="trainer_services")
    service = relationship("Service", back_populates="trainer_services")


class AvailabilityWindow(Base):
    """Weekly recurring window in which a trainer can be booked"""

    __tablename__ = "availability_windows"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_window_order"),
        CheckConstraint("weekday BETWEEN 0 AND 6", name="ck_window_weekday"),
        Index("idx_window_trainer_day", "trainer_id", "weekday"),
    )

    id = Column(Integer, primary_key=True, index=True)
    trainer_id = Column(Integer, ForeignKey("trainers.id"), nullable=False)
    weekday = Column(Integer, nullable=False)  # 0=Monday ... 6=Sunday, as date.weekday()
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_available = Column(Boolean, default=True, nullable=False)
    note = Column(String(200), nullable=True)

    trainer = relationship("Trainer", back_populates="availability")


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_booking_order"),
        Index("idx_booking_trainer_date", "trainer_id", "booking_date", "status"),
        Index("idx_booking_member", "member_id", "status"),
        # Two live bookings can never share a trainer/date/start
        Index(
            "uq_booking_trainer_slot",
            "trainer_id",
            "booking_date",
            "start_time",
            unique=True,
            sqlite_where=text("status != 'cancelled'"),
            postgresql_where=text("status != 'cancelled'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    member_id = Column(Integer, ForeignKey("members.id"), nullable=False)
    trainer_id = Column(Integer, ForeignKey("trainers.id"), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)

    booking_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    # Frozen at creation from the service duration and fees
    end_time = Column(Time, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    status = Column(
        Enum(BookingStatus, native_enum=False, values_callable=_enum_values, length=20),
        nullable=False,
        default=BookingStatus.PENDING,
    )
    member_note = Column(String(500), nullable=True)
    trainer_note = Column(String(500), nullable=True)
    cancellation_reason = Column(String(300), nullable=True)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    member = relationship("Member", back_populates="bookings")
    trainer = relationship("Trainer", back_populates="bookings")
    service = relationship("Service", back_populates="bookings")
