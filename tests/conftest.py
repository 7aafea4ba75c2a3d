"""Shared fixtures: in-memory database, pinned clock, seeded gym and API client."""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

from datetime import date, datetime, time  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from gymbook.clock import FixedClock, get_clock  # noqa: E402
from gymbook.database import Base, get_db  # noqa: E402
from gymbook.main import app  # noqa: E402
from gymbook.models import (  # noqa: E402
    AvailabilityWindow,
    Booking,
    BookingStatus,
    Member,
    Service,
    ServiceCategory,
    Trainer,
)
from gymbook.security_utils import create_access_token  # noqa: E402

# Monday 19 October 2026, 08:00 gym time
MONDAY = date(2026, 10, 19)
NEXT_MONDAY = date(2026, 10, 26)
NOW = datetime(2026, 10, 19, 8, 0)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def client(db, clock):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()


# =============================================================================
# Seed data
# =============================================================================


def _save(db, obj):
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture
def trainer(db) -> Trainer:
    return _save(
        db,
        Trainer(
            first_name="Ayse",
            last_name="Demir",
            email="ayse@gym.test",
            specialties="strength, mobility",
            work_start=time(9, 0),
            work_end=time(18, 0),
            session_fee=Decimal("50.00"),
            experience_years=6,
        ),
    )


@pytest.fixture
def other_trainer(db) -> Trainer:
    return _save(
        db,
        Trainer(
            first_name="Burak",
            last_name="Kaya",
            email="burak@gym.test",
            specialties="boxing",
            work_start=time(12, 0),
            work_end=time(20, 0),
            session_fee=Decimal("40.00"),
            experience_years=3,
        ),
    )


@pytest.fixture
def service(db) -> Service:
    return _save(
        db,
        Service(
            name="Personal Training",
            description="One-to-one session",
            duration_minutes=60,
            price=Decimal("150.00"),
            category=ServiceCategory.PERSONAL_TRAINING,
            max_participants=1,
        ),
    )


@pytest.fixture
def monday_window(db, trainer) -> AvailabilityWindow:
    return _save(
        db,
        AvailabilityWindow(
            trainer_id=trainer.id, weekday=0, start_time=time(9, 0), end_time=time(18, 0)
        ),
    )


def _member(db, email, role="member", trainer_id=None, first_name="Deniz"):
    return _save(
        db,
        Member(
            first_name=first_name,
            last_name="Yilmaz",
            email=email,
            role=role,
            trainer_id=trainer_id,
        ),
    )


@pytest.fixture
def member(db) -> Member:
    return _member(db, "deniz@member.test")


@pytest.fixture
def other_member(db) -> Member:
    return _member(db, "ece@member.test", first_name="Ece")


@pytest.fixture
def admin(db) -> Member:
    return _member(db, "admin@gym.test", role="admin", first_name="Admin")


@pytest.fixture
def trainer_user(db, trainer) -> Member:
    return _member(db, "ayse.login@gym.test", role="trainer", trainer_id=trainer.id, first_name="Ayse")


@pytest.fixture
def other_trainer_user(db, other_trainer) -> Member:
    return _member(
        db, "burak.login@gym.test", role="trainer", trainer_id=other_trainer.id, first_name="Burak"
    )


@pytest.fixture
def auth_headers():
    """Build a bearer header for a member"""

    def _headers(user: Member) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}

    return _headers


@pytest.fixture
def make_booking(db, trainer, service, member):
    """Insert a booking row directly, bypassing validation"""

    def _make(
        start: time,
        end: time,
        booking_date: date = NEXT_MONDAY,
        status: BookingStatus = BookingStatus.PENDING,
        owner: Member = None,
        price: Decimal = Decimal("200.00"),
        trainer_id: int = None,
    ) -> Booking:
        return _save(
            db,
            Booking(
                member_id=(owner or member).id,
                trainer_id=trainer_id or trainer.id,
                service_id=service.id,
                booking_date=booking_date,
                start_time=start,
                end_time=end,
                price=price,
                status=status,
                created_at=NOW,
            ),
        )

    return _make
