import os

# The engine in app.database is built at import time; keep tests off the MySQL default.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUTH_SECRET", "testsecret")
os.environ.pop("TWILIO_ACCOUNT_SID", None)
os.environ.pop("TWILIO_AUTH_TOKEN", None)

from datetime import date  # noqa: E402

import pytest  # noqa: E402
from app.domain.calendar import SlotCalendar  # noqa: E402
from app.domain.policy import BookingPolicy  # noqa: E402
from fakes import FakeNotifier, FakeReservationRepository, InMemoryReservationDatabase  # noqa: E402


@pytest.fixture
def booking_day() -> date:
    return date(2025, 6, 25)


@pytest.fixture
def calendar() -> SlotCalendar:
    return SlotCalendar()


@pytest.fixture
def policy(calendar: SlotCalendar) -> BookingPolicy:
    return BookingPolicy(
        calendar=calendar,
        max_capacity=6,
        date_window_start=date(2025, 6, 20),
        date_window_end=date(2025, 7, 4),
    )


@pytest.fixture
def database() -> InMemoryReservationDatabase:
    return InMemoryReservationDatabase()


@pytest.fixture
def repo(database: InMemoryReservationDatabase) -> FakeReservationRepository:
    return FakeReservationRepository(database)


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()
