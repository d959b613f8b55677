import asyncio
import uuid
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from typing import AsyncIterator, Optional

from app.domain.notifications import NotificationResult
from app.models import Reservation, ReservationStatus


def _utc_now_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def make_reservation(
    *,
    day: date,
    time_slot: int,
    party_size: int,
    status: ReservationStatus = ReservationStatus.CONFIRMED,
    name: str = "Test Customer",
    phone: Optional[str] = "+819012345678",
) -> Reservation:
    now = _utc_now_naive()
    return Reservation(
        id=str(uuid.uuid4()),
        date=day,
        time_slot=time_slot,
        party_size=party_size,
        name=name,
        phone=phone,
        email=None,
        notes=None,
        status=status,
        created_at=now,
        updated_at=now,
    )


class InMemoryReservationDatabase:
    """Committed state shared by every fake repository, like one database behind many sessions."""

    def __init__(self) -> None:
        self.rows: dict[str, Reservation] = {}
        self._date_locks: dict[date, asyncio.Lock] = {}

    def lock_for(self, day: date) -> asyncio.Lock:
        return self._date_locks.setdefault(day, asyncio.Lock())

    def add(self, reservation: Reservation) -> Reservation:
        self.rows[reservation.id] = reservation
        return reservation


class FakeReservationRepository:
    """
    Per-request repository over InMemoryReservationDatabase.
    Writes are staged and only become visible when the transaction block exits cleanly.
    Reads yield to the event loop so unserialized writers would interleave.
    """

    def __init__(self, db: InMemoryReservationDatabase, *, use_date_lock: bool = True) -> None:
        self.db = db
        self.use_date_lock = use_date_lock
        self.calls: list[str] = []
        self._held: list[asyncio.Lock] = []
        self._staged_adds: list[Reservation] = []
        self._staged_deletes: list[str] = []
        self._staged_status: list[tuple[Reservation, ReservationStatus]] = []

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        self.calls.append("transaction")
        try:
            yield
        except BaseException:
            self.calls.append("rollback")
            raise
        else:
            for reservation in self._staged_adds:
                self.db.add(reservation)
            for reservation_id in self._staged_deletes:
                self.db.rows.pop(reservation_id, None)
            for reservation, status in self._staged_status:
                reservation.status = status
                reservation.updated_at = _utc_now_naive()
            self.calls.append("commit")
        finally:
            self._staged_adds.clear()
            self._staged_deletes.clear()
            self._staged_status.clear()
            while self._held:
                self._held.pop().release()

    async def lock_date(self, day: date) -> None:
        self.calls.append("lock_date")
        if not self.use_date_lock:
            return
        lock = self.db.lock_for(day)
        await lock.acquire()
        self._held.append(lock)

    async def list_confirmed_for_date(self, day: date, *, for_update: bool = False) -> list[Reservation]:
        self.calls.append("list_confirmed_for_date")
        snapshot = [
            r for r in self.db.rows.values() if r.date == day and r.status == ReservationStatus.CONFIRMED
        ]
        await asyncio.sleep(0)
        return snapshot

    async def list_confirmed_between(self, start: date, end: date) -> list[Reservation]:
        self.calls.append("list_confirmed_between")
        return [
            r
            for r in self.db.rows.values()
            if start <= r.date <= end and r.status == ReservationStatus.CONFIRMED
        ]

    async def create(
        self,
        *,
        day: date,
        time_slot: int,
        party_size: int,
        name: str,
        phone: str | None,
        email: str | None,
        notes: str | None,
        status: ReservationStatus,
    ) -> Reservation:
        self.calls.append("create")
        reservation = make_reservation(
            day=day, time_slot=time_slot, party_size=party_size, status=status, name=name, phone=phone
        )
        reservation.email = email
        reservation.notes = notes
        self._staged_adds.append(reservation)
        return reservation

    async def get(self, reservation_id: str, *, for_update: bool = False) -> Reservation | None:
        self.calls.append("get")
        return self.db.rows.get(reservation_id)

    async def delete(self, reservation: Reservation) -> None:
        self.calls.append("delete")
        self._staged_deletes.append(reservation.id)

    async def list_by_phone(
        self,
        phone: str,
        *,
        day: date | None = None,
        status: ReservationStatus | None = None,
    ) -> list[Reservation]:
        self.calls.append("list_by_phone")
        rows = [
            r
            for r in self.db.rows.values()
            if r.phone == phone and (day is None or r.date == day) and (status is None or r.status == status)
        ]
        return sorted(rows, key=lambda r: (r.date, r.time_slot))

    async def list_confirmed(self, *, day: date | None = None) -> list[Reservation]:
        self.calls.append("list_confirmed")
        rows = [
            r
            for r in self.db.rows.values()
            if r.status == ReservationStatus.CONFIRMED and (day is None or r.date == day)
        ]
        return sorted(rows, key=lambda r: (r.date, r.time_slot))

    async def update_status(self, reservation: Reservation, status: ReservationStatus) -> Reservation:
        self.calls.append("update_status")
        self._staged_status.append((reservation, status))
        return reservation


class FakeNotifier:
    def __init__(self, *, result: Optional[NotificationResult] = None, error: Optional[Exception] = None) -> None:
        self.result = result or NotificationResult(success=True, message_id="SM123")
        self.error = error
        self.confirmations: list[tuple[str, Reservation]] = []
        self.cancellations: list[tuple[str, Reservation]] = []

    async def send_confirmation(self, phone: str, reservation: Reservation) -> NotificationResult:
        self.confirmations.append((phone, reservation))
        if self.error is not None:
            raise self.error
        return self.result

    async def send_cancellation(self, phone: str, reservation: Reservation) -> NotificationResult:
        self.cancellations.append((phone, reservation))
        if self.error is not None:
            raise self.error
        return self.result
