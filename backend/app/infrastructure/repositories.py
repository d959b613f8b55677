from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from typing import AsyncIterator, List, Optional

from sqlalchemy import Insert, Select, select
from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.errors import DomainError, StorageError
from ..domain.repositories import ReservationRepository
from ..models import Reservation, ReservationDay, ReservationStatus


def _utc_now_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def upsert_reservation_day(dialect: str, day: date) -> Insert:
    """
    Insert the per-date lock row, or touch it when it already exists.

    Either way the statement leaves this transaction holding the row's exclusive
    lock, so concurrent first bookings for a date queue on the row instead of on
    gap locks.
    """
    values = {"date": day, "created_at": _utc_now_naive()}
    if dialect == "mysql":
        return mysql_insert(ReservationDay).values(**values).on_duplicate_key_update(date=ReservationDay.date)
    if dialect == "sqlite":
        return sqlite_insert(ReservationDay).values(**values).on_conflict_do_nothing(index_elements=["date"])
    raise StorageError(f"unsupported database dialect: {dialect}")


class SqlAlchemyReservationRepository(ReservationRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        try:
            async with self.session.begin():
                yield
        except DomainError:
            raise
        except SQLAlchemyError as exc:
            raise StorageError("reservation store failure") from exc

    async def lock_date(self, day: date) -> None:
        dialect = self.session.get_bind().dialect.name
        await self.session.execute(upsert_reservation_day(dialect, day))
        await self.session.scalar(select(ReservationDay).where(ReservationDay.date == day).with_for_update())

    async def list_confirmed_for_date(self, day: date, *, for_update: bool = False) -> List[Reservation]:
        stmt: Select[tuple[Reservation]] = select(Reservation).where(
            Reservation.date == day,
            Reservation.status == ReservationStatus.CONFIRMED,
        )
        if for_update:
            stmt = stmt.with_for_update()
        rows = await self.session.scalars(stmt)
        return list(rows.all())

    async def list_confirmed_between(self, start: date, end: date) -> List[Reservation]:
        stmt = select(Reservation).where(
            Reservation.date >= start,
            Reservation.date <= end,
            Reservation.status == ReservationStatus.CONFIRMED,
        )
        rows = await self.session.scalars(stmt)
        return list(rows.all())

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
        now = _utc_now_naive()
        reservation = Reservation(
            date=day,
            time_slot=time_slot,
            party_size=party_size,
            name=name,
            phone=phone,
            email=email,
            notes=notes,
            status=status,
            created_at=now,
            updated_at=now,
        )
        self.session.add(reservation)
        await self.session.flush()
        return reservation

    async def get(self, reservation_id: str, *, for_update: bool = False) -> Optional[Reservation]:
        stmt = select(Reservation).where(Reservation.id == reservation_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.scalar(stmt)
        return result if isinstance(result, Reservation) else None

    async def delete(self, reservation: Reservation) -> None:
        await self.session.delete(reservation)
        await self.session.flush()

    async def list_by_phone(
        self,
        phone: str,
        *,
        day: date | None = None,
        status: ReservationStatus | None = None,
    ) -> List[Reservation]:
        stmt = select(Reservation).where(Reservation.phone == phone)
        if day is not None:
            stmt = stmt.where(Reservation.date == day)
        if status is not None:
            stmt = stmt.where(Reservation.status == status)
        stmt = stmt.order_by(Reservation.date, Reservation.time_slot)
        rows = await self.session.scalars(stmt)
        return list(rows.all())

    async def list_confirmed(self, *, day: date | None = None) -> List[Reservation]:
        stmt = select(Reservation).where(Reservation.status == ReservationStatus.CONFIRMED)
        if day is not None:
            stmt = stmt.where(Reservation.date == day)
        stmt = stmt.order_by(Reservation.date, Reservation.time_slot)
        rows = await self.session.scalars(stmt)
        return list(rows.all())

    async def update_status(self, reservation: Reservation, status: ReservationStatus) -> Reservation:
        reservation.status = status
        reservation.updated_at = _utc_now_naive()
        self.session.add(reservation)
        await self.session.flush()
        return reservation
