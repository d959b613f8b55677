from __future__ import annotations

from datetime import date
from typing import AsyncContextManager, Protocol

from ..models import Reservation, ReservationStatus


class ReservationRepository(Protocol):
    def transaction(self) -> AsyncContextManager[None]:
        """Atomic unit of work: commits on normal exit, rolls back when the block raises."""
        ...

    async def lock_date(self, day: date) -> None:
        """Serialize writers for ``day`` until the current transaction ends."""
        ...

    async def list_confirmed_for_date(self, day: date, *, for_update: bool = False) -> list[Reservation]: ...

    async def list_confirmed_between(self, start: date, end: date) -> list[Reservation]: ...

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
    ) -> Reservation: ...

    async def get(self, reservation_id: str, *, for_update: bool = False) -> Reservation | None: ...

    async def delete(self, reservation: Reservation) -> None: ...

    async def list_by_phone(
        self,
        phone: str,
        *,
        day: date | None = None,
        status: ReservationStatus | None = None,
    ) -> list[Reservation]: ...

    async def list_confirmed(self, *, day: date | None = None) -> list[Reservation]: ...

    async def update_status(self, reservation: Reservation, status: ReservationStatus) -> Reservation: ...
