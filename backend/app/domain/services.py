from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Iterable, Protocol

from ..models import ReservationStatus
from .calendar import SlotCalendar
from .errors import CapacityConflict


class SeatHolder(Protocol):
    time_slot: int
    party_size: int
    status: ReservationStatus


class DatedSeatHolder(SeatHolder, Protocol):
    date: date


def seat_usage(calendar: SlotCalendar, existing: Iterable[SeatHolder]) -> dict[int, int]:
    """Seats taken per slot by CONFIRMED reservations, using each one's occupied-slot set."""
    usage: dict[int, int] = defaultdict(int)
    for reservation in existing:
        if reservation.status != ReservationStatus.CONFIRMED:
            continue
        for slot in calendar.occupied_slots(reservation.time_slot):
            usage[slot] += reservation.party_size
    return dict(usage)


def check_capacity(
    calendar: SlotCalendar,
    occupied: Iterable[int],
    *,
    party_size: int,
    existing: Iterable[SeatHolder],
    max_capacity: int,
) -> CapacityConflict | None:
    """
    Pure capacity check: slots are examined in ascending order and the first one that
    cannot seat ``party_size`` on top of the existing bookings is reported.
    Returns None when every occupied slot has room.
    """
    usage = seat_usage(calendar, existing)
    for slot in sorted(occupied):
        used = usage.get(slot, 0)
        if used + party_size > max_capacity:
            return CapacityConflict(
                slot=slot,
                available_seats=max_capacity - used,
                time_label=calendar.start_label(slot),
            )
    return None
