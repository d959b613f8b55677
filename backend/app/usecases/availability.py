from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, Iterator, List

from ..domain.errors import ReservationValidationError
from ..domain.policy import BookingPolicy
from ..domain.repositories import ReservationRepository
from ..domain.services import DatedSeatHolder, SeatHolder, seat_usage


@dataclass(frozen=True)
class AvailableSlot:
    slot: int
    time_label: str
    available_seats: int
    max_capacity: int


def compute_availability(policy: BookingPolicy, existing: Iterable[SeatHolder]) -> List[AvailableSlot]:
    """
    Bookable start slots for one date.

    A slot is offered only when a reservation starting there fits across its whole
    occupied range; the seats reported are the tightest slot in that range.
    Fully booked slots are omitted rather than reported with zero seats.
    """
    calendar = policy.calendar
    usage = seat_usage(calendar, existing)
    items: List[AvailableSlot] = []
    for slot in range(calendar.total_slots):
        peak = max((usage.get(s, 0) for s in calendar.occupied_slots(slot)), default=0)
        available = policy.max_capacity - peak
        if available <= 0:
            continue
        items.append(
            AvailableSlot(
                slot=slot,
                time_label=calendar.time_label(slot),
                available_seats=available,
                max_capacity=policy.max_capacity,
            )
        )
    return items


def iter_dates(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def compute_batch_availability(
    policy: BookingPolicy,
    start: date,
    end: date,
    reservations: Iterable[DatedSeatHolder],
) -> Dict[date, List[AvailableSlot]]:
    by_date: Dict[date, list[DatedSeatHolder]] = defaultdict(list)
    for reservation in reservations:
        by_date[reservation.date].append(reservation)
    return {day: compute_availability(policy, by_date.get(day, [])) for day in iter_dates(start, end)}


async def get_availability(
    res_repo: ReservationRepository,
    policy: BookingPolicy,
    *,
    day: date,
) -> List[AvailableSlot]:
    existing = await res_repo.list_confirmed_for_date(day)
    return compute_availability(policy, existing)


async def get_batch_availability(
    res_repo: ReservationRepository,
    policy: BookingPolicy,
    *,
    start: date,
    end: date,
    max_days: int,
) -> Dict[date, List[AvailableSlot]]:
    if start > end:
        raise ReservationValidationError(["startDate must not be after endDate"])
    if (end - start).days + 1 > max_days:
        raise ReservationValidationError([f"date range must not exceed {max_days} days"])
    reservations = await res_repo.list_confirmed_between(start, end)
    return compute_batch_availability(policy, start, end, reservations)
