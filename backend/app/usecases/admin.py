from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from ..domain.policy import BookingPolicy
from ..domain.repositories import ReservationRepository
from ..domain.services import seat_usage
from ..models import Reservation


@dataclass
class HourOccupancy:
    occupied_seats: int
    available_seats: int
    reservations: List[Reservation] = field(default_factory=list)


@dataclass(frozen=True)
class DailySummary:
    day: date
    total_reservations: int
    total_guests: int
    hourly_occupancy: Dict[str, HourOccupancy]


def summarize_day(policy: BookingPolicy, day: date, reservations: List[Reservation]) -> DailySummary:
    """
    Hour-by-hour occupancy for the admin dashboard.

    ``occupied_seats`` is the busiest slot inside the hour; each reservation is listed
    under the hour in which it starts.
    """
    calendar = policy.calendar
    usage = seat_usage(calendar, reservations)
    per_hour = calendar.slots_per_hour()
    hourly: Dict[str, HourOccupancy] = {}
    for first in range(0, calendar.total_slots, per_hour):
        hour_slots = range(first, min(first + per_hour, calendar.total_slots))
        peak = max(usage.get(slot, 0) for slot in hour_slots)
        hourly[calendar.start_label(first)] = HourOccupancy(
            occupied_seats=peak,
            available_seats=policy.max_capacity - peak,
            reservations=[r for r in reservations if r.time_slot in hour_slots],
        )
    return DailySummary(
        day=day,
        total_reservations=len(reservations),
        total_guests=sum(r.party_size for r in reservations),
        hourly_occupancy=hourly,
    )


async def list_confirmed_reservations(
    res_repo: ReservationRepository,
    *,
    day: Optional[date] = None,
) -> List[Reservation]:
    return await res_repo.list_confirmed(day=day)


async def get_daily_summary(res_repo: ReservationRepository, policy: BookingPolicy, *, day: date) -> DailySummary:
    reservations = await res_repo.list_confirmed(day=day)
    return summarize_day(policy, day, reservations)
