from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .domain.calendar import SlotCalendar
from .domain.notifications import NotificationStatus
from .models import Reservation, ReservationStatus
from .usecases.admin import DailySummary
from .usecases.availability import AvailableSlot

PHONE_PATTERN = r"^(0\d{1,4}-\d{1,4}-\d{4}|0\d{10}|\+?[1-9]\d{1,14})$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReservationCreate(CamelModel):
    date: date
    time_slot: int
    party_size: int
    name: str = Field(min_length=2, max_length=100)
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    email: Optional[str] = Field(default=None, max_length=255, pattern=EMAIL_PATTERN)
    notes: Optional[str] = Field(default=None, max_length=500)


class ReservationRead(CamelModel):
    id: str
    date: date
    time_slot: int
    party_size: int
    name: str
    phone: Optional[str]
    email: Optional[str]
    notes: Optional[str]
    status: ReservationStatus
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_db(cls, *, reservation: Reservation) -> "ReservationRead":
        return cls(
            id=reservation.id,
            date=reservation.date,
            time_slot=reservation.time_slot,
            party_size=reservation.party_size,
            name=reservation.name,
            phone=reservation.phone,
            email=reservation.email,
            notes=reservation.notes,
            status=reservation.status,
            created_at=reservation.created_at,
            updated_at=reservation.updated_at,
        )


class ReservationCreated(CamelModel):
    reservation: ReservationRead
    sms: NotificationStatus


class CapacityConflictBody(CamelModel):
    error: str
    message: str
    slot: int
    time: str
    available_seats: int


class SlotAvailabilityRead(CamelModel):
    slot: int
    time: str
    available_seats: int
    max_capacity: int

    @classmethod
    def from_domain(cls, item: AvailableSlot) -> "SlotAvailabilityRead":
        return cls(
            slot=item.slot,
            time=item.time_label,
            available_seats=item.available_seats,
            max_capacity=item.max_capacity,
        )


class DayAvailability(CamelModel):
    date: date
    available_slots: List[SlotAvailabilityRead]

    @classmethod
    def from_domain(cls, *, day: date, items: List[AvailableSlot]) -> "DayAvailability":
        return cls(date=day, available_slots=[SlotAvailabilityRead.from_domain(i) for i in items])


class BatchAvailability(CamelModel):
    start_date: date
    end_date: date
    availability: Dict[str, DayAvailability]


class AdminLogin(BaseModel):
    password: str


class AdminToken(BaseModel):
    token: str
    token_type: str = "bearer"


class AdminReservationRead(ReservationRead):
    start_time: str
    end_time: str

    @classmethod
    def from_reservation(cls, *, reservation: Reservation, calendar: SlotCalendar) -> "AdminReservationRead":
        base = ReservationRead.from_db(reservation=reservation)
        return cls(
            **base.model_dump(),
            start_time=calendar.start_label(reservation.time_slot),
            end_time=calendar.end_label(reservation.time_slot),
        )


class AdminReservationList(CamelModel):
    reservations: List[AdminReservationRead]
    total_count: int


class AdminDeleted(CamelModel):
    message: str
    sms: NotificationStatus
    reservation: ReservationRead


class StatusUpdate(CamelModel):
    status: ReservationStatus


class HourOccupancyRead(CamelModel):
    occupied_seats: int
    available_seats: int
    reservations: List[AdminReservationRead]


class DailySummaryRead(CamelModel):
    date: date
    total_reservations: int
    total_guests: int
    hourly_occupancy: Dict[str, HourOccupancyRead]

    @classmethod
    def from_domain(cls, *, summary: DailySummary, calendar: SlotCalendar) -> "DailySummaryRead":
        return cls(
            date=summary.day,
            total_reservations=summary.total_reservations,
            total_guests=summary.total_guests,
            hourly_occupancy={
                label: HourOccupancyRead(
                    occupied_seats=hour.occupied_seats,
                    available_seats=hour.available_seats,
                    reservations=[
                        AdminReservationRead.from_reservation(reservation=r, calendar=calendar)
                        for r in hour.reservations
                    ],
                )
                for label, hour in summary.hourly_occupancy.items()
            },
        )
