import logging
from dataclasses import dataclass
from datetime import date
from typing import Awaitable, Callable, List, Optional

from ..domain.errors import (
    CapacityConflictError,
    InvalidStatusTransitionError,
    PhoneRequiredError,
    ReservationNotFoundError,
    ReservationValidationError,
)
from ..domain.notifications import NotificationResult, NotificationStatus, Notifier
from ..domain.policy import BookingPolicy
from ..domain.repositories import ReservationRepository
from ..domain.services import check_capacity
from ..models import Reservation, ReservationStatus
from ..utils.audit_log import AuditInitiator, emit_audit_log

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset(
    {ReservationStatus.CANCELLED, ReservationStatus.NO_SHOW, ReservationStatus.COMPLETED}
)


@dataclass(frozen=True)
class CreatedReservation:
    reservation: Reservation
    notification: NotificationStatus


@dataclass(frozen=True)
class DeletedReservation:
    reservation: Reservation
    notification: NotificationStatus


def validate_request(policy: BookingPolicy, *, day: date, time_slot: int, party_size: int) -> None:
    """Range checks against the booking policy; raises before any storage access."""
    calendar = policy.calendar
    details: list[str] = []
    if not policy.accepts_date(day):
        details.append(f"date must be {policy.describe_window()}")
    if not calendar.is_valid_slot(time_slot):
        details.append(
            f"timeSlot must be between 0 ({calendar.start_label(0, wrap=False)}) "
            f"and {calendar.max_slot} ({calendar.start_label(calendar.max_slot, wrap=False)})"
        )
    if not 1 <= party_size <= policy.max_capacity:
        details.append(f"partySize must be between 1 and {policy.max_capacity}")
    if details:
        raise ReservationValidationError(details)


async def _notify(
    send: Callable[[str, Reservation], Awaitable[NotificationResult]],
    reservation: Reservation,
) -> NotificationStatus:
    if not reservation.phone:
        return NotificationStatus.SKIPPED
    try:
        result = await send(reservation.phone, reservation)
    except Exception:
        logger.exception("notification failed for reservation %s", reservation.id)
        return NotificationStatus.FAILED
    if not result.success:
        logger.warning("notification failed for reservation %s: %s", reservation.id, result.error)
        return NotificationStatus.FAILED
    return NotificationStatus.SENT


async def create_reservation(
    res_repo: ReservationRepository,
    notifier: Notifier,
    policy: BookingPolicy,
    *,
    day: date,
    time_slot: int,
    party_size: int,
    name: str,
    phone: Optional[str] = None,
    email: Optional[str] = None,
    notes: Optional[str] = None,
) -> CreatedReservation:
    validate_request(policy, day=day, time_slot=time_slot, party_size=party_size)
    occupied = policy.calendar.occupied_slots(time_slot)

    async with res_repo.transaction():
        await res_repo.lock_date(day)
        existing = await res_repo.list_confirmed_for_date(day, for_update=True)
        conflict = check_capacity(
            policy.calendar,
            occupied,
            party_size=party_size,
            existing=existing,
            max_capacity=policy.max_capacity,
        )
        if conflict is not None:
            raise CapacityConflictError(conflict)
        reservation = await res_repo.create(
            day=day,
            time_slot=time_slot,
            party_size=party_size,
            name=name,
            phone=phone,
            email=email,
            notes=notes,
            status=ReservationStatus.CONFIRMED,
        )

    emit_audit_log(
        action="reservation.created",
        initiator="customer",
        reservation_id=reservation.id,
        reservation_date=reservation.date,
        time_slot=reservation.time_slot,
        party_size=reservation.party_size,
        status_from=None,
        status_to=reservation.status,
    )
    notification = await _notify(notifier.send_confirmation, reservation)
    return CreatedReservation(reservation=reservation, notification=notification)


async def delete_reservation(
    res_repo: ReservationRepository,
    notifier: Notifier,
    *,
    reservation_id: str,
    initiator: AuditInitiator = "customer",
) -> DeletedReservation:
    async with res_repo.transaction():
        reservation = await res_repo.get(reservation_id, for_update=True)
        if reservation is None:
            raise ReservationNotFoundError("reservation not found")
        await res_repo.delete(reservation)

    emit_audit_log(
        action="reservation.cancelled",
        initiator=initiator,
        reservation_id=reservation.id,
        reservation_date=reservation.date,
        time_slot=reservation.time_slot,
        party_size=reservation.party_size,
        status_from=reservation.status,
        status_to=None,
        message="deleted",
    )
    notification = await _notify(notifier.send_cancellation, reservation)
    return DeletedReservation(reservation=reservation, notification=notification)


async def list_reservations(
    res_repo: ReservationRepository,
    *,
    phone: Optional[str],
    day: Optional[date] = None,
    status: Optional[ReservationStatus] = None,
) -> List[Reservation]:
    if not phone:
        raise PhoneRequiredError("phone number is required to look up reservations")
    return await res_repo.list_by_phone(phone, day=day, status=status)


async def get_reservation(res_repo: ReservationRepository, *, reservation_id: str) -> Reservation:
    reservation = await res_repo.get(reservation_id)
    if reservation is None:
        raise ReservationNotFoundError("reservation not found")
    return reservation


async def update_status(
    res_repo: ReservationRepository,
    *,
    reservation_id: str,
    status: ReservationStatus,
) -> Reservation:
    async with res_repo.transaction():
        reservation = await res_repo.get(reservation_id, for_update=True)
        if reservation is None:
            raise ReservationNotFoundError("reservation not found")
        previous = reservation.status
        if previous != ReservationStatus.CONFIRMED or status not in TERMINAL_STATUSES:
            raise InvalidStatusTransitionError(f"cannot change status from {previous} to {status}")
        updated = await res_repo.update_status(reservation, status)

    emit_audit_log(
        action="reservation.status_changed",
        initiator="admin",
        reservation_id=updated.id,
        reservation_date=updated.date,
        time_slot=updated.time_slot,
        party_size=updated.party_size,
        status_from=previous,
        status_to=updated.status,
    )
    return updated
