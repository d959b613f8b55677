from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status

from ..deps import get_booking_policy, get_notifier, get_reservation_repo
from ..domain.errors import (
    CapacityConflictError,
    PhoneRequiredError,
    ReservationNotFoundError,
    ReservationValidationError,
)
from ..domain.notifications import Notifier
from ..domain.policy import BookingPolicy
from ..infrastructure.repositories import SqlAlchemyReservationRepository
from ..models import ReservationStatus
from ..schemas import CapacityConflictBody, ReservationCreate, ReservationCreated, ReservationRead
from ..usecases import reservations as reservation_usecase

router = APIRouter(prefix="/reservations", tags=["reservations"])


def validation_exception(exc: ReservationValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": "validation error", "details": exc.details},
    )


def capacity_exception(exc: CapacityConflictError) -> HTTPException:
    body = CapacityConflictBody(
        error="insufficient seats",
        message=str(exc),
        slot=exc.conflict.slot,
        time=exc.conflict.time_label,
        available_seats=exc.conflict.available_seats,
    )
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=body.model_dump(by_alias=True))


@router.post("", response_model=ReservationCreated, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    payload: ReservationCreate,
    res_repo: SqlAlchemyReservationRepository = Depends(get_reservation_repo),
    notifier: Notifier = Depends(get_notifier),
    policy: BookingPolicy = Depends(get_booking_policy),
) -> ReservationCreated:
    try:
        created = await reservation_usecase.create_reservation(
            res_repo,
            notifier,
            policy,
            day=payload.date,
            time_slot=payload.time_slot,
            party_size=payload.party_size,
            name=payload.name,
            phone=payload.phone,
            email=payload.email,
            notes=payload.notes,
        )
    except ReservationValidationError as exc:
        raise validation_exception(exc)
    except CapacityConflictError as exc:
        raise capacity_exception(exc)

    return ReservationCreated(
        reservation=ReservationRead.from_db(reservation=created.reservation),
        sms=created.notification,
    )


@router.get("", response_model=List[ReservationRead])
async def list_reservations(
    phone: Optional[str] = Query(default=None),
    day: Optional[date] = Query(default=None, alias="date"),
    status_filter: Optional[ReservationStatus] = Query(default=None, alias="status"),
    res_repo: SqlAlchemyReservationRepository = Depends(get_reservation_repo),
) -> list[ReservationRead]:
    try:
        rows = await reservation_usecase.list_reservations(res_repo, phone=phone, day=day, status=status_filter)
    except PhoneRequiredError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="phone number is required")
    return [ReservationRead.from_db(reservation=row) for row in rows]


@router.get("/{reservation_id}", response_model=ReservationRead)
async def get_reservation(
    reservation_id: str = Path(..., min_length=1),
    res_repo: SqlAlchemyReservationRepository = Depends(get_reservation_repo),
) -> ReservationRead:
    try:
        reservation = await reservation_usecase.get_reservation(res_repo, reservation_id=reservation_id)
    except ReservationNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="reservation not found")
    return ReservationRead.from_db(reservation=reservation)


@router.delete("/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reservation(
    reservation_id: str = Path(..., min_length=1),
    res_repo: SqlAlchemyReservationRepository = Depends(get_reservation_repo),
    notifier: Notifier = Depends(get_notifier),
) -> Response:
    try:
        await reservation_usecase.delete_reservation(res_repo, notifier, reservation_id=reservation_id)
    except ReservationNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="reservation not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
