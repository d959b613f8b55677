from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from ..config import Settings, get_settings
from ..deps import get_admin_subject, get_booking_policy, get_notifier, get_reservation_repo
from ..domain.errors import InvalidStatusTransitionError, ReservationNotFoundError
from ..domain.notifications import Notifier
from ..domain.policy import BookingPolicy
from ..infrastructure.repositories import SqlAlchemyReservationRepository
from ..schemas import (
    AdminDeleted,
    AdminLogin,
    AdminReservationList,
    AdminReservationRead,
    AdminToken,
    DailySummaryRead,
    ReservationRead,
    StatusUpdate,
)
from ..usecases import admin as admin_usecase
from ..usecases import reservations as reservation_usecase
from ..utils.auth import create_access_token, verify_admin_password

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/login", response_model=AdminToken)
async def login(payload: AdminLogin, settings: Settings = Depends(get_settings)) -> AdminToken:
    if not settings.admin_password:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="admin login not configured")
    if not verify_admin_password(payload.password, settings.admin_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid admin password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    token = create_access_token(
        subject="admin",
        secret=settings.auth_secret,
        algorithm=settings.auth_algorithm,
        expires_delta=timedelta(minutes=settings.admin_token_minutes),
    )
    return AdminToken(token=token)


@router.get("/reservations", response_model=AdminReservationList, dependencies=[Depends(get_admin_subject)])
async def list_reservations(
    day: Optional[date] = Query(default=None, alias="date"),
    res_repo: SqlAlchemyReservationRepository = Depends(get_reservation_repo),
    policy: BookingPolicy = Depends(get_booking_policy),
) -> AdminReservationList:
    rows = await admin_usecase.list_confirmed_reservations(res_repo, day=day)
    return AdminReservationList(
        reservations=[AdminReservationRead.from_reservation(reservation=r, calendar=policy.calendar) for r in rows],
        total_count=len(rows),
    )


@router.get("/summary", response_model=DailySummaryRead, dependencies=[Depends(get_admin_subject)])
async def daily_summary(
    day: date = Query(..., alias="date"),
    res_repo: SqlAlchemyReservationRepository = Depends(get_reservation_repo),
    policy: BookingPolicy = Depends(get_booking_policy),
) -> DailySummaryRead:
    summary = await admin_usecase.get_daily_summary(res_repo, policy, day=day)
    return DailySummaryRead.from_domain(summary=summary, calendar=policy.calendar)


@router.delete("/reservations/{reservation_id}", response_model=AdminDeleted, dependencies=[Depends(get_admin_subject)])
async def delete_reservation(
    reservation_id: str = Path(..., min_length=1),
    res_repo: SqlAlchemyReservationRepository = Depends(get_reservation_repo),
    notifier: Notifier = Depends(get_notifier),
) -> AdminDeleted:
    try:
        deleted = await reservation_usecase.delete_reservation(
            res_repo,
            notifier,
            reservation_id=reservation_id,
            initiator="admin",
        )
    except ReservationNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="reservation not found")
    return AdminDeleted(
        message="reservation deleted",
        sms=deleted.notification,
        reservation=ReservationRead.from_db(reservation=deleted.reservation),
    )


@router.patch(
    "/reservations/{reservation_id}/status",
    response_model=ReservationRead,
    dependencies=[Depends(get_admin_subject)],
)
async def update_status(
    payload: StatusUpdate,
    reservation_id: str = Path(..., min_length=1),
    res_repo: SqlAlchemyReservationRepository = Depends(get_reservation_repo),
) -> ReservationRead:
    try:
        updated = await reservation_usecase.update_status(res_repo, reservation_id=reservation_id, status=payload.status)
    except ReservationNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="reservation not found")
    except InvalidStatusTransitionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return ReservationRead.from_db(reservation=updated)
