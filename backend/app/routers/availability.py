import hashlib
import json
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Response, status
from fastapi.responses import JSONResponse

from ..config import Settings, get_settings
from ..deps import get_booking_policy, get_reservation_repo
from ..domain.errors import ReservationValidationError
from ..domain.policy import BookingPolicy
from ..infrastructure.repositories import SqlAlchemyReservationRepository
from ..schemas import BatchAvailability, DayAvailability
from ..usecases import availability as availability_usecase

router = APIRouter(prefix="/reservations/availability", tags=["availability"])


def content_fingerprint(body: dict) -> str:
    canonical = json.dumps(body, sort_keys=True, separators=(",", ":"), ensure_ascii=True)
    return '"' + hashlib.sha256(canonical.encode("ascii")).hexdigest() + '"'


def etag_matches(if_none_match: Optional[str], etag: str) -> bool:
    """Weak comparison per RFC 9110: ``*`` matches any current body and ``W/`` prefixes are ignored."""
    if if_none_match is None:
        return False
    candidates = [tag.strip() for tag in if_none_match.split(",")]
    if "*" in candidates:
        return True
    return any(tag.removeprefix("W/") == etag for tag in candidates)


@router.get("/batch", response_model=BatchAvailability)
async def get_batch_availability(
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    if_none_match: Optional[str] = Header(default=None),
    res_repo: SqlAlchemyReservationRepository = Depends(get_reservation_repo),
    policy: BookingPolicy = Depends(get_booking_policy),
    settings: Settings = Depends(get_settings),
) -> Response:
    try:
        per_date = await availability_usecase.get_batch_availability(
            res_repo,
            policy,
            start=start_date,
            end=end_date,
            max_days=settings.batch_max_days,
        )
    except ReservationValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "parameter error", "details": exc.details},
        )

    batch = BatchAvailability(
        start_date=start_date,
        end_date=end_date,
        availability={
            day.isoformat(): DayAvailability.from_domain(day=day, items=items) for day, items in per_date.items()
        },
    )
    body = batch.model_dump(mode="json", by_alias=True)
    etag = content_fingerprint(body)
    headers = {
        "Cache-Control": f"public, max-age={settings.availability_cache_seconds}",
        "ETag": etag,
    }
    if etag_matches(if_none_match, etag):
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers=headers)
    return JSONResponse(content=body, headers=headers)


@router.get("/{day}", response_model=DayAvailability)
async def get_availability(
    day: date,
    res_repo: SqlAlchemyReservationRepository = Depends(get_reservation_repo),
    policy: BookingPolicy = Depends(get_booking_policy),
) -> DayAvailability:
    items = await availability_usecase.get_availability(res_repo, policy, day=day)
    return DayAvailability.from_domain(day=day, items=items)
