import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .config import get_settings
from .database import create_tables
from .deps import get_session
from .domain.errors import StorageError
from .routers import admin, availability, reservations
from .utils.request_id import REQUEST_ID_HEADER, configure_logging, generate_request_id, set_request_id

configure_logging(get_settings().log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    if get_settings().auto_create_tables:
        logger.info("creating database tables")
        await create_tables()
    yield


app = FastAPI(title="Seat Reservation API", lifespan=lifespan)


async def request_id_middleware(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    request_id = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()
    set_request_id(request_id)
    try:
        response = await call_next(request)
    finally:
        set_request_id(None)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


app.middleware("http")(request_id_middleware)


async def storage_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("storage failure on %s %s", request.method, request.url.path, exc_info=exc)
    body = {"error": "server error", "message": "the request could not be completed"}
    if not get_settings().is_production:
        cause = exc.__cause__ or exc
        body["detail"] = f"{type(cause).__name__}: {cause}"
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)


app.add_exception_handler(StorageError, storage_error_handler)
app.add_exception_handler(SQLAlchemyError, storage_error_handler)


@app.get("/health")
async def health(session: AsyncSession = Depends(get_session)) -> JSONResponse:
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("database health check failed")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "error", "database": "disconnected"},
        )
    return JSONResponse(content={"status": "ok", "database": "connected"})


app.include_router(availability.router)
app.include_router(reservations.router)
app.include_router(admin.router)
