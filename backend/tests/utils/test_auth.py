from datetime import timedelta

import pytest
from app.config import Settings
from app.deps import get_admin_subject
from app.utils.auth import create_access_token, decode_access_token, verify_admin_password
from fastapi import HTTPException

SETTINGS = Settings(auth_secret="testsecret")


def _token(subject: str = "admin", *, secret: str = "testsecret", expired: bool = False) -> str:
    delta = timedelta(seconds=-1) if expired else timedelta(minutes=30)
    return create_access_token(subject=subject, secret=secret, expires_delta=delta)


def test_verify_admin_password() -> None:
    assert verify_admin_password("hunter2", "hunter2") is True
    assert verify_admin_password("hunter3", "hunter2") is False
    assert verify_admin_password(None, "hunter2") is False
    assert verify_admin_password("anything", "") is False


def test_token_round_trip_returns_subject() -> None:
    assert decode_access_token(_token(), secret="testsecret", algorithms=["HS256"]) == "admin"


@pytest.mark.parametrize(
    "token",
    [_token(expired=True), _token(secret="othersecret"), "not-a-jwt"],
)
def test_decode_rejects_bad_tokens(token: str) -> None:
    with pytest.raises(ValueError):
        decode_access_token(token, secret="testsecret", algorithms=["HS256"])


@pytest.mark.asyncio
async def test_admin_subject_accepts_valid_token() -> None:
    result = await get_admin_subject(authorization=f"Bearer {_token()}", settings=SETTINGS)
    assert result == "admin"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "authorization",
    [None, "Basic abc", "Bearer", "Bearer invalid", f"Bearer {_token(expired=True)}", f"Bearer {_token('guest')}"],
)
async def test_admin_subject_rejects(authorization: str | None) -> None:
    with pytest.raises(HTTPException) as excinfo:
        await get_admin_subject(authorization=authorization, settings=SETTINGS)
    assert excinfo.value.status_code == 401
    assert excinfo.value.headers == {"WWW-Authenticate": "Bearer"}
