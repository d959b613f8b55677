import logging
from typing import Iterator

import pytest
from app.config import get_settings
from app.deps import get_notifier
from app.infrastructure.sms import TwilioSmsNotifier


@pytest.fixture(autouse=True)
def _fresh_caches() -> Iterator[None]:
    get_settings.cache_clear()
    get_notifier.cache_clear()
    yield
    get_settings.cache_clear()
    get_notifier.cache_clear()


def test_disabled_notifier_is_built_once(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="app.infrastructure.sms")

    first = get_notifier()
    second = get_notifier()

    assert first is second
    assert isinstance(first, TwilioSmsNotifier)
    assert first.enabled is False
    disabled = [r for r in caplog.records if "SMS notifications disabled" in r.getMessage()]
    assert len(disabled) == 1


def test_configured_notifier_reuses_twilio_client(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TWILIO_ACCOUNT_SID", "AC123")
    monkeypatch.setenv("TWILIO_AUTH_TOKEN", "token")
    monkeypatch.setenv("TWILIO_PHONE_NUMBER", "+15550001111")

    notifier = get_notifier()

    assert isinstance(notifier, TwilioSmsNotifier)
    assert notifier.enabled is True
    assert notifier.from_number == "+15550001111"
    assert get_notifier().client is notifier.client
