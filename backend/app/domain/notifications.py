from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Optional, Protocol

from ..models import Reservation


class NotificationStatus(StrEnum):
    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class NotificationResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class Notifier(Protocol):
    async def send_confirmation(self, phone: str, reservation: Reservation) -> NotificationResult: ...

    async def send_cancellation(self, phone: str, reservation: Reservation) -> NotificationResult: ...
