from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from twilio.base.exceptions import TwilioException
from twilio.rest import Client as TwilioClient

from ..domain.calendar import SlotCalendar
from ..domain.notifications import NotificationResult
from ..models import Reservation

logger = logging.getLogger(__name__)


class TwilioSmsNotifier:
    """
    Sends reservation SMS through Twilio.
    Without an account SID and auth token the notifier is disabled: it logs and reports success.
    """

    def __init__(
        self,
        *,
        account_sid: str,
        auth_token: str,
        from_number: str,
        calendar: SlotCalendar,
        client: Optional[Any] = None,
    ) -> None:
        self.from_number = from_number
        self.calendar = calendar
        self.enabled = bool(account_sid and auth_token)
        self.client = client
        if self.enabled and self.client is None:
            self.client = TwilioClient(account_sid, auth_token)
        if not self.enabled:
            logger.info("SMS notifications disabled (Twilio credentials not configured)")

    def _summary(self, reservation: Reservation) -> str:
        time_range = self.calendar.time_label(reservation.time_slot)
        return f"Date: {reservation.date.isoformat()}\nTime: {time_range} JST\n"

    def confirmation_body(self, reservation: Reservation) -> str:
        return (
            "[Sushi Reservation] Your reservation is confirmed!\n"
            + self._summary(reservation)
            + f"Party: {reservation.party_size} people\n"
            f"Name: {reservation.name}\n"
            f"ID: {reservation.id}\n\n"
            "Thank you for choosing us!"
        )

    def cancellation_body(self, reservation: Reservation) -> str:
        return (
            "[Sushi Reservation] Your reservation has been cancelled.\n"
            + self._summary(reservation)
            + f"Name: {reservation.name}\n"
            f"ID: {reservation.id}\n\n"
            "We hope to see you again soon!"
        )

    async def send_confirmation(self, phone: str, reservation: Reservation) -> NotificationResult:
        return await self._send(phone, self.confirmation_body(reservation))

    async def send_cancellation(self, phone: str, reservation: Reservation) -> NotificationResult:
        return await self._send(phone, self.cancellation_body(reservation))

    async def _send(self, phone: str, body: str) -> NotificationResult:
        if not self.enabled:
            logger.info("skipping SMS to %s (Twilio not configured)", phone)
            return NotificationResult(success=True, message_id="disabled")
        try:
            message = await asyncio.to_thread(
                self.client.messages.create,  # type: ignore[union-attr]
                body=body,
                from_=self.from_number,
                to=phone,
            )
        except TwilioException as exc:
            logger.error("SMS send error: %s", exc)
            return NotificationResult(success=False, error=str(exc))
        return NotificationResult(success=True, message_id=message.sid)
