from dataclasses import dataclass, field
from datetime import date

from .calendar import SlotCalendar


@dataclass(frozen=True)
class BookingPolicy:
    """Read-only booking parameters handed to the core for one request."""

    calendar: SlotCalendar = field(default_factory=SlotCalendar)
    max_capacity: int = 6
    date_window_start: date | None = None
    date_window_end: date | None = None

    def accepts_date(self, day: date) -> bool:
        if self.date_window_start is not None and day < self.date_window_start:
            return False
        if self.date_window_end is not None and day > self.date_window_end:
            return False
        return True

    def describe_window(self) -> str:
        if self.date_window_start is not None and self.date_window_end is not None:
            return f"between {self.date_window_start} and {self.date_window_end}"
        if self.date_window_start is not None:
            return f"on or after {self.date_window_start}"
        return f"on or before {self.date_window_end}"
