from dataclasses import dataclass


@dataclass(frozen=True)
class SlotCalendar:
    """
    Maps slot indices onto the bookable day.

    Slot 0 starts at ``opening_hour``; each index adds ``slot_duration_mins``.
    Hours past midnight belong to the same reservation day and are counted
    upwards (25:00, 26:00, ...) unless a wrapped label is requested.
    """

    opening_hour: int = 18
    slot_duration_mins: int = 15
    reservation_hours: int = 3
    total_slots: int = 40

    @property
    def max_slot(self) -> int:
        return self.total_slots - 1

    @property
    def slots_per_reservation(self) -> int:
        return max(self.reservation_hours * 60 // self.slot_duration_mins, 1)

    @property
    def late_window_start(self) -> int:
        """First start slot whose reservation runs until closing instead of its nominal length."""
        return max(self.total_slots - self.slots_per_reservation, 0)

    def is_valid_slot(self, slot: int) -> bool:
        return 0 <= slot <= self.max_slot

    def occupied_slots(self, start_slot: int) -> frozenset[int]:
        if start_slot >= self.late_window_start:
            return frozenset(range(max(start_slot, 0), self.max_slot + 1))
        end = min(start_slot + self.slots_per_reservation - 1, self.max_slot)
        return frozenset(range(max(start_slot, 0), end + 1))

    def slot_start_minutes(self, slot: int) -> int:
        """Minutes after midnight of the reservation day (may exceed 24h)."""
        return self.opening_hour * 60 + slot * self.slot_duration_mins

    def format_clock(self, minutes: int, *, wrap: bool) -> str:
        hour, minute = divmod(minutes, 60)
        if wrap:
            hour %= 24
        return f"{hour:02d}:{minute:02d}"

    def slot_to_time_range(self, slot: int, *, wrap: bool = False) -> tuple[str, str]:
        start = self.slot_start_minutes(slot)
        return (
            self.format_clock(start, wrap=wrap),
            self.format_clock(start + self.slot_duration_mins, wrap=wrap),
        )

    def time_label(self, slot: int, *, wrap: bool = True) -> str:
        start, end = self.slot_to_time_range(slot, wrap=wrap)
        return f"{start}-{end}"

    def start_label(self, slot: int, *, wrap: bool = True) -> str:
        return self.format_clock(self.slot_start_minutes(slot), wrap=wrap)

    def end_label(self, start_slot: int, *, wrap: bool = True) -> str:
        """Clock label at which a reservation starting at ``start_slot`` ends."""
        last = max(self.occupied_slots(start_slot), default=start_slot)
        return self.format_clock(self.slot_start_minutes(last + 1), wrap=wrap)

    def slots_per_hour(self) -> int:
        return max(60 // self.slot_duration_mins, 1)
