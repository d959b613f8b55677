from __future__ import annotations

from dataclasses import dataclass


class DomainError(Exception):
    """Base class for reservation domain errors."""


class ReservationValidationError(DomainError):
    def __init__(self, details: list[str]) -> None:
        super().__init__("; ".join(details))
        self.details = details


class PhoneRequiredError(DomainError):
    pass


@dataclass(frozen=True)
class CapacityConflict:
    slot: int
    available_seats: int
    time_label: str


class CapacityConflictError(DomainError):
    def __init__(self, conflict: CapacityConflict) -> None:
        super().__init__(
            f"insufficient seats: {conflict.time_label} has {conflict.available_seats} seat(s) left"
        )
        self.conflict = conflict


class ReservationNotFoundError(DomainError):
    pass


class InvalidStatusTransitionError(DomainError):
    pass


class StorageError(DomainError):
    pass
