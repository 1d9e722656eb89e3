from enum import StrEnum


class EventStatus(StrEnum):
    """Only ACTIVE events accept new reservations."""

    ACTIVE = 'active'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'
