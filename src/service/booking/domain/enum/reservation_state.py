from enum import StrEnum


class ReservationState(StrEnum):
    PENDING = 'pending'
    COMMITTED = 'committed'
    RELEASED = 'released'
