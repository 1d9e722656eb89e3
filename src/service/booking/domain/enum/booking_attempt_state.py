from enum import StrEnum


class BookingAttemptState(StrEnum):
    """
    INITIATED -> RESERVED -> PAYMENT_PENDING -> CONFIRMED
    INITIATED -> REJECTED
    RESERVED | PAYMENT_PENDING -> RELEASED
    RESERVED | PAYMENT_PENDING -> NEEDS_RECONCILIATION -> CONFIRMED

    NEEDS_RECONCILIATION: inventory committed, Ticket or Payment write failed.
    """

    INITIATED = 'initiated'
    RESERVED = 'reserved'
    PAYMENT_PENDING = 'payment_pending'
    CONFIRMED = 'confirmed'
    REJECTED = 'rejected'
    RELEASED = 'released'
    NEEDS_RECONCILIATION = 'needs_reconciliation'

    @property
    def is_holding_inventory(self) -> bool:
        return self in (BookingAttemptState.RESERVED, BookingAttemptState.PAYMENT_PENDING)

    @property
    def is_terminal(self) -> bool:
        return self in (
            BookingAttemptState.CONFIRMED,
            BookingAttemptState.REJECTED,
            BookingAttemptState.RELEASED,
        )
