from typing import Any


class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    code: str = 'error'

    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    @property
    def extra(self) -> dict[str, Any]:
        """Additional fields rendered next to `detail` in the HTTP error body"""
        return {}


class DomainError(CustomBaseError):
    code = 'domain_error'

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class ValidationError(DomainError):
    code = 'validation_error'

    def __init__(self, message: str) -> None:
        super().__init__(message, 400)


class ForbiddenError(CustomBaseError):
    code = 'forbidden'

    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class NotFoundError(CustomBaseError):
    code = 'not_found'

    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    code = 'conflict'

    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class AuthenticationError(CustomBaseError):
    code = 'authentication_error'

    def __init__(self, message: str) -> None:
        super().__init__(message, 401)


# =============================================================================
# Booking flow errors
# =============================================================================


class InsufficientInventoryError(DomainError):
    code = 'insufficient_inventory'

    def __init__(self, *, event_id: int, requested: int, available: int) -> None:
        self.event_id = event_id
        self.requested = requested
        self.available = available
        super().__init__(
            f'Not enough tickets available: requested {requested}, available {available}'
        )

    @property
    def extra(self) -> dict[str, Any]:
        return {'available': self.available, 'requested': self.requested}


class EventNotBookableError(DomainError):
    code = 'event_not_bookable'

    def __init__(self, message: str, *, event_id: int, status_code: int = 400) -> None:
        self.event_id = event_id
        super().__init__(message, status_code)

    @classmethod
    def not_found(cls, event_id: int) -> 'EventNotBookableError':
        return cls('Event not found', event_id=event_id, status_code=404)

    @classmethod
    def inactive(cls, event_id: int, status: str) -> 'EventNotBookableError':
        return cls(f'Event is {status} and cannot be booked', event_id=event_id)


class ReservationStateError(ConflictError):
    code = 'reservation_state_error'


class ReservationExpiredError(ConflictError):
    code = 'reservation_expired'


class PaymentVerificationFailedError(DomainError):
    code = 'payment_verification_failed'

    def __init__(self, message: str = 'Payment verification failed') -> None:
        super().__init__(message, 400)


class ProviderUnavailableError(CustomBaseError):
    code = 'provider_unavailable'

    def __init__(self, message: str = 'Payment provider unavailable') -> None:
        super().__init__(message, 503)


class PartialBookingFailureError(CustomBaseError):
    """Inventory was committed but the ticket or payment record could not be written."""

    code = 'partial_booking_failure'

    def __init__(
        self,
        *,
        booking_id: str,
        event_id: int,
        quantity: int,
        provider_order_id: str | None,
        provider_payment_id: str | None,
        ticket_id: int | None = None,
    ) -> None:
        self.booking_id = booking_id
        self.event_id = event_id
        self.quantity = quantity
        self.provider_order_id = provider_order_id
        self.provider_payment_id = provider_payment_id
        self.ticket_id = ticket_id
        super().__init__(
            'Payment was accepted but the booking could not be completed; '
            'it has been flagged for reconciliation',
            500,
        )

    @property
    def extra(self) -> dict[str, Any]:
        return {
            'bookingId': self.booking_id,
            'providerOrderId': self.provider_order_id,
            'providerPaymentId': self.provider_payment_id,
        }
