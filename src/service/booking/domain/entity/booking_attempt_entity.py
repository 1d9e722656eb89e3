from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

import attrs
from uuid_utils import UUID
import uuid_utils

from src.platform.exception.exceptions import ReservationStateError
from src.platform.logging.loguru_io import Logger
from src.service.booking.domain.enum.booking_attempt_state import BookingAttemptState
from src.service.booking.domain.value_object.money import ZERO, to_money
from src.service.booking.domain.value_object.reservation_token import ReservationToken


@attrs.define
class BookingAttempt:
    """
    One purchase in flight, from reservation to ticket issue.

    `total_amount` is frozen when the attempt is created; later price edits on
    the event never change what this attempt charges.
    """

    id: UUID
    user_id: int
    event_id: int
    quantity: int
    total_amount: Decimal = attrs.field(converter=to_money)
    state: BookingAttemptState = BookingAttemptState.INITIATED
    token: Optional[ReservationToken] = None
    payment_id: Optional[int] = None
    provider_order_id: Optional[str] = None
    provider_payment_id: Optional[str] = None
    ticket_id: Optional[int] = None
    failure_reason: Optional[str] = None
    created_at: datetime = attrs.field(factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = attrs.field(factory=lambda: datetime.now(timezone.utc))

    @classmethod
    @Logger.io
    def initiate(
        cls, *, user_id: int, event_id: int, quantity: int, total_amount: Decimal
    ) -> 'BookingAttempt':
        return cls(
            id=uuid_utils.uuid7(),
            user_id=user_id,
            event_id=event_id,
            quantity=quantity,
            total_amount=total_amount,
        )

    @property
    def is_free(self) -> bool:
        return self.total_amount == ZERO

    def is_owned_by(self, user_id: int) -> bool:
        return self.user_id == user_id

    def _transition(
        self, allowed_from: tuple[BookingAttemptState, ...], to: BookingAttemptState, **changes
    ) -> 'BookingAttempt':
        if self.state not in allowed_from:
            raise ReservationStateError(f'Booking {self.id} cannot move from {self.state} to {to}')
        return attrs.evolve(self, state=to, updated_at=datetime.now(timezone.utc), **changes)

    def mark_reserved(self, token: ReservationToken) -> 'BookingAttempt':
        return self._transition(
            (BookingAttemptState.INITIATED,), BookingAttemptState.RESERVED, token=token
        )

    def mark_rejected(self, reason: str) -> 'BookingAttempt':
        return self._transition(
            (BookingAttemptState.INITIATED,), BookingAttemptState.REJECTED, failure_reason=reason
        )

    def mark_payment_pending(self, *, payment_id: int, provider_order_id: str) -> 'BookingAttempt':
        return self._transition(
            (BookingAttemptState.RESERVED,),
            BookingAttemptState.PAYMENT_PENDING,
            payment_id=payment_id,
            provider_order_id=provider_order_id,
        )

    def mark_confirmed(
        self, *, ticket_id: int, token: ReservationToken, provider_payment_id: Optional[str]
    ) -> 'BookingAttempt':
        # Free events skip PAYMENT_PENDING
        allowed = (
            (BookingAttemptState.RESERVED,)
            if self.is_free
            else (BookingAttemptState.PAYMENT_PENDING,)
        )
        return self._transition(
            allowed + (BookingAttemptState.NEEDS_RECONCILIATION,),
            BookingAttemptState.CONFIRMED,
            ticket_id=ticket_id,
            token=token,
            provider_payment_id=provider_payment_id,
            failure_reason=None,
        )

    def record_ticket(self, ticket_id: int) -> 'BookingAttempt':
        """Remember the issued ticket before the payment record is settled."""
        return attrs.evolve(self, ticket_id=ticket_id, updated_at=datetime.now(timezone.utc))

    def mark_needs_reconciliation(
        self,
        *,
        token: ReservationToken,
        provider_payment_id: Optional[str],
        reason: str,
    ) -> 'BookingAttempt':
        return self._transition(
            (
                BookingAttemptState.RESERVED,
                BookingAttemptState.PAYMENT_PENDING,
                BookingAttemptState.NEEDS_RECONCILIATION,
            ),
            BookingAttemptState.NEEDS_RECONCILIATION,
            token=token,
            provider_payment_id=provider_payment_id,
            failure_reason=reason,
        )

    def mark_released(
        self, reason: str, token: Optional[ReservationToken] = None
    ) -> 'BookingAttempt':
        return self._transition(
            (BookingAttemptState.RESERVED, BookingAttemptState.PAYMENT_PENDING),
            BookingAttemptState.RELEASED,
            failure_reason=reason,
            token=token or self.token,
        )
