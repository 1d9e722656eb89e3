"""
Inventory Guard

The only writer of `available_tickets`. Reservations for one event are
serialized by an in-process lock per event, and every change is applied as a
conditional update on the record store so several API instances sharing one
database still never oversell.
"""

import asyncio
from collections import OrderedDict, defaultdict
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from opentelemetry import trace
from uuid_utils import UUID

from src.platform.exception.exceptions import (
    EventNotBookableError,
    InsufficientInventoryError,
    ReservationStateError,
    ValidationError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.booking.app.interface.i_event_repo import IEventRepo
from src.service.booking.domain.enum.reservation_state import ReservationState
from src.service.booking.domain.value_object.reservation_token import ReservationToken


# Settled token ids remembered for idempotent release/commit
SETTLED_HISTORY_LIMIT = 10_000


class InventoryGuard:
    def __init__(self, *, event_repo: IEventRepo) -> None:
        self.event_repo = event_repo
        self._event_locks: Dict[int, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._pending: Dict[UUID, ReservationToken] = {}
        self._settled: 'OrderedDict[UUID, ReservationToken]' = OrderedDict()
        self.tracer = trace.get_tracer(__name__)

    @Logger.io
    async def reserve(self, *, event_id: int, quantity: int) -> ReservationToken:
        """
        Take `quantity` tickets out of the event's availability.

        Raises:
            ValidationError: quantity < 1
            EventNotBookableError: event missing, cancelled or completed
            InsufficientInventoryError: not enough tickets left (or ever)
        """
        if quantity < 1:
            raise ValidationError('quantity must be at least 1')

        with self.tracer.start_as_current_span(
            'inventory.reserve', attributes={'event.id': event_id, 'quantity': quantity}
        ):
            async with self._event_locks[event_id]:
                event = await self.event_repo.get_by_id(event_id)
                if event is None:
                    metrics.record_reservation(result='not_bookable')
                    raise EventNotBookableError.not_found(event_id)
                if not event.is_bookable:
                    metrics.record_reservation(result='not_bookable')
                    raise EventNotBookableError.inactive(event_id, event.status)
                if quantity > event.total_tickets or quantity > event.available_tickets:
                    metrics.record_reservation(result='insufficient')
                    raise InsufficientInventoryError(
                        event_id=event_id, requested=quantity, available=event.available_tickets
                    )

                remaining = await self.event_repo.decrement_available_tickets(
                    event_id=event_id, quantity=quantity
                )
                if remaining is None:
                    # Another instance got there first
                    raise await self._classify_rejection(event_id=event_id, quantity=quantity)

                token = ReservationToken.issue(event_id=event_id, quantity=quantity)
                self._pending[token.token_id] = token
                metrics.record_reservation(result='reserved')
                metrics.active_holds.set(len(self._pending))

        Logger.base.info(
            f'🎫 [RESERVE] event={event_id} qty={quantity} remaining={remaining} '
            f'token={token.token_id}'
        )
        return token

    @Logger.io
    async def release(
        self, token: ReservationToken, *, reason: str = 'released'
    ) -> ReservationToken:
        """
        Put the token's tickets back. Releasing twice is a no-op.

        Raises:
            ReservationStateError: the token was already committed
        """
        async with self._event_locks[token.event_id]:
            settled = self._settled.get(token.token_id, token)
            if settled.state == ReservationState.COMMITTED:
                raise ReservationStateError(f'Reservation {token.token_id} is already committed')
            if settled.state == ReservationState.RELEASED:
                return settled

            remaining = await self.event_repo.increment_available_tickets(
                event_id=token.event_id, quantity=token.quantity
            )
            released = self._settle(token.released())

        metrics.record_release(reason=reason, quantity=token.quantity)
        if remaining is None:
            Logger.base.warning(
                f'⚠️ [RELEASE] event={token.event_id} no longer exists, '
                f'{token.quantity} ticket(s) not restored'
            )
        else:
            Logger.base.info(
                f'↩️ [RELEASE] event={token.event_id} qty={token.quantity} '
                f'remaining={remaining} reason={reason}'
            )
        return released

    @Logger.io
    async def commit(self, token: ReservationToken) -> ReservationToken:
        """
        Consume the reservation; inventory stays decremented. Committing twice is a no-op.

        Raises:
            ReservationStateError: the token was already released
        """
        async with self._event_locks[token.event_id]:
            settled = self._settled.get(token.token_id, token)
            if settled.state == ReservationState.RELEASED:
                raise ReservationStateError(f'Reservation {token.token_id} was already released')
            if settled.state == ReservationState.COMMITTED:
                return settled
            if token.token_id not in self._pending:
                raise ReservationStateError(
                    f'Reservation {token.token_id} is not held by this guard'
                )
            committed = self._settle(token.committed())

        Logger.base.info(
            f'✅ [COMMIT] event={token.event_id} qty={token.quantity} token={token.token_id}'
        )
        return committed

    def is_released(self, token: ReservationToken) -> bool:
        settled = self._settled.get(token.token_id)
        return settled is not None and settled.state == ReservationState.RELEASED

    def pending_tokens(self) -> List[ReservationToken]:
        return list(self._pending.values())

    @Logger.io
    async def reap_expired_holds(
        self, *, max_age: timedelta, exclude: Optional[set[UUID]] = None
    ) -> List[ReservationToken]:
        """Release every pending token older than `max_age` (tokens in `exclude` are kept)."""
        cutoff = datetime.now(timezone.utc) - max_age
        expired = [
            token
            for token in self.pending_tokens()
            if token.reserved_at < cutoff and token.token_id not in (exclude or set())
        ]
        released = []
        for token in expired:
            released.append(await self.release(token, reason='expired'))
        if released:
            Logger.base.info(f'🧹 [REAPER] released {len(released)} expired hold(s)')
        return released

    def _settle(self, token: ReservationToken) -> ReservationToken:
        self._pending.pop(token.token_id, None)
        self._settled[token.token_id] = token
        while len(self._settled) > SETTLED_HISTORY_LIMIT:
            self._settled.popitem(last=False)
        metrics.active_holds.set(len(self._pending))
        return token

    async def _classify_rejection(self, *, event_id: int, quantity: int) -> Exception:
        event = await self.event_repo.get_by_id(event_id)
        if event is None:
            metrics.record_reservation(result='not_bookable')
            return EventNotBookableError.not_found(event_id)
        if not event.is_bookable:
            metrics.record_reservation(result='not_bookable')
            return EventNotBookableError.inactive(event_id, event.status)
        metrics.record_reservation(result='insufficient')
        return InsufficientInventoryError(
            event_id=event_id, requested=quantity, available=event.available_tickets
        )
