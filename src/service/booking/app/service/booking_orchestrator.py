"""
Booking Orchestrator

Drives one purchase from reservation to issued ticket:

    initiate_booking      -> inventory reserved, amount frozen     (RESERVED)
    create_payment_intent -> provider order + Payment(created)    (PAYMENT_PENDING)
    confirm_payment       -> verify, commit, Ticket, capture      (CONFIRMED)
                             or release + Payment(failed)         (RELEASED)
                             or commit + failed record write      (NEEDS_RECONCILIATION)

Every exit path either commits or releases the reservation. Attempt state
lives in this process; the Payment row (keyed by provider order id) is the
durable trail.
"""

import asyncio
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from decimal import Decimal
import time
from typing import Dict, Optional

import anyio
from opentelemetry import trace
from uuid_utils import UUID

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import (
    EventNotBookableError,
    ForbiddenError,
    InsufficientInventoryError,
    NotFoundError,
    PartialBookingFailureError,
    PaymentVerificationFailedError,
    ProviderUnavailableError,
    ReservationExpiredError,
    ReservationStateError,
    ValidationError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.booking.app.dto.payment_intent_dto import PaymentIntent
from src.service.booking.app.interface.i_event_repo import IEventRepo
from src.service.booking.app.interface.i_notifier import INotifier
from src.service.booking.app.interface.i_payment_provider import IPaymentProvider
from src.service.booking.app.interface.i_payment_repo import IPaymentRepo
from src.service.booking.app.interface.i_ticket_repo import ITicketRepo
from src.service.booking.app.interface.i_user_repo import IUserRepo
from src.service.booking.app.service.inventory_guard import InventoryGuard
from src.service.booking.domain.entity.booking_attempt_entity import BookingAttempt
from src.service.booking.domain.entity.event_entity import EventEntity
from src.service.booking.domain.entity.payment_entity import PaymentEntity
from src.service.booking.domain.entity.ticket_entity import TicketEntity
from src.service.booking.domain.entity.user_entity import UserEntity
from src.service.booking.domain.enum.booking_attempt_state import BookingAttemptState
from src.service.booking.domain.enum.payment_status import PaymentStatus
from src.service.booking.domain.enum.ticket_status import TicketStatus
from src.service.booking.domain.value_object.money import compute_total, to_money
from src.service.booking.domain.value_object.reservation_token import ReservationToken
from src.service.booking.driven_adapter.notification.notification_dispatcher import (
    NotificationDispatcher,
)


class BookingOrchestrator:
    def __init__(
        self,
        *,
        inventory_guard: InventoryGuard,
        event_repo: IEventRepo,
        ticket_repo: ITicketRepo,
        payment_repo: IPaymentRepo,
        user_repo: IUserRepo,
        payment_provider: IPaymentProvider,
        notifier: INotifier,
        notification_dispatcher: NotificationDispatcher,
        currency: str = settings.PAYMENT_CURRENCY,
        provider_timeout_seconds: float = settings.PAYMENT_PROVIDER_TIMEOUT_SECONDS,
    ) -> None:
        self.inventory_guard = inventory_guard
        self.event_repo = event_repo
        self.ticket_repo = ticket_repo
        self.payment_repo = payment_repo
        self.user_repo = user_repo
        self.payment_provider = payment_provider
        self.notifier = notifier
        self.notification_dispatcher = notification_dispatcher
        self.currency = currency
        self.provider_timeout_seconds = provider_timeout_seconds

        self._attempts: Dict[UUID, BookingAttempt] = {}
        self._attempt_by_order: Dict[str, UUID] = {}
        self._attempt_locks: Dict[UUID, asyncio.Lock] = defaultdict(asyncio.Lock)
        self.tracer = trace.get_tracer(__name__)

    # ------------------------------------------------------------------
    # Attempt registry
    # ------------------------------------------------------------------

    def get_attempt(self, booking_id: UUID) -> BookingAttempt:
        attempt = self._attempts.get(booking_id)
        if attempt is None:
            raise NotFoundError('Booking not found')
        return attempt

    def find_attempt_by_order(self, provider_order_id: str) -> BookingAttempt:
        booking_id = self._attempt_by_order.get(provider_order_id)
        if booking_id is None:
            raise NotFoundError('No booking is waiting on this payment order')
        return self.get_attempt(booking_id)

    def _save(self, attempt: BookingAttempt) -> BookingAttempt:
        self._attempts[attempt.id] = attempt
        if attempt.provider_order_id:
            self._attempt_by_order[attempt.provider_order_id] = attempt.id
        if attempt.state.is_terminal:
            metrics.record_booking_outcome(state=attempt.state.value)
        return attempt

    @staticmethod
    def _check_owner(attempt: BookingAttempt, requester_id: Optional[int]) -> None:
        if requester_id is not None and not attempt.is_owned_by(requester_id):
            raise ForbiddenError('This booking belongs to another user')

    # ------------------------------------------------------------------
    # initiate_booking
    # ------------------------------------------------------------------

    @Logger.io
    async def initiate_booking(
        self, *, user_id: int, event_id: int, quantity: int
    ) -> BookingAttempt:
        """
        Reserve inventory and freeze the amount due.

        Free events are finalized right away and come back CONFIRMED with a
        ticket id; paid events come back RESERVED.

        Raises:
            ValidationError, EventNotBookableError, InsufficientInventoryError
        """
        if quantity < 1:
            raise ValidationError('quantity must be at least 1')

        with self.tracer.start_as_current_span(
            'booking.initiate', attributes={'event.id': event_id, 'user.id': user_id}
        ):
            event = await self.event_repo.get_by_id(event_id)
            if event is None:
                raise EventNotBookableError.not_found(event_id)
            if not event.is_bookable:
                raise EventNotBookableError.inactive(event_id, event.status)

            attempt = BookingAttempt.initiate(
                user_id=user_id,
                event_id=event_id,
                quantity=quantity,
                total_amount=compute_total(event.ticket_price, quantity),
            )

            try:
                token = await self.inventory_guard.reserve(event_id=event_id, quantity=quantity)
            except (ValidationError, EventNotBookableError, InsufficientInventoryError) as e:
                self._save(attempt.mark_rejected(e.code))
                raise

            attempt = self._save(attempt.mark_reserved(token))
            Logger.base.info(
                f'🧾 [BOOKING] {attempt.id} reserved {quantity} ticket(s) for event {event_id}, '
                f'amount due {attempt.total_amount}'
            )

            if attempt.is_free:
                async with self._attempt_locks[attempt.id]:
                    await self._finalize(attempt, event=event, provider_payment_id=None)
                return self.get_attempt(attempt.id)

            return attempt

    # ------------------------------------------------------------------
    # create_payment_intent
    # ------------------------------------------------------------------

    @Logger.io
    async def create_payment_intent(
        self,
        *,
        booking_id: UUID,
        requester_id: Optional[int] = None,
        expected_amount: Optional[Decimal] = None,
        currency: Optional[str] = None,
    ) -> PaymentIntent:
        """
        Open a provider order for the frozen amount and record a `created` Payment.

        Calling again while the attempt is PAYMENT_PENDING returns the same order.

        Raises:
            NotFoundError, ForbiddenError
            ValidationError: expected_amount differs from the frozen amount
            ReservationStateError: the attempt is not waiting for payment
            ProviderUnavailableError: provider failed; the reservation is released
        """
        attempt = self.get_attempt(booking_id)
        self._check_owner(attempt, requester_id)
        if expected_amount is not None and to_money(expected_amount) != attempt.total_amount:
            raise ValidationError(
                f'Amount {to_money(expected_amount)} does not match booking total '
                f'{attempt.total_amount}'
            )
        currency = currency or self.currency

        async with self._attempt_locks[booking_id]:
            attempt = self.get_attempt(booking_id)
            if attempt.state == BookingAttemptState.PAYMENT_PENDING:
                return PaymentIntent(
                    booking_id=attempt.id,
                    provider_order_id=attempt.provider_order_id or '',
                    amount=attempt.total_amount,
                    currency=currency,
                )
            if attempt.is_free:
                raise ReservationStateError('Free bookings do not take a payment')
            if attempt.state != BookingAttemptState.RESERVED:
                raise ReservationStateError(f'Booking is {attempt.state} and cannot be paid')

            try:
                with anyio.fail_after(self.provider_timeout_seconds):
                    order = await self.payment_provider.create_order(
                        amount=attempt.total_amount, currency=currency, receipt=str(attempt.id)
                    )
            except (ProviderUnavailableError, TimeoutError) as e:
                await self._release_attempt(attempt, reason='provider_unavailable')
                if isinstance(e, ProviderUnavailableError):
                    raise
                raise ProviderUnavailableError('Payment provider timed out') from e

            try:
                payment = await self.payment_repo.create(
                    PaymentEntity.create(
                        user_id=attempt.user_id,
                        provider_order_id=order.id,
                        amount=attempt.total_amount,
                    )
                )
            except Exception:
                await self._release_attempt(attempt, reason='payment_record_failed')
                raise

            attempt = self._save(
                attempt.mark_payment_pending(payment_id=payment.id or 0, provider_order_id=order.id)
            )
            Logger.base.info(
                f'💳 [PAYMENT] booking {attempt.id} waiting on order {order.id} '
                f'({attempt.total_amount} {currency})'
            )
            return PaymentIntent(
                booking_id=attempt.id,
                provider_order_id=order.id,
                amount=attempt.total_amount,
                currency=currency,
            )

    # ------------------------------------------------------------------
    # confirm_payment
    # ------------------------------------------------------------------

    @Logger.io
    async def confirm_payment(
        self,
        *,
        provider_order_id: str,
        provider_payment_id: str,
        provider_signature: str,
        requester_id: Optional[int] = None,
    ) -> TicketEntity:
        """
        Verify the payment and issue the ticket.

        Raises:
            PaymentVerificationFailedError: rejected by the provider; reservation released
            ProviderUnavailableError: provider error or timeout; reservation released
            ReservationExpiredError: the hold was released before payment arrived
            PartialBookingFailureError: inventory committed but records incomplete
        """
        attempt = self.find_attempt_by_order(provider_order_id)
        self._check_owner(attempt, requester_id)

        async with self._attempt_locks[attempt.id]:
            attempt = self.get_attempt(attempt.id)

            if attempt.state == BookingAttemptState.CONFIRMED:
                if attempt.provider_payment_id == provider_payment_id and attempt.ticket_id:
                    ticket = await self.ticket_repo.get_by_id(attempt.ticket_id)
                    if ticket is not None:
                        return ticket
                raise ReservationStateError('Booking is already confirmed')
            if attempt.state == BookingAttemptState.RELEASED:
                raise ReservationExpiredError('Booking was released before payment was confirmed')
            if attempt.state == BookingAttemptState.NEEDS_RECONCILIATION:
                # Verified earlier; finish the records without a second ticket
                if attempt.provider_payment_id != provider_payment_id:
                    raise ReservationStateError('Booking is awaiting reconciliation')
                event = await self.event_repo.get_by_id(attempt.event_id)
                return await self._finalize(
                    attempt, event=event, provider_payment_id=provider_payment_id
                )
            if attempt.state != BookingAttemptState.PAYMENT_PENDING:
                raise ReservationStateError(f'Booking is {attempt.state} and cannot be confirmed')

            with self.tracer.start_as_current_span(
                'booking.confirm_payment', attributes={'booking.id': str(attempt.id)}
            ):
                started = time.perf_counter()
                try:
                    with anyio.fail_after(self.provider_timeout_seconds):
                        verification = await self.payment_provider.verify_payment(
                            provider_order_id=provider_order_id,
                            provider_payment_id=provider_payment_id,
                            signature=provider_signature,
                        )
                except (ProviderUnavailableError, TimeoutError) as e:
                    await self._fail_attempt(
                        attempt,
                        provider_payment_id=provider_payment_id,
                        reason='provider_unavailable',
                    )
                    if isinstance(e, ProviderUnavailableError):
                        raise
                    raise ProviderUnavailableError('Payment verification timed out') from e
                finally:
                    metrics.payment_verification_duration.observe(time.perf_counter() - started)

                if not verification.verified:
                    await self._fail_attempt(
                        attempt,
                        provider_payment_id=provider_payment_id,
                        reason=verification.reason or 'verification_failed',
                    )
                    raise PaymentVerificationFailedError()

                event = await self.event_repo.get_by_id(attempt.event_id)
                ticket = await self._finalize(
                    attempt, event=event, provider_payment_id=provider_payment_id
                )
                return ticket

    # ------------------------------------------------------------------
    # cancellation
    # ------------------------------------------------------------------

    @Logger.io
    async def cancel_pending_booking(
        self, *, booking_id: UUID, requester_id: Optional[int] = None
    ) -> BookingAttempt:
        """
        Abandon an unpaid booking and return its tickets.

        Waits for an in-flight payment confirmation on the same booking. If that
        confirmation issued a ticket, the ticket is cancelled instead.
        """
        attempt = self.get_attempt(booking_id)
        self._check_owner(attempt, requester_id)

        async with self._attempt_locks[booking_id]:
            attempt = self.get_attempt(booking_id)
            if attempt.state.is_holding_inventory:
                return await self._fail_attempt(
                    attempt, provider_payment_id=None, reason='cancelled_by_user'
                )

        if attempt.state == BookingAttemptState.CONFIRMED and attempt.ticket_id is not None:
            await self.cancel_booking(ticket_id=attempt.ticket_id, requester_id=attempt.user_id)
        return self.get_attempt(booking_id)

    @Logger.io
    async def cancel_booking(
        self, *, ticket_id: int, requester_id: int, requester_is_admin: bool = False
    ) -> TicketEntity:
        """
        Cancel an issued ticket and put its quantity back on sale.

        Raises:
            NotFoundError, ForbiddenError
            DomainError(409): the ticket is not valid (used, or already cancelled)
        """
        ticket = await self.ticket_repo.get_by_id(ticket_id)
        if ticket is None:
            raise NotFoundError('Ticket not found')
        if not (requester_is_admin or ticket.is_owned_by(requester_id)):
            raise ForbiddenError('You can only cancel your own tickets')

        ticket.cancel()  # raises unless valid
        cancelled = await self.ticket_repo.update_status(
            ticket_id=ticket_id, expected=TicketStatus.VALID, new=TicketStatus.CANCELLED
        )
        if cancelled is None:
            # Lost the race against a concurrent cancel or check-in
            current = await self.ticket_repo.get_by_id(ticket_id)
            (current or ticket).cancel()
            raise ReservationStateError('Ticket changed while cancelling')

        await self.inventory_guard.release(
            ReservationToken.reconstruct(event_id=ticket.event_id, quantity=ticket.quantity),
            reason='cancelled',
        )
        Logger.base.info(
            f'🚫 [BOOKING] ticket {ticket_id} cancelled, {ticket.quantity} ticket(s) back on sale'
        )

        self.notification_dispatcher.dispatch(
            self._notify_cancelled(cancelled),
            description=f'cancellation notice for ticket {ticket_id}',
        )
        return cancelled

    # ------------------------------------------------------------------
    # hold expiry
    # ------------------------------------------------------------------

    @Logger.io
    async def expire_stale_bookings(self, *, max_age: timedelta) -> int:
        """
        Release holds whose payment never arrived, and forget finished attempts.

        Attempts with a confirmation in flight are left alone until the next sweep.
        Attempts awaiting reconciliation are kept; their inventory is committed.
        """
        cutoff = datetime.now(timezone.utc) - max_age
        expired = 0
        for booking_id, attempt in list(self._attempts.items()):
            if attempt.updated_at >= cutoff:
                continue
            if attempt.state == BookingAttemptState.NEEDS_RECONCILIATION:
                continue
            lock = self._attempt_locks[booking_id]
            if lock.locked():
                continue
            try:
                async with lock:
                    attempt = self._attempts.get(booking_id)
                    if attempt is None or attempt.updated_at >= cutoff:
                        continue
                    if attempt.state.is_holding_inventory:
                        await self._fail_attempt(
                            attempt, provider_payment_id=None, reason='expired'
                        )
                        expired += 1
                    elif attempt.state != BookingAttemptState.NEEDS_RECONCILIATION:
                        self._forget(attempt)
            except Exception as e:
                Logger.base.exception(f'🧹 [REAPER] could not expire booking {booking_id}: {e}')

        in_flight = {
            attempt.token.token_id
            for attempt in self._attempts.values()
            if attempt.token is not None and attempt.state.is_holding_inventory
        }
        # Tokens with no attempt behind them (initiate interrupted mid-way)
        await self.inventory_guard.reap_expired_holds(max_age=max_age, exclude=in_flight)

        if expired:
            Logger.base.info(f'🧹 [REAPER] expired {expired} unpaid booking(s)')
        return expired

    async def run_hold_reaper(self, *, interval_seconds: float, max_age: timedelta) -> None:
        """Background loop started from the application lifespan."""
        while True:
            await anyio.sleep(interval_seconds)
            try:
                await self.expire_stale_bookings(max_age=max_age)
            except Exception as e:
                Logger.base.exception(f'🧹 [REAPER] sweep failed: {e}')

    def _forget(self, attempt: BookingAttempt) -> None:
        self._attempts.pop(attempt.id, None)
        self._attempt_locks.pop(attempt.id, None)
        if attempt.provider_order_id:
            self._attempt_by_order.pop(attempt.provider_order_id, None)

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------

    async def _finalize(
        self,
        attempt: BookingAttempt,
        *,
        event: Optional[EventEntity],
        provider_payment_id: Optional[str],
    ) -> TicketEntity:
        """
        Commit the hold, write Ticket and Payment, notify. Caller holds the attempt lock.

        An attempt in NEEDS_RECONCILIATION already has its inventory committed
        and possibly its ticket written; only the missing records are completed.
        """
        if attempt.token is None:
            raise ReservationStateError(f'Booking {attempt.id} holds no reservation')
        if attempt.state == BookingAttemptState.NEEDS_RECONCILIATION:
            token = attempt.token
        else:
            try:
                token = await self.inventory_guard.commit(attempt.token)
            except ReservationStateError as e:
                # The hold reaper released it while the payment was in flight
                await self._mark_payment_failed(attempt, provider_payment_id=provider_payment_id)
                self._save(attempt.mark_released('expired'))
                Logger.base.error(
                    f'⏰ [BOOKING] {attempt.id} paid after its hold expired '
                    f'(order={attempt.provider_order_id}, payment={provider_payment_id}), '
                    'refund needed'
                )
                raise ReservationExpiredError(
                    'Reservation expired before payment completed'
                ) from e

        ticket: Optional[TicketEntity] = None
        try:
            if attempt.ticket_id is not None:
                ticket = await self.ticket_repo.get_by_id(attempt.ticket_id)
            if ticket is None:
                ticket = await self.ticket_repo.create(
                    TicketEntity.create(
                        event_id=attempt.event_id,
                        user_id=attempt.user_id,
                        quantity=attempt.quantity,
                        total_amount=attempt.total_amount,
                    )
                )
                attempt = self._save(attempt.record_ticket(ticket.id or 0))
            if attempt.payment_id is not None and provider_payment_id is not None:
                payment = await self.payment_repo.get_by_id(attempt.payment_id)
                if payment is None:
                    raise NotFoundError(f'Payment {attempt.payment_id} disappeared')
                if payment.status != PaymentStatus.CAPTURED:
                    await self.payment_repo.update(
                        payment.mark_captured(
                            provider_payment_id=provider_payment_id, ticket_id=ticket.id or 0
                        )
                    )
        except Exception as e:
            Logger.base.error(
                f'🔥 [PARTIAL-BOOKING] booking={attempt.id} event={attempt.event_id} '
                f'qty={attempt.quantity} order={attempt.provider_order_id} '
                f'payment={provider_payment_id} ticket={ticket.id if ticket else None}: {e}'
            )
            self._save(
                attempt.mark_needs_reconciliation(
                    token=token,
                    provider_payment_id=provider_payment_id,
                    reason=f'{type(e).__name__}: {e}',
                )
            )
            raise PartialBookingFailureError(
                booking_id=str(attempt.id),
                event_id=attempt.event_id,
                quantity=attempt.quantity,
                provider_order_id=attempt.provider_order_id,
                provider_payment_id=provider_payment_id,
                ticket_id=ticket.id if ticket else None,
            ) from e

        self._save(
            attempt.mark_confirmed(
                ticket_id=ticket.id or 0, token=token, provider_payment_id=provider_payment_id
            )
        )
        Logger.base.info(
            f'🎉 [BOOKING] {attempt.id} confirmed: ticket {ticket.id} '
            f'({attempt.quantity} x event {attempt.event_id}, {attempt.total_amount})'
        )

        if event is not None:
            self.notification_dispatcher.dispatch(
                self._notify_confirmed(ticket, event),
                description=f'confirmation for ticket {ticket.id}',
            )
        return ticket

    async def _release_attempt(self, attempt: BookingAttempt, *, reason: str) -> BookingAttempt:
        token = attempt.token
        if token is not None:
            token = await self.inventory_guard.release(token, reason=reason)
        return self._save(attempt.mark_released(reason, token=token))

    async def _fail_attempt(
        self, attempt: BookingAttempt, *, provider_payment_id: Optional[str], reason: str
    ) -> BookingAttempt:
        released = await self._release_attempt(attempt, reason=reason)
        await self._mark_payment_failed(attempt, provider_payment_id=provider_payment_id)
        Logger.base.info(f'↩️ [BOOKING] {attempt.id} released ({reason})')
        return released

    async def _mark_payment_failed(
        self, attempt: BookingAttempt, *, provider_payment_id: Optional[str]
    ) -> None:
        if attempt.payment_id is None:
            return
        try:
            payment = await self.payment_repo.get_by_id(attempt.payment_id)
            if payment is not None:
                await self.payment_repo.update(
                    payment.mark_failed(provider_payment_id=provider_payment_id)
                )
        except Exception as e:
            # Inventory is already back; the stale `created` row is only an audit gap
            Logger.base.exception(
                f'⚠️ [PAYMENT] could not mark payment {attempt.payment_id} failed: {e}'
            )

    async def _load_user(self, user_id: int) -> Optional[UserEntity]:
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            Logger.base.warning(f'📧 [NOTIFY] user {user_id} not found, skipping notification')
        return user

    async def _notify_confirmed(self, ticket: TicketEntity, event: EventEntity) -> None:
        attendee = await self._load_user(ticket.user_id)
        if attendee is None:
            return
        await self.notifier.notify_booking_confirmed(attendee=attendee, event=event, ticket=ticket)
        organizer = await self._load_user(event.organizer_id)
        if organizer is not None:
            await self.notifier.notify_organizer_ticket_sold(
                organizer=organizer, attendee=attendee, event=event, ticket=ticket
            )

    async def _notify_cancelled(self, ticket: TicketEntity) -> None:
        attendee = await self._load_user(ticket.user_id)
        event = await self.event_repo.get_by_id(ticket.event_id)
        if attendee is None or event is None:
            return
        await self.notifier.notify_booking_cancelled(attendee=attendee, event=event, ticket=ticket)

