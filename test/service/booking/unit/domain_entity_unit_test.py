from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from src.platform.exception.exceptions import DomainError, ReservationStateError, ValidationError
from src.service.booking.domain.entity.booking_attempt_entity import BookingAttempt
from src.service.booking.domain.entity.event_entity import EventEntity
from src.service.booking.domain.entity.payment_entity import PaymentEntity
from src.service.booking.domain.entity.ticket_entity import TicketEntity
from src.service.booking.domain.enum.booking_attempt_state import BookingAttemptState
from src.service.booking.domain.enum.event_status import EventStatus
from src.service.booking.domain.enum.payment_status import PaymentStatus
from src.service.booking.domain.enum.ticket_status import TicketStatus
from src.service.booking.domain.value_object.reservation_token import ReservationToken


pytestmark = pytest.mark.unit


class TestEventEntity:
    def test_create_starts_fully_available(self, make_event):
        event = make_event(total_tickets=50, ticket_price='250.5')

        assert event.available_tickets == 50
        assert event.ticket_price == Decimal('250.50')
        assert event.status == EventStatus.ACTIVE
        assert event.is_bookable

    def test_zero_price_event_is_free(self, make_event):
        assert make_event(ticket_price='0').is_free

    def test_rejects_negative_price(self, make_event):
        with pytest.raises(ValidationError):
            make_event(ticket_price='-1')

    def test_rejects_end_before_start(self):
        start = datetime.now(timezone.utc)
        with pytest.raises(ValidationError):
            EventEntity.create(
                organizer_id=1,
                title='Backwards',
                description='',
                location='Pune',
                start_date=start,
                end_date=start - timedelta(hours=1),
                category='music',
                total_tickets=10,
                ticket_price=Decimal('10'),
            )

    def test_rejects_blank_title(self, make_event):
        with pytest.raises(ValidationError):
            make_event(title='   ')

    def test_cancelled_event_is_not_bookable(self, make_event):
        cancelled = make_event().cancel()

        assert cancelled.status == EventStatus.CANCELLED
        assert not cancelled.is_bookable

    def test_update_details_changes_price_only(self, make_event):
        event = make_event(total_tickets=40, ticket_price='100')
        event.available_tickets = 25

        updated = event.update_details(ticket_price=Decimal('120'))

        assert updated.ticket_price == Decimal('120.00')
        assert (updated.total_tickets, updated.available_tickets) == (40, 25)

    @pytest.mark.parametrize('field', ['available_tickets', 'total_tickets', 'status'])
    def test_update_details_refuses_inventory_fields(self, make_event, field):
        with pytest.raises(ValidationError):
            make_event().update_details(**{field: 0})

    def test_update_details_rejects_blank_title(self, make_event):
        with pytest.raises(ValidationError):
            make_event().update_details(title='  ')


class TestTicketEntity:
    def test_cancel_valid_ticket(self):
        ticket = TicketEntity.create(event_id=1, user_id=2, quantity=2, total_amount=Decimal('20'))

        assert ticket.cancel().status == TicketStatus.CANCELLED

    def test_cancel_used_ticket_conflicts(self):
        ticket = TicketEntity.create(
            event_id=1, user_id=2, quantity=1, total_amount=Decimal('10')
        ).mark_used()

        with pytest.raises(DomainError) as exc_info:
            ticket.cancel()
        assert exc_info.value.status_code == 409

    def test_quantity_must_be_positive(self):
        with pytest.raises(ValidationError):
            TicketEntity.create(event_id=1, user_id=2, quantity=0, total_amount=Decimal('0'))


class TestPaymentEntity:
    def test_capture_records_provider_payment_and_ticket(self):
        payment = PaymentEntity.create(user_id=1, provider_order_id='order_1', amount=Decimal('10'))

        captured = payment.mark_captured(provider_payment_id='pay_1', ticket_id=7)

        assert captured.status == PaymentStatus.CAPTURED
        assert captured.provider_payment_id == 'pay_1'
        assert captured.ticket_id == 7

    def test_captured_payment_cannot_fail(self):
        payment = PaymentEntity.create(
            user_id=1, provider_order_id='order_1', amount=Decimal('10')
        ).mark_captured(provider_payment_id='pay_1', ticket_id=7)

        with pytest.raises(DomainError):
            payment.mark_failed()


class TestBookingAttempt:
    @pytest.fixture
    def token(self) -> ReservationToken:
        return ReservationToken.issue(event_id=1, quantity=2)

    def test_paid_happy_path(self, token):
        attempt = BookingAttempt.initiate(
            user_id=1, event_id=1, quantity=2, total_amount=Decimal('200')
        )

        attempt = attempt.mark_reserved(token)
        attempt = attempt.mark_payment_pending(payment_id=3, provider_order_id='order_1')
        attempt = attempt.mark_confirmed(
            ticket_id=9, token=token.committed(), provider_payment_id='pay_1'
        )

        assert attempt.state == BookingAttemptState.CONFIRMED
        assert attempt.ticket_id == 9
        assert attempt.total_amount == Decimal('200.00')

    def test_free_attempt_confirms_from_reserved(self, token):
        attempt = BookingAttempt.initiate(
            user_id=1, event_id=1, quantity=2, total_amount=Decimal('0')
        ).mark_reserved(token)

        confirmed = attempt.mark_confirmed(
            ticket_id=1, token=token.committed(), provider_payment_id=None
        )

        assert confirmed.state == BookingAttemptState.CONFIRMED

    def test_paid_attempt_cannot_skip_payment(self, token):
        attempt = BookingAttempt.initiate(
            user_id=1, event_id=1, quantity=2, total_amount=Decimal('50')
        ).mark_reserved(token)

        with pytest.raises(ReservationStateError):
            attempt.mark_confirmed(ticket_id=1, token=token, provider_payment_id='pay_1')

    def test_released_attempt_is_terminal(self, token):
        attempt = (
            BookingAttempt.initiate(user_id=1, event_id=1, quantity=2, total_amount=Decimal('50'))
            .mark_reserved(token)
            .mark_released('expired')
        )

        assert attempt.state.is_terminal
        assert attempt.failure_reason == 'expired'
        with pytest.raises(ReservationStateError):
            attempt.mark_payment_pending(payment_id=1, provider_order_id='order_1')

    def test_needs_reconciliation_keeps_committed_token_and_can_confirm(self, token):
        attempt = (
            BookingAttempt.initiate(user_id=1, event_id=1, quantity=2, total_amount=Decimal('50'))
            .mark_reserved(token)
            .mark_payment_pending(payment_id=3, provider_order_id='order_1')
            .record_ticket(11)
        )

        stuck = attempt.mark_needs_reconciliation(
            token=token.committed(), provider_payment_id='pay_1', reason='RuntimeError: boom'
        )

        assert stuck.state == BookingAttemptState.NEEDS_RECONCILIATION
        assert not stuck.state.is_holding_inventory
        assert not stuck.state.is_terminal
        assert stuck.ticket_id == 11
        confirmed = stuck.mark_confirmed(
            ticket_id=11, token=token.committed(), provider_payment_id='pay_1'
        )
        assert confirmed.state == BookingAttemptState.CONFIRMED
        assert confirmed.failure_reason is None

    def test_released_attempt_cannot_need_reconciliation(self, token):
        attempt = (
            BookingAttempt.initiate(user_id=1, event_id=1, quantity=2, total_amount=Decimal('50'))
            .mark_reserved(token)
            .mark_released('expired')
        )

        with pytest.raises(ReservationStateError):
            attempt.mark_needs_reconciliation(
                token=token.committed(), provider_payment_id=None, reason='late'
            )
