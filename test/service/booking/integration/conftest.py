"""
BDD step definitions for the booking flow scenarios.

Steps drive the HTTP app through TestClient and keep what later steps need
in the `context` dict.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from fastapi.testclient import TestClient
import pytest
from pytest_bdd import given, parsers, then, when

from src.platform.config.di import container
from src.service.booking.domain.enum.user_role import UserRole


@pytest.fixture
def context() -> dict[str, Any]:
    """Shared test context for storing state between steps"""
    return {}


def _publish_event(client: TestClient, login, *, total: int, price: str) -> dict[str, Any]:
    start = datetime.now(timezone.utc) + timedelta(days=21)
    response = client.post(
        '/api/events',
        json={
            'title': 'Monsoon Jazz',
            'description': 'Rooftop set',
            'location': 'Mumbai',
            'startDate': start.isoformat(),
            'endDate': (start + timedelta(hours=3)).isoformat(),
            'category': 'music',
            'totalTickets': total,
            'ticketPrice': float(price),
        },
        headers=login('organizer', UserRole.ORGANIZER),
    )
    assert response.status_code == 201, response.text
    return response.json()


# ============ Given ============


@given(parsers.parse('an organizer has published an event with {total:d} tickets at {price} each'))
def given_paid_event(client: TestClient, login, context: dict[str, Any], total: int, price: str):
    context['event'] = _publish_event(client, login, total=total, price=price)


@given(parsers.parse('an organizer has published a free event with {total:d} tickets'))
def given_free_event(client: TestClient, login, context: dict[str, Any], total: int):
    context['event'] = _publish_event(client, login, total=total, price='0')


@given('I am logged in as an attendee')
def given_attendee(login, context: dict[str, Any]):
    context['headers'] = login('attendee', UserRole.ATTENDEE)


@given('the payment provider rejects payments')
def given_rejecting_provider(client: TestClient):
    container.booking_orchestrator().payment_provider.fail_verification = True


# ============ When ============


@when(parsers.parse('I book {quantity:d} tickets'))
def when_book(client: TestClient, context: dict[str, Any], quantity: int):
    response = client.post(
        '/api/tickets',
        json={'eventId': context['event']['id'], 'quantity': quantity},
        headers=context['headers'],
    )
    context['response'] = response
    if response.status_code == 202:
        context['booking'] = response.json()


@when('I pay for the booking')
def when_pay(client: TestClient, context: dict[str, Any]):
    booking = context['booking']
    order = client.post(
        '/api/payments/orders',
        json={'amount': booking['amountDue'], 'receipt': booking['bookingId']},
        headers=context['headers'],
    )
    assert order.status_code == 200, order.text

    context['response'] = client.post(
        '/api/payments/verify',
        json={
            'razorpayOrderId': order.json()['id'],
            'razorpayPaymentId': 'pay_bdd_001',
            'razorpaySignature': 'bdd_signature',
        },
        headers=context['headers'],
    )


@when(parsers.parse('the organizer changes the ticket price to {price}'))
def when_price_changes(client: TestClient, login, context: dict[str, Any], price: str):
    response = client.put(
        f'/api/events/{context["event"]["id"]}',
        json={'ticketPrice': float(price)},
        headers=login('organizer', UserRole.ORGANIZER),
    )
    assert response.status_code == 200, response.text


# ============ Then ============


@then(parsers.parse('the booking is waiting for a payment of {amount}'))
def then_pending(context: dict[str, Any], amount: str):
    response = context['response']
    assert response.status_code == 202, response.text
    assert Decimal(str(response.json()['amountDue'])) == Decimal(amount)


@then(parsers.parse('the request fails with status {status_code:d} and code "{code}"'))
def then_fails(context: dict[str, Any], status_code: int, code: str):
    response = context['response']
    assert response.status_code == status_code, response.text
    assert response.json()['code'] == code


@then(parsers.parse('the event has {available:d} tickets available'))
def then_available(client: TestClient, context: dict[str, Any], available: int):
    event = client.get(f'/api/events/{context["event"]["id"]}').json()
    assert event['availableTickets'] == available


@then(parsers.parse('the event costs {price} per ticket'))
def then_price(client: TestClient, context: dict[str, Any], price: str):
    event = client.get(f'/api/events/{context["event"]["id"]}').json()
    assert Decimal(str(event['ticketPrice'])) == Decimal(price)


@then(parsers.parse('I hold a valid ticket for {quantity:d} tickets costing {amount}'))
def then_ticket(client: TestClient, context: dict[str, Any], quantity: int, amount: str):
    tickets = client.get('/api/tickets', headers=context['headers']).json()
    assert len(tickets) == 1, tickets
    [ticket] = tickets
    assert ticket['eventId'] == context['event']['id']
    assert ticket['quantity'] == quantity
    assert ticket['status'] == 'valid'
    assert Decimal(str(ticket['totalAmount'])) == Decimal(amount)


@then('I hold no tickets')
def then_no_tickets(client: TestClient, context: dict[str, Any]):
    assert client.get('/api/tickets', headers=context['headers']).json() == []
