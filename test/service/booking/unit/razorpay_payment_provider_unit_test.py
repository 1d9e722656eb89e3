from decimal import Decimal

import httpx
import orjson
import pytest

from src.platform.exception.exceptions import ProviderUnavailableError
from src.service.booking.driven_adapter.payment.mock_payment_provider import MockPaymentProvider
from src.service.booking.driven_adapter.payment.razorpay_payment_provider import (
    RazorpayPaymentProvider,
    compute_signature,
)


pytestmark = pytest.mark.unit

KEY_SECRET = 'rzp_test_secret'


def _provider(handler) -> RazorpayPaymentProvider:
    return RazorpayPaymentProvider(
        key_id='rzp_test_key',
        key_secret=KEY_SECRET,
        base_url='https://api.razorpay.test/v1',
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )


def _signature(order_id: str, payment_id: str) -> str:
    return compute_signature(
        provider_order_id=order_id, provider_payment_id=payment_id, secret=KEY_SECRET
    )


class TestCreateOrder:
    @pytest.mark.asyncio
    async def test_amount_is_sent_in_paise(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen['path'] = request.url.path
            seen['body'] = orjson.loads(request.content)
            seen['auth'] = request.headers['authorization']
            return httpx.Response(
                200,
                json={
                    'id': 'order_abc',
                    'amount': 149997,
                    'currency': 'INR',
                    'receipt': 'booking-1',
                    'status': 'created',
                },
            )

        provider = _provider(handler)
        order = await provider.create_order(
            amount=Decimal('1499.97'), currency='INR', receipt='booking-1'
        )
        await provider.aclose()

        assert seen['path'] == '/v1/orders'
        assert seen['body'] == {'amount': 149997, 'currency': 'INR', 'receipt': 'booking-1'}
        assert seen['auth'].startswith('Basic ')
        assert order.id == 'order_abc'
        assert order.amount == Decimal('1499.97')

    @pytest.mark.asyncio
    async def test_server_error_is_provider_unavailable(self):
        provider = _provider(lambda request: httpx.Response(502, json={}))

        with pytest.raises(ProviderUnavailableError):
            await provider.create_order(amount=Decimal('10'), currency='INR', receipt='b')

    @pytest.mark.asyncio
    async def test_transport_error_is_provider_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError('connection refused', request=request)

        provider = _provider(handler)

        with pytest.raises(ProviderUnavailableError):
            await provider.create_order(amount=Decimal('10'), currency='INR', receipt='b')


class TestVerifyPayment:
    @pytest.mark.asyncio
    async def test_valid_signature_and_captured_payment(self):
        provider = _provider(
            lambda request: httpx.Response(
                200, json={'id': 'pay_1', 'order_id': 'order_1', 'status': 'captured'}
            )
        )

        result = await provider.verify_payment(
            provider_order_id='order_1',
            provider_payment_id='pay_1',
            signature=_signature('order_1', 'pay_1'),
        )

        assert result.verified
        assert result.status == 'captured'

    @pytest.mark.asyncio
    async def test_bad_signature_never_calls_provider(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={})

        provider = _provider(handler)
        result = await provider.verify_payment(
            provider_order_id='order_1', provider_payment_id='pay_1', signature='forged'
        )

        assert not result.verified
        assert result.reason == 'bad_signature'
        assert calls == []

    @pytest.mark.asyncio
    async def test_payment_for_another_order_is_rejected(self):
        provider = _provider(
            lambda request: httpx.Response(
                200, json={'id': 'pay_1', 'order_id': 'order_other', 'status': 'captured'}
            )
        )

        result = await provider.verify_payment(
            provider_order_id='order_1',
            provider_payment_id='pay_1',
            signature=_signature('order_1', 'pay_1'),
        )

        assert not result.verified
        assert result.reason == 'order_mismatch'

    @pytest.mark.asyncio
    async def test_failed_payment_is_not_verified(self):
        provider = _provider(
            lambda request: httpx.Response(
                200, json={'id': 'pay_1', 'order_id': 'order_1', 'status': 'failed'}
            )
        )

        result = await provider.verify_payment(
            provider_order_id='order_1',
            provider_payment_id='pay_1',
            signature=_signature('order_1', 'pay_1'),
        )

        assert not result.verified
        assert result.reason == 'payment_failed'

    @pytest.mark.asyncio
    async def test_unknown_payment_is_not_verified(self):
        provider = _provider(lambda request: httpx.Response(404, json={'error': {}}))

        result = await provider.verify_payment(
            provider_order_id='order_1',
            provider_payment_id='pay_1',
            signature=_signature('order_1', 'pay_1'),
        )

        assert not result.verified
        assert result.reason == 'unknown_payment'

    @pytest.mark.asyncio
    async def test_provider_outage_raises(self):
        provider = _provider(lambda request: httpx.Response(503, json={}))

        with pytest.raises(ProviderUnavailableError):
            await provider.verify_payment(
                provider_order_id='order_1',
                provider_payment_id='pay_1',
                signature=_signature('order_1', 'pay_1'),
            )


class TestMockPaymentProvider:
    @pytest.mark.asyncio
    async def test_fabricates_mock_orders_and_verifies(self):
        provider = MockPaymentProvider()

        order = await provider.create_order(amount=Decimal('10'), currency='INR', receipt='b')
        result = await provider.verify_payment(
            provider_order_id=order.id, provider_payment_id='pay_x', signature=''
        )

        assert provider.is_mock
        assert order.id.startswith('order_mock_')
        assert result.verified

    @pytest.mark.asyncio
    async def test_can_be_told_to_reject(self):
        provider = MockPaymentProvider(fail_verification=True)

        result = await provider.verify_payment(
            provider_order_id='order_mock_1', provider_payment_id='pay_x', signature=''
        )

        assert not result.verified
