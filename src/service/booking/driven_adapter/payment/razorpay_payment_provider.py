"""
Razorpay adapter

Orders: POST /orders with the amount in paise.
Verification: HMAC-SHA256 of "{order_id}|{payment_id}" keyed with the API
secret, then GET /payments/{id} to confirm the payment belongs to the order
and has been authorized or captured.
"""

from decimal import Decimal
import hashlib
import hmac

import httpx
import orjson

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import ProviderUnavailableError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.dto.payment_dto import PaymentOrder, PaymentVerification
from src.service.booking.app.interface.i_payment_provider import IPaymentProvider
from src.service.booking.domain.value_object.money import from_minor_units, to_minor_units


SETTLED_PAYMENT_STATUSES = {'authorized', 'captured'}


def compute_signature(*, provider_order_id: str, provider_payment_id: str, secret: str) -> str:
    message = f'{provider_order_id}|{provider_payment_id}'.encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


class RazorpayPaymentProvider(IPaymentProvider):
    def __init__(
        self,
        *,
        key_id: str,
        key_secret: str,
        base_url: str = settings.RAZORPAY_API_BASE_URL,
        timeout: float = settings.PAYMENT_PROVIDER_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._key_secret = key_secret
        self._client = httpx.AsyncClient(
            base_url=base_url,
            auth=(key_id, key_secret),
            timeout=timeout,
            transport=transport,
        )

    @property
    def is_mock(self) -> bool:
        return False

    @Logger.io
    async def create_order(self, *, amount: Decimal, currency: str, receipt: str) -> PaymentOrder:
        payload = {'amount': to_minor_units(amount), 'currency': currency, 'receipt': receipt}
        data = await self._request('POST', '/orders', content=orjson.dumps(payload))
        Logger.base.info(f'💳 [PAYMENT] Razorpay order {data["id"]} created for {receipt}')
        return PaymentOrder(
            id=data['id'],
            amount=from_minor_units(data['amount']),
            currency=data.get('currency', currency),
            receipt=data.get('receipt') or receipt,
            status=data.get('status', 'created'),
        )

    @Logger.io
    async def verify_payment(
        self, *, provider_order_id: str, provider_payment_id: str, signature: str
    ) -> PaymentVerification:
        expected = compute_signature(
            provider_order_id=provider_order_id,
            provider_payment_id=provider_payment_id,
            secret=self._key_secret,
        )
        if not hmac.compare_digest(expected, signature or ''):
            return PaymentVerification(
                verified=False, provider_payment_id=provider_payment_id, reason='bad_signature'
            )

        try:
            data = await self._request('GET', f'/payments/{provider_payment_id}')
        except httpx.HTTPStatusError as e:
            if e.response.status_code >= 500:
                raise ProviderUnavailableError(
                    f'Razorpay returned {e.response.status_code}'
                ) from e
            return PaymentVerification(
                verified=False, provider_payment_id=provider_payment_id, reason='unknown_payment'
            )

        status = data.get('status')
        if data.get('order_id') != provider_order_id:
            return PaymentVerification(
                verified=False,
                provider_payment_id=provider_payment_id,
                status=status,
                reason='order_mismatch',
            )
        return PaymentVerification(
            verified=status in SETTLED_PAYMENT_STATUSES,
            provider_payment_id=provider_payment_id,
            status=status,
            reason=None if status in SETTLED_PAYMENT_STATUSES else f'payment_{status}',
        )

    async def _request(self, method: str, url: str, **kwargs) -> dict:
        headers = {'Content-Type': 'application/json'}
        try:
            response = await self._client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise ProviderUnavailableError(f'Razorpay request failed: {e}') from e

        if response.status_code >= 500:
            raise ProviderUnavailableError(f'Razorpay returned {response.status_code}')
        if method == 'GET':
            # Caller decides what a 4xx means for verification
            response.raise_for_status()
        elif response.is_error:
            raise ProviderUnavailableError(
                f'Razorpay rejected {method} {url}: {response.status_code} {response.text}'
            )
        return orjson.loads(response.content)

    async def aclose(self) -> None:
        await self._client.aclose()
