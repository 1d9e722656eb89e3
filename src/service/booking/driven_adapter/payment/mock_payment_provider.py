from decimal import Decimal

import uuid_utils

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.dto.payment_dto import PaymentOrder, PaymentVerification
from src.service.booking.app.interface.i_payment_provider import IPaymentProvider


class MockPaymentProvider(IPaymentProvider):
    """
    Stand-in used when no Razorpay credentials are configured.

    Every order verifies successfully, so every call is logged at WARNING to
    keep it obvious that no real money is moving.
    """

    def __init__(self, *, fail_verification: bool = False) -> None:
        self.fail_verification = fail_verification
        self.orders: dict[str, PaymentOrder] = {}

    @property
    def is_mock(self) -> bool:
        return True

    @Logger.io
    async def create_order(self, *, amount: Decimal, currency: str, receipt: str) -> PaymentOrder:
        order = PaymentOrder(
            id=f'order_mock_{uuid_utils.uuid7().hex[-14:]}',
            amount=amount,
            currency=currency,
            receipt=receipt,
        )
        self.orders[order.id] = order
        Logger.base.warning(
            f'🧪 [MOCK-PAYMENT] created order {order.id} for {amount} {currency} ({receipt})'
        )
        return order

    @Logger.io
    async def verify_payment(
        self, *, provider_order_id: str, provider_payment_id: str, signature: str
    ) -> PaymentVerification:
        verified = not self.fail_verification
        Logger.base.warning(
            f'🧪 [MOCK-PAYMENT] verification for order {provider_order_id} '
            f'payment {provider_payment_id}: {"accepted" if verified else "rejected"}'
        )
        return PaymentVerification(
            verified=verified,
            provider_payment_id=provider_payment_id,
            status='captured' if verified else 'failed',
            reason=None if verified else 'mock_rejected',
        )
