from src.platform.config.core_setting import Settings
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_payment_provider import IPaymentProvider
from src.service.booking.driven_adapter.payment.mock_payment_provider import MockPaymentProvider
from src.service.booking.driven_adapter.payment.razorpay_payment_provider import (
    RazorpayPaymentProvider,
)


def build_payment_provider(settings: Settings) -> IPaymentProvider:
    if settings.is_mock_payment:
        Logger.base.warning(
            '🧪 [MOCK-PAYMENT] RAZORPAY_KEY_ID/RAZORPAY_KEY_SECRET not set, '
            'payments are simulated and always succeed'
        )
        return MockPaymentProvider()
    return RazorpayPaymentProvider(
        key_id=settings.RAZORPAY_KEY_ID,
        key_secret=settings.RAZORPAY_KEY_SECRET.get_secret_value(),
        base_url=settings.RAZORPAY_API_BASE_URL,
        timeout=settings.PAYMENT_PROVIDER_TIMEOUT_SECONDS,
    )
