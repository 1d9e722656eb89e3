from abc import ABC, abstractmethod
from decimal import Decimal

from src.service.booking.app.dto.payment_dto import PaymentOrder, PaymentVerification


class IPaymentProvider(ABC):
    @property
    @abstractmethod
    def is_mock(self) -> bool:
        pass

    @abstractmethod
    async def create_order(self, *, amount: Decimal, currency: str, receipt: str) -> PaymentOrder:
        """
        Raises:
            ProviderUnavailableError: transport failure or provider-side error
        """
        pass

    @abstractmethod
    async def verify_payment(
        self, *, provider_order_id: str, provider_payment_id: str, signature: str
    ) -> PaymentVerification:
        """
        Returns a negative verification for a bad signature or an unpaid order.

        Raises:
            ProviderUnavailableError: the provider could not be reached
        """
        pass

    async def aclose(self) -> None:
        """Release transport resources; nothing to do by default."""
        return None
