from abc import ABC, abstractmethod
from typing import List, Optional

from src.service.booking.domain.entity.payment_entity import PaymentEntity


class IPaymentRepo(ABC):
    @abstractmethod
    async def create(self, payment: PaymentEntity) -> PaymentEntity:
        pass

    @abstractmethod
    async def get_by_id(self, payment_id: int) -> Optional[PaymentEntity]:
        pass

    @abstractmethod
    async def get_by_provider_order_id(self, provider_order_id: str) -> Optional[PaymentEntity]:
        pass

    @abstractmethod
    async def list_by_user(self, user_id: int) -> List[PaymentEntity]:
        pass

    @abstractmethod
    async def update(self, payment: PaymentEntity) -> PaymentEntity:
        pass
