from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_payment_repo import IPaymentRepo
from src.service.booking.domain.entity.payment_entity import PaymentEntity


class ListPaymentHistoryUseCase:
    def __init__(self, payment_repo: IPaymentRepo):
        self.payment_repo = payment_repo

    @classmethod
    @inject
    def depends(
        cls, payment_repo: IPaymentRepo = Depends(Provide[Container.payment_repo])
    ) -> Self:
        return cls(payment_repo=payment_repo)

    @Logger.io
    async def list_payments(self, user_id: int) -> List[PaymentEntity]:
        return await self.payment_repo.list_by_user(user_id)
