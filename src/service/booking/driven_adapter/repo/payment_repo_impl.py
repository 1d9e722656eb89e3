from typing import AsyncContextManager, Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_payment_repo import IPaymentRepo
from src.service.booking.domain.entity.payment_entity import PaymentEntity
from src.service.booking.domain.enum.payment_status import PaymentStatus
from src.service.booking.driven_adapter.model.payment_model import PaymentModel


class PaymentRepoImpl(IPaymentRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @Logger.io
    async def create(self, payment: PaymentEntity) -> PaymentEntity:
        async with self.session_factory() as session:
            payment_model = PaymentModel(
                user_id=payment.user_id,
                ticket_id=payment.ticket_id,
                provider_order_id=payment.provider_order_id,
                provider_payment_id=payment.provider_payment_id,
                amount=payment.amount,
                status=payment.status.value,
            )
            session.add(payment_model)
            await session.commit()
            await session.refresh(payment_model)
            return self._model_to_entity(payment_model)

    @Logger.io
    async def get_by_id(self, payment_id: int) -> Optional[PaymentEntity]:
        async with self.session_factory() as session:
            payment_model = await session.get(PaymentModel, payment_id)
            return self._model_to_entity(payment_model) if payment_model else None

    @Logger.io
    async def get_by_provider_order_id(self, provider_order_id: str) -> Optional[PaymentEntity]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(PaymentModel).where(PaymentModel.provider_order_id == provider_order_id)
            )
            payment_model = result.scalar_one_or_none()
            return self._model_to_entity(payment_model) if payment_model else None

    @Logger.io
    async def list_by_user(self, user_id: int) -> List[PaymentEntity]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(PaymentModel)
                .where(PaymentModel.user_id == user_id)
                .order_by(PaymentModel.payment_date.desc(), PaymentModel.id.desc())
            )
            return [self._model_to_entity(model) for model in result.scalars()]

    @Logger.io
    async def update(self, payment: PaymentEntity) -> PaymentEntity:
        async with self.session_factory() as session:
            payment_model = await session.get(PaymentModel, payment.id)
            if payment_model is None:
                raise NotFoundError(f'Payment {payment.id} not found')
            payment_model.status = payment.status.value
            payment_model.provider_payment_id = payment.provider_payment_id
            payment_model.ticket_id = payment.ticket_id
            if payment.payment_date is not None:
                payment_model.payment_date = payment.payment_date
            await session.commit()
            await session.refresh(payment_model)
            return self._model_to_entity(payment_model)

    def _model_to_entity(self, payment_model: PaymentModel) -> PaymentEntity:
        return PaymentEntity(
            id=payment_model.id,
            user_id=payment_model.user_id,
            ticket_id=payment_model.ticket_id,
            provider_order_id=payment_model.provider_order_id,
            provider_payment_id=payment_model.provider_payment_id,
            amount=payment_model.amount,
            status=PaymentStatus(payment_model.status),
            payment_date=payment_model.payment_date,
        )
