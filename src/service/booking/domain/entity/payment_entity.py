from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

import attrs

from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.booking.domain.enum.payment_status import PaymentStatus
from src.service.booking.domain.value_object.money import to_money


@attrs.define
class PaymentEntity:
    user_id: int
    provider_order_id: str
    amount: Decimal = attrs.field(converter=to_money)
    status: PaymentStatus = PaymentStatus.CREATED
    provider_payment_id: Optional[str] = None
    ticket_id: Optional[int] = None
    payment_date: Optional[datetime] = None
    id: Optional[int] = None

    @classmethod
    def create(cls, *, user_id: int, provider_order_id: str, amount: Decimal) -> 'PaymentEntity':
        return cls(
            user_id=user_id,
            provider_order_id=provider_order_id,
            amount=amount,
            status=PaymentStatus.CREATED,
            payment_date=datetime.now(timezone.utc),
        )

    @Logger.io
    def mark_captured(self, *, provider_payment_id: str, ticket_id: int) -> 'PaymentEntity':
        if self.status not in (PaymentStatus.CREATED, PaymentStatus.AUTHORIZED):
            raise DomainError(f'Cannot capture a payment that is {self.status}', 409)
        return attrs.evolve(
            self,
            status=PaymentStatus.CAPTURED,
            provider_payment_id=provider_payment_id,
            ticket_id=ticket_id,
            payment_date=datetime.now(timezone.utc),
        )

    @Logger.io
    def mark_failed(self, *, provider_payment_id: Optional[str] = None) -> 'PaymentEntity':
        if self.status == PaymentStatus.CAPTURED:
            raise DomainError('Cannot fail a captured payment', 409)
        return attrs.evolve(
            self,
            status=PaymentStatus.FAILED,
            provider_payment_id=provider_payment_id or self.provider_payment_id,
        )
