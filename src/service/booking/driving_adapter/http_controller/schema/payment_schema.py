from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.platform.types import UtilsUUID7
from src.service.booking.domain.entity.payment_entity import PaymentEntity
from src.service.booking.driving_adapter.http_controller.schema.base_schema import (
    CamelModel,
    MoneyAmount,
)
from src.service.booking.driving_adapter.http_controller.schema.ticket_schema import (
    TicketResponse,
)


class CreatePaymentOrderRequest(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            'example': {
                'amount': 1000.0,
                'currency': 'INR',
                'receipt': '01936d8f-5e73-7c4e-a9c5-123456789abc',  # booking id
            }
        },
    )

    amount: Decimal = Field(ge=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    receipt: UtilsUUID7


class PaymentOrderResponse(CamelModel):
    id: str
    amount: MoneyAmount
    currency: str
    receipt: str


class VerifyPaymentRequest(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            'example': {
                'razorpayPaymentId': 'pay_29QQoUBi66xm2f',
                'razorpayOrderId': 'order_9A33XWu170gUtm',
                'razorpaySignature': '9ef4dffbfd84f1318f6739a3ce19f9d85851857ae648f114332d8401e0949a3d',
            }
        },
    )

    razorpay_payment_id: str = Field(min_length=1)
    razorpay_order_id: str = Field(min_length=1)
    razorpay_signature: str = Field(min_length=1)


class VerifyPaymentResponse(CamelModel):
    success: bool
    ticket: TicketResponse


class PaymentResponse(CamelModel):
    id: int
    provider_order_id: str
    provider_payment_id: Optional[str] = None
    ticket_id: Optional[int] = None
    amount: MoneyAmount
    status: str
    payment_date: Optional[datetime] = None

    @classmethod
    def from_entity(cls, payment: PaymentEntity) -> 'PaymentResponse':
        return cls(
            id=payment.id or 0,
            provider_order_id=payment.provider_order_id,
            provider_payment_id=payment.provider_payment_id,
            ticket_id=payment.ticket_id,
            amount=payment.amount,
            status=payment.status.value,
            payment_date=payment.payment_date,
        )
