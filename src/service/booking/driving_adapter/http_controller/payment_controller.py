from typing import List

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.query.list_payment_history_use_case import (
    ListPaymentHistoryUseCase,
)
from src.service.booking.app.service.booking_orchestrator import BookingOrchestrator
from src.service.booking.domain.entity.user_entity import UserEntity
from src.service.booking.driving_adapter.http_controller.auth.role_auth import get_current_user
from src.service.booking.driving_adapter.http_controller.schema.payment_schema import (
    CreatePaymentOrderRequest,
    PaymentOrderResponse,
    PaymentResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from src.service.booking.driving_adapter.http_controller.schema.ticket_schema import (
    TicketResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('/orders')
@Logger.io
@inject
async def create_payment_order(
    request: CreatePaymentOrderRequest,
    current_user: UserEntity = Depends(get_current_user),
    orchestrator: BookingOrchestrator = Depends(Provide[Container.booking_orchestrator]),
) -> PaymentOrderResponse:
    # `receipt` carries the booking id returned by POST /api/tickets
    intent = await orchestrator.create_payment_intent(
        booking_id=request.receipt,
        requester_id=current_user.id or 0,
        expected_amount=request.amount,
        currency=request.currency,
    )
    return PaymentOrderResponse(
        id=intent.provider_order_id,
        amount=intent.amount,
        currency=intent.currency,
        receipt=str(intent.booking_id),
    )


@router.post('/verify')
@Logger.io
@inject
async def verify_payment(
    request: VerifyPaymentRequest,
    current_user: UserEntity = Depends(get_current_user),
    orchestrator: BookingOrchestrator = Depends(Provide[Container.booking_orchestrator]),
) -> VerifyPaymentResponse:
    with tracer.start_as_current_span('controller.verify_payment') as span:
        span.set_attribute('provider_order_id', request.razorpay_order_id)
        ticket = await orchestrator.confirm_payment(
            provider_order_id=request.razorpay_order_id,
            provider_payment_id=request.razorpay_payment_id,
            provider_signature=request.razorpay_signature,
            requester_id=current_user.id or 0,
        )
        return VerifyPaymentResponse(success=True, ticket=TicketResponse.from_entity(ticket))


@router.get('/history', response_model=List[PaymentResponse])
@Logger.io
async def list_payment_history(
    current_user: UserEntity = Depends(get_current_user),
    use_case: ListPaymentHistoryUseCase = Depends(ListPaymentHistoryUseCase.depends),
) -> List[PaymentResponse]:
    payments = await use_case.list_payments(current_user.id or 0)
    return [PaymentResponse.from_entity(payment) for payment in payments]
