from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.platform.types import UtilsUUID7
from src.service.booking.app.service.booking_orchestrator import BookingOrchestrator
from src.service.booking.domain.entity.user_entity import UserEntity
from src.service.booking.driving_adapter.http_controller.auth.role_auth import get_current_user
from src.service.booking.driving_adapter.http_controller.schema.booking_schema import (
    BookingAttemptResponse,
)


router = APIRouter()


@router.post('/{booking_id}/cancel')
@Logger.io
@inject
async def cancel_pending_booking(
    booking_id: UtilsUUID7,
    current_user: UserEntity = Depends(get_current_user),
    orchestrator: BookingOrchestrator = Depends(Provide[Container.booking_orchestrator]),
) -> BookingAttemptResponse:
    attempt = await orchestrator.cancel_pending_booking(
        booking_id=booking_id, requester_id=current_user.id or 0
    )
    return BookingAttemptResponse.from_attempt(attempt)
