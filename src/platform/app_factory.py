"""
EventPulse FastAPI application

Routers for tickets, payments, bookings and events, plus /health (reports
whether payments are real or mocked) and /metrics.
"""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Any

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.exception.exception_handlers import register_exception_handlers
from src.service.booking.driving_adapter.http_controller import (
    booking_controller,
    event_controller,
    payment_controller,
    ticket_controller,
)


API_ROUTES: list[tuple[str, str, APIRouter]] = [
    ('/api/tickets', 'ticket', ticket_controller.router),
    ('/api/payments', 'payment', payment_controller.router),
    ('/api/bookings', 'booking', booking_controller.router),
    ('/api/events', 'event', event_controller.router),
]


def create_app(*, lifespan: Callable[[FastAPI], AbstractAsyncContextManager[Any]]) -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        description='Event ticket inventory and booking',
        version=settings.VERSION,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,  # type: ignore
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )
    register_exception_handlers(app)

    for prefix, tag, router in API_ROUTES:
        app.include_router(router, prefix=prefix, tags=[tag])

    @app.get('/health')
    async def health_check() -> dict[str, str]:
        payment_provider = container.payment_provider()
        return {
            'status': 'healthy',
            'service': settings.PROJECT_NAME,
            'payment_mode': 'mock' if payment_provider.is_mock else 'live',
            'record_store': settings.RECORD_STORE_BACKEND,
        }

    @app.get('/metrics')
    async def get_metrics() -> PlainTextResponse:
        return PlainTextResponse(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app
