"""
Production FastAPI Application

API plus the background hold reaper that returns unpaid reservations to sale.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

import anyio
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.orm_db_setting import create_db_and_tables, dispose_engine
from src.platform.logging.loguru_io import Logger


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [EventPulse] Starting up...')

    # Wire dependency injection for all modules
    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [EventPulse] Dependency injection wired')

    # Initialize database
    if settings.RECORD_STORE_BACKEND == 'postgres':
        await create_db_and_tables()
        Logger.base.info('🗄️  [EventPulse] Database tables ready')
    else:
        Logger.base.warning('🧪 [EventPulse] In-memory record store: data is lost on restart')

    payment_provider = container.payment_provider()
    if payment_provider.is_mock:
        Logger.base.warning('💳 [EventPulse] Razorpay credentials missing, using mock payments')
    if settings.is_mock_email:
        Logger.base.warning('📧 [EventPulse] SMTP credentials missing, emails are only logged')

    orchestrator = container.booking_orchestrator()
    dispatcher = container.notification_dispatcher()

    # Create task group for background tasks (hold reaper)
    async with anyio.create_task_group() as tg:
        tg.start_soon(
            lambda: orchestrator.run_hold_reaper(
                interval_seconds=settings.HOLD_REAPER_INTERVAL_SECONDS,
                max_age=timedelta(seconds=settings.RESERVATION_HOLD_TTL_SECONDS),
            )
        )
        Logger.base.info(
            f'🧹 [EventPulse] Hold reaper started '
            f'(ttl={settings.RESERVATION_HOLD_TTL_SECONDS}s, '
            f'every {settings.HOLD_REAPER_INTERVAL_SECONDS}s)'
        )
        Logger.base.info('✅ [EventPulse] Ready to serve requests')

        yield

        Logger.base.info('🛑 [EventPulse] Shutting down...')
        tg.cancel_scope.cancel()

    # Let queued notifications finish
    await dispatcher.drain()
    Logger.base.info('📧 [EventPulse] Notifications drained')

    await payment_provider.aclose()

    if settings.RECORD_STORE_BACKEND == 'postgres':
        await dispose_engine()
        Logger.base.info('🗄️  [EventPulse] Database engine disposed')

    # Unwire DI
    container.unwire()

    Logger.base.info('👋 [EventPulse] Shutdown complete')


# Create FastAPI app using shared factory
app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
