"""
Test Configuration and Fixtures

- Environment is pinned before any application module reads settings
- Entity factories shared by unit and integration tests
- `client` runs the real app (lifespan included) on the in-memory record store

Architecture:
- Unit tests (test/**/unit/): mocked collaborators, no app
- Integration tests (test/**/integration/): in-memory store, sqlite, TestClient
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# `settings` is instantiated at import time of core_setting
# =============================================================================
import os


def _early_setup_test_environment() -> None:
    os.environ['RECORD_STORE_BACKEND'] = 'memory'
    os.environ['SECRET_KEY'] = 'test_secret_key'
    os.environ['RAZORPAY_KEY_ID'] = ''
    os.environ['RAZORPAY_KEY_SECRET'] = ''
    os.environ['SMTP_USER'] = ''
    os.environ['SMTP_PASSWORD'] = ''
    os.environ['LOG_FILE_ENABLED'] = 'false'
    # Reaper never fires during a test; tests drive expiry explicitly
    os.environ['HOLD_REAPER_INTERVAL_SECONDS'] = '3600'


_early_setup_test_environment()

from collections.abc import Callable, Generator  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402

from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402

from src.platform.config.di import cleanup, container  # noqa: E402
from src.service.booking.domain.entity.event_entity import EventEntity  # noqa: E402
from src.service.booking.domain.entity.user_entity import UserEntity  # noqa: E402
from src.service.booking.domain.enum.user_role import UserRole  # noqa: E402
from src.service.booking.driving_adapter.http_controller.auth.jwt_auth import (  # noqa: E402
    JwtAuth,
)


# =============================================================================
# Entity factories
# =============================================================================


@pytest.fixture
def make_event() -> Callable[..., EventEntity]:
    def _make(
        *,
        organizer_id: int = 1,
        total_tickets: int = 10,
        ticket_price: Decimal | str = '100.00',
        category: str = 'music',
        title: str = 'Indie Night',
    ) -> EventEntity:
        start = datetime.now(timezone.utc) + timedelta(days=30)
        return EventEntity.create(
            organizer_id=organizer_id,
            title=title,
            description='Three bands, one stage',
            location='Bengaluru',
            start_date=start,
            end_date=start + timedelta(hours=4),
            category=category,
            total_tickets=total_tickets,
            ticket_price=Decimal(ticket_price),
        )

    return _make


@pytest.fixture
def make_user() -> Callable[..., UserEntity]:
    def _make(
        *,
        username: str = 'attendee',
        role: UserRole = UserRole.ATTENDEE,
        user_id: int | None = None,
    ) -> UserEntity:
        return UserEntity(
            id=user_id,
            username=username,
            email=f'{username}@test.com',
            full_name=username.title(),
            role=role,
        )

    return _make


# =============================================================================
# HTTP app on the in-memory record store
# =============================================================================


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    from src.main import app

    cleanup()
    with TestClient(app) as test_client:
        yield test_client
    cleanup()


@pytest.fixture
def login(client: TestClient, make_user) -> Callable[..., dict[str, str]]:
    """Store a user and return bearer headers for it."""
    jwt_auth = JwtAuth()

    def _login(username: str = 'attendee', role: UserRole = UserRole.ATTENDEE) -> dict[str, str]:
        store = container.in_memory_store()
        existing = next((u for u in store.users.values() if u.username == username), None)
        if existing is None:
            existing = make_user(username=username, role=role, user_id=store.next_id('user'))
            store.users[existing.id] = existing
        token = jwt_auth.create_jwt_token(existing)
        return {'Authorization': f'Bearer {token}'}

    return _login
