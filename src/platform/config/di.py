"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings, settings
from src.platform.database.orm_db_setting import Database
from src.service.booking.app.service.booking_orchestrator import BookingOrchestrator
from src.service.booking.app.service.inventory_guard import InventoryGuard
from src.service.booking.driven_adapter.notification.notification_dispatcher import (
    NotificationDispatcher,
)
from src.service.booking.driven_adapter.notification.notifier_factory import build_notifier
from src.service.booking.driven_adapter.payment.payment_provider_factory import (
    build_payment_provider,
)
from src.service.booking.driven_adapter.repo.category_repo_impl import CategoryRepoImpl
from src.service.booking.driven_adapter.repo.event_repo_impl import EventRepoImpl
from src.service.booking.driven_adapter.repo.in_memory_repo_impl import (
    InMemoryCategoryRepo,
    InMemoryEventRepo,
    InMemoryPaymentRepo,
    InMemoryRecordStore,
    InMemoryTicketRepo,
    InMemoryUserRepo,
)
from src.service.booking.driven_adapter.repo.payment_repo_impl import PaymentRepoImpl
from src.service.booking.driven_adapter.repo.ticket_repo_impl import TicketRepoImpl
from src.service.booking.driven_adapter.repo.user_repo_impl import UserRepoImpl
from src.service.booking.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


def _record_store_backend() -> str:
    return settings.RECORD_STORE_BACKEND


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database
    database = providers.Singleton(Database)
    in_memory_store = providers.Singleton(InMemoryRecordStore)

    # Repositories (postgres: stateless, session per call / memory: shared store)
    event_repo = providers.Selector(
        _record_store_backend,
        postgres=providers.Singleton(EventRepoImpl, session_factory=database.provided.session),
        memory=providers.Singleton(InMemoryEventRepo, store=in_memory_store),
    )
    ticket_repo = providers.Selector(
        _record_store_backend,
        postgres=providers.Singleton(TicketRepoImpl, session_factory=database.provided.session),
        memory=providers.Singleton(InMemoryTicketRepo, store=in_memory_store),
    )
    payment_repo = providers.Selector(
        _record_store_backend,
        postgres=providers.Singleton(PaymentRepoImpl, session_factory=database.provided.session),
        memory=providers.Singleton(InMemoryPaymentRepo, store=in_memory_store),
    )
    category_repo = providers.Selector(
        _record_store_backend,
        postgres=providers.Singleton(
            CategoryRepoImpl, session_factory=database.provided.session
        ),
        memory=providers.Singleton(InMemoryCategoryRepo, store=in_memory_store),
    )
    user_repo = providers.Selector(
        _record_store_backend,
        postgres=providers.Singleton(UserRepoImpl, session_factory=database.provided.session),
        memory=providers.Singleton(InMemoryUserRepo, store=in_memory_store),
    )

    # Auth service
    jwt_auth = providers.Singleton(JwtAuth)

    # External collaborators (mock when credentials are absent)
    payment_provider = providers.Singleton(build_payment_provider, settings=config_service)
    notifier = providers.Singleton(build_notifier, settings=config_service)
    notification_dispatcher = providers.Singleton(NotificationDispatcher)

    # Booking core (stateful: one instance per process)
    inventory_guard = providers.Singleton(InventoryGuard, event_repo=event_repo)
    booking_orchestrator = providers.Singleton(
        BookingOrchestrator,
        inventory_guard=inventory_guard,
        event_repo=event_repo,
        ticket_repo=ticket_repo,
        payment_repo=payment_repo,
        user_repo=user_repo,
        payment_provider=payment_provider,
        notifier=notifier,
        notification_dispatcher=notification_dispatcher,
    )


container = Container()


def cleanup() -> None:
    container.reset_singletons()
