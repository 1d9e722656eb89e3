"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.booking.app.command import (
    create_event_use_case,
    delete_event_use_case,
    update_event_use_case,
)
from src.service.booking.app.query import (
    get_event_use_case,
    list_event_tickets_use_case,
    list_my_tickets_use_case,
    list_payment_history_use_case,
)
from src.service.booking.driving_adapter.http_controller import (
    booking_controller,
    payment_controller,
    ticket_controller,
)
from src.service.booking.driving_adapter.http_controller.auth import role_auth


WIRE_MODULES: list[ModuleType] = [
    create_event_use_case,
    delete_event_use_case,
    update_event_use_case,
    get_event_use_case,
    list_event_tickets_use_case,
    list_my_tickets_use_case,
    list_payment_history_use_case,
    ticket_controller,
    payment_controller,
    booking_controller,
    role_auth,
]
