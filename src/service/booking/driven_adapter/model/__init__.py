"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.booking.driven_adapter.model.category_model import CategoryModel
from src.service.booking.driven_adapter.model.event_model import EventModel
from src.service.booking.driven_adapter.model.payment_model import PaymentModel
from src.service.booking.driven_adapter.model.ticket_model import TicketModel
from src.service.booking.driven_adapter.model.user_model import UserModel

__all__ = [
    'CategoryModel',
    'EventModel',
    'PaymentModel',
    'TicketModel',
    'UserModel',
]
