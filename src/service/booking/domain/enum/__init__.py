from src.service.booking.domain.enum.booking_attempt_state import BookingAttemptState
from src.service.booking.domain.enum.event_status import EventStatus
from src.service.booking.domain.enum.payment_status import PaymentStatus
from src.service.booking.domain.enum.reservation_state import ReservationState
from src.service.booking.domain.enum.ticket_status import TicketStatus
from src.service.booking.domain.enum.user_role import UserRole

__all__ = [
    'BookingAttemptState',
    'EventStatus',
    'PaymentStatus',
    'ReservationState',
    'TicketStatus',
    'UserRole',
]
