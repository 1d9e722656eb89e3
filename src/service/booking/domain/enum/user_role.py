from enum import StrEnum


class UserRole(StrEnum):
    ADMIN = 'admin'
    ORGANIZER = 'organizer'
    ATTENDEE = 'attendee'
