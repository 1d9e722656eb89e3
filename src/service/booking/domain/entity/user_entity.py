from datetime import datetime
from typing import Optional

import attrs

from src.service.booking.domain.enum.user_role import UserRole


@attrs.define
class UserEntity:
    username: str
    email: str
    full_name: str
    role: UserRole = UserRole.ATTENDEE
    hashed_password: str = ''
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def can_manage_events(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.ORGANIZER)
