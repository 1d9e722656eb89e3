from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.platform.config.di import Container
from src.platform.exception.exceptions import ForbiddenError
from src.service.booking.domain.entity.user_entity import UserEntity
from src.service.booking.domain.enum.user_role import UserRole
from src.service.booking.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


bearer_scheme = HTTPBearer(auto_error=False)


class RoleAuthStrategy:
    @staticmethod
    def can_manage_events(user: UserEntity) -> bool:
        return user.role in (UserRole.ADMIN, UserRole.ORGANIZER)

    @staticmethod
    def is_admin(user: UserEntity) -> bool:
        return user.role == UserRole.ADMIN


@inject
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth]),
) -> UserEntity:
    return jwt_auth.get_current_user_info_from_jwt(
        credentials.credentials if credentials else None
    )


async def require_organizer_or_admin(
    current_user: UserEntity = Depends(get_current_user),
) -> UserEntity:
    if not RoleAuthStrategy.can_manage_events(current_user):
        raise ForbiddenError('Only organizers or admins can perform this action')
    return current_user
