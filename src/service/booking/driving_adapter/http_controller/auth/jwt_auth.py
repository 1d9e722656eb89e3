"""
Bearer token identity

Tokens are self-contained: the current user is rebuilt from the payload,
no record store lookup per request.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import jwt

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import AuthenticationError
from src.service.booking.domain.entity.user_entity import UserEntity
from src.service.booking.domain.enum.user_role import UserRole


class JwtAuth:
    def __init__(self) -> None:
        self.secret = settings.SECRET_KEY.get_secret_value()
        self.algorithm = settings.ALGORITHM
        self.token_expire_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES

    def create_jwt_token(self, user_entity: UserEntity) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            'sub': str(user_entity.id),
            'exp': now + timedelta(minutes=self.token_expire_minutes),
            'iat': now,
            'user_id': user_entity.id,
            'username': user_entity.username,
            'email': user_entity.email,
            'full_name': user_entity.full_name,
            'role': user_entity.role.value,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_jwt_token(self, token: str) -> Dict:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError('Token expired') from e
        except jwt.PyJWTError as e:
            raise AuthenticationError('Invalid token') from e

    def get_current_user_info_from_jwt(self, token: Optional[str]) -> UserEntity:
        if not token:
            raise AuthenticationError('Not authenticated')

        payload = self.decode_jwt_token(token)
        user_id = payload.get('user_id')
        email = payload.get('email')
        role = payload.get('role')
        if not user_id or not email or role not in {r.value for r in UserRole}:
            raise AuthenticationError('Invalid token')

        return UserEntity(
            id=user_id,
            username=payload.get('username') or email,
            email=email,
            full_name=payload.get('full_name') or '',
            role=UserRole(role),
        )
