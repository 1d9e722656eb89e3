from typing import AsyncContextManager, Callable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_user_repo import IUserRepo
from src.service.booking.domain.entity.user_entity import UserEntity
from src.service.booking.domain.enum.user_role import UserRole
from src.service.booking.driven_adapter.model.user_model import UserModel


class UserRepoImpl(IUserRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @Logger.io
    async def get_by_id(self, user_id: int) -> Optional[UserEntity]:
        async with self.session_factory() as session:
            user_model = await session.get(UserModel, user_id)
            return self._model_to_entity(user_model) if user_model else None

    @Logger.io
    async def get_by_email(self, email: str) -> Optional[UserEntity]:
        async with self.session_factory() as session:
            result = await session.execute(select(UserModel).where(UserModel.email == email))
            user_model = result.scalar_one_or_none()
            return self._model_to_entity(user_model) if user_model else None

    @Logger.io
    async def create(self, user: UserEntity) -> UserEntity:
        async with self.session_factory() as session:
            user_model = UserModel(
                username=user.username,
                email=user.email,
                full_name=user.full_name,
                hashed_password=user.hashed_password,
                role=user.role.value,
            )
            session.add(user_model)
            await session.commit()
            await session.refresh(user_model)
            return self._model_to_entity(user_model)

    def _model_to_entity(self, user_model: UserModel) -> UserEntity:
        return UserEntity(
            id=user_model.id,
            username=user_model.username,
            email=user_model.email,
            full_name=user_model.full_name,
            hashed_password=user_model.hashed_password,
            role=UserRole(user_model.role),
            created_at=user_model.created_at,
        )
