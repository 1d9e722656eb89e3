from abc import ABC, abstractmethod
from typing import Optional

from src.service.booking.domain.entity.user_entity import UserEntity


class IUserRepo(ABC):
    @abstractmethod
    async def get_by_id(self, user_id: int) -> Optional[UserEntity]:
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[UserEntity]:
        pass

    @abstractmethod
    async def create(self, user: UserEntity) -> UserEntity:
        pass
