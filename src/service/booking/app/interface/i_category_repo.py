from abc import ABC, abstractmethod
from typing import Optional

from src.service.booking.domain.entity.category_entity import CategoryEntity


class ICategoryRepo(ABC):
    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[CategoryEntity]:
        pass

    @abstractmethod
    async def create(self, category: CategoryEntity) -> CategoryEntity:
        pass

    @abstractmethod
    async def adjust_event_count(self, *, name: str, delta: int) -> Optional[int]:
        """Add `delta` to the counter, never going below 0. None when the category is unknown."""
        pass
