from typing import AsyncContextManager, Callable, Optional

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_category_repo import ICategoryRepo
from src.service.booking.domain.entity.category_entity import CategoryEntity
from src.service.booking.driven_adapter.model.category_model import CategoryModel


class CategoryRepoImpl(ICategoryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @Logger.io
    async def get_by_name(self, name: str) -> Optional[CategoryEntity]:
        async with self.session_factory() as session:
            result = await session.execute(select(CategoryModel).where(CategoryModel.name == name))
            category_model = result.scalar_one_or_none()
            return self._model_to_entity(category_model) if category_model else None

    @Logger.io
    async def create(self, category: CategoryEntity) -> CategoryEntity:
        async with self.session_factory() as session:
            category_model = CategoryModel(
                name=category.name, icon=category.icon, event_count=category.event_count
            )
            session.add(category_model)
            await session.commit()
            await session.refresh(category_model)
            return self._model_to_entity(category_model)

    @Logger.io
    async def adjust_event_count(self, *, name: str, delta: int) -> Optional[int]:
        adjusted = CategoryModel.event_count + delta
        async with self.session_factory() as session:
            result = await session.execute(
                update(CategoryModel)
                .where(CategoryModel.name == name)
                .values(event_count=case((adjusted < 0, 0), else_=adjusted))
                .returning(CategoryModel.event_count)
                .execution_options(synchronize_session=False)
            )
            count = result.scalar_one_or_none()
            await session.commit()
            return count

    def _model_to_entity(self, category_model: CategoryModel) -> CategoryEntity:
        return CategoryEntity(
            id=category_model.id,
            name=category_model.name,
            icon=category_model.icon,
            event_count=category_model.event_count,
        )
