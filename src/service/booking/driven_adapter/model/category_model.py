from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class CategoryModel(Base):
    __tablename__ = 'category'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    icon: Mapped[str] = mapped_column(String(50), nullable=False, default='ticket')
    event_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
