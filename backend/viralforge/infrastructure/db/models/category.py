"""
Content Category Model

Reference data for the category picker. Read through the app-level cache.
"""

from typing import Optional

from pydantic import ConfigDict
from sqlmodel import Field, SQLModel

from viralforge.infrastructure.db.models.base import TimestampMixin, UUIDMixin


class Category(UUIDMixin, TimestampMixin, table=True):
    __tablename__ = "categories"

    slug: str = Field(max_length=100, unique=True, index=True)
    group: str = Field(max_length=20, index=True, description="creator | business")
    name_tr: str = Field(max_length=100)
    name_en: str = Field(max_length=100)
    icon: Optional[str] = Field(default=None, max_length=50)
    sort_order: int = Field(default=0)
    is_active: bool = Field(default=True)


class CategoryRead(SQLModel):
    slug: str
    group: str
    name_tr: str
    name_en: str
    icon: Optional[str] = None
    sort_order: int = 0

    model_config = ConfigDict(from_attributes=True)
