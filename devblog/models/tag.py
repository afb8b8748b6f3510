from typing import List

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from devblog.db.database import Base


class Tag(Base):
    """Tag model"""
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)  # tag name must be unique
    slug: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)

    post_tags: Mapped[List["PostTag"]] = relationship(back_populates="tag")
