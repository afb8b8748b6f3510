from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from devblog.core.timeutils import utcnow
from devblog.db.database import Base


class Post(Base):
    """Post model"""
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    slug: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    title: Mapped[str] = mapped_column(String, nullable=False)
    excerpt: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    cover_image: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    published_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, index=True)
    reading_time: Mapped[str] = mapped_column(String, nullable=False)  # e.g. "5 min read"
    author_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True)

    author: Mapped[Optional["User"]] = relationship(back_populates="posts")
    post_tags: Mapped[List["PostTag"]] = relationship(back_populates="post")
