from sqlalchemy import ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship
from devblog.db.database import Base


class PostTag(Base):
    """Post-tag association model"""
    __tablename__ = "post_tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # no unique constraint on the pair, add_tag_to_post checks for an existing row
    post_id: Mapped[int] = mapped_column(ForeignKey("posts.id"), index=True, nullable=False)
    tag_id: Mapped[int] = mapped_column(ForeignKey("tags.id"), index=True, nullable=False)

    post: Mapped["Post"] = relationship(back_populates="post_tags")
    tag: Mapped["Tag"] = relationship(back_populates="post_tags")
