import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

from sqlalchemy import and_, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from devblog.core.timeutils import utcnow
from devblog.models.post import Post
from devblog.models.post_tag import PostTag
from devblog.models.subscriber import Subscriber
from devblog.models.tag import Tag
from devblog.models.user import User
from devblog.schemas.post import PostCreate, PostResponse, PostUpdate
from devblog.schemas.subscriber import SubscriberCreate, SubscriberResponse
from devblog.schemas.tag import PostTagCreate, PostTagResponse, TagCreate, TagResponse
from devblog.schemas.user import UserCreate, UserInDB
from devblog.storage.base import BlogStorage
from devblog.storage.exceptions import ConstraintViolationError

logger = logging.getLogger(__name__)


class DatabaseStorage(BlogStorage):
    """SQLAlchemy-backed storage

    Each operation runs in its own short-lived session. Rows are converted to
    pydantic models before the session closes.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _transaction(self, entity: str) -> Iterator[Session]:
        """Session that commits on success and maps integrity errors"""
        try:
            with self._session_factory.begin() as session:
                yield session
        except IntegrityError as e:
            logger.warning("Rejected %s write: %s", entity, e.orig)
            raise ConstraintViolationError(
                f"{entity} violates a unique or foreign key constraint"
            ) from e

    # User operations
    def get_user(self, user_id: int) -> Optional[UserInDB]:
        with self._session_factory() as session:
            user = session.get(User, user_id)
            return UserInDB.model_validate(user) if user else None

    def get_user_by_username(self, username: str) -> Optional[UserInDB]:
        with self._session_factory() as session:
            user = session.execute(
                select(User).where(User.username == username)
            ).scalar_one_or_none()
            return UserInDB.model_validate(user) if user else None

    def create_user(self, user: UserCreate) -> UserInDB:
        with self._transaction("User") as session:
            db_user = User(username=user.username, password=user.password)
            session.add(db_user)
            session.flush()
            return UserInDB.model_validate(db_user)

    def count_users(self) -> int:
        with self._session_factory() as session:
            return session.execute(select(func.count()).select_from(User)).scalar_one()

    # Post operations
    def get_all_posts(self) -> List[PostResponse]:
        with self._session_factory() as session:
            posts = session.execute(
                select(Post).order_by(Post.published_at.desc())
            ).scalars().all()
            return [PostResponse.model_validate(post) for post in posts]

    def get_post_by_id(self, post_id: int) -> Optional[PostResponse]:
        with self._session_factory() as session:
            post = session.get(Post, post_id)
            return PostResponse.model_validate(post) if post else None

    def get_post_by_slug(self, slug: str) -> Optional[PostResponse]:
        with self._session_factory() as session:
            post = session.execute(select(Post).where(Post.slug == slug)).scalar_one_or_none()
            return PostResponse.model_validate(post) if post else None

    def create_post(self, post: PostCreate) -> PostResponse:
        with self._transaction("Post") as session:
            new_post = Post(**post.model_dump(exclude={"published_at"}))
            new_post.published_at = post.published_at or utcnow()
            session.add(new_post)
            session.flush()  # Flush to get the post ID
            return PostResponse.model_validate(new_post)

    def update_post(self, post_id: int, post_update: PostUpdate) -> Optional[PostResponse]:
        with self._transaction("Post") as session:
            post = session.get(Post, post_id)
            if post is None:
                return None
            for field, value in post_update.changes().items():
                setattr(post, field, value)
            session.flush()
            return PostResponse.model_validate(post)

    def delete_post(self, post_id: int) -> bool:
        with self._transaction("Post") as session:
            # children first, post_tags.post_id references posts.id
            session.execute(delete(PostTag).where(PostTag.post_id == post_id))
            result = session.execute(delete(Post).where(Post.id == post_id))
            return result.rowcount > 0

    def get_featured_post(self) -> Optional[PostResponse]:
        with self._session_factory() as session:
            post = session.execute(
                select(Post).order_by(Post.published_at.desc()).limit(1)
            ).scalar_one_or_none()
            return PostResponse.model_validate(post) if post else None

    def get_paginated_posts(self, page: int, limit: int) -> Tuple[List[PostResponse], int]:
        with self._session_factory() as session:
            total = session.execute(select(func.count()).select_from(Post)).scalar_one()
            offset = (page - 1) * limit
            # keep LIMIT/OFFSET within SQLite's 64-bit integer range
            if offset >= total:
                return [], total
            posts = session.execute(
                select(Post)
                .order_by(Post.published_at.desc())
                .limit(min(limit, total))
                .offset(offset)
            ).scalars().all()
            return [PostResponse.model_validate(post) for post in posts], total

    # Tag operations
    def get_all_tags(self) -> List[TagResponse]:
        with self._session_factory() as session:
            tags = session.execute(select(Tag).order_by(Tag.id)).scalars().all()
            return [TagResponse.model_validate(tag) for tag in tags]

    def get_tag_by_id(self, tag_id: int) -> Optional[TagResponse]:
        with self._session_factory() as session:
            tag = session.get(Tag, tag_id)
            return TagResponse.model_validate(tag) if tag else None

    def get_tag_by_slug(self, slug: str) -> Optional[TagResponse]:
        with self._session_factory() as session:
            tag = session.execute(select(Tag).where(Tag.slug == slug)).scalar_one_or_none()
            return TagResponse.model_validate(tag) if tag else None

    def create_tag(self, tag: TagCreate) -> TagResponse:
        with self._transaction("Tag") as session:
            db_tag = Tag(name=tag.name, slug=tag.slug)
            session.add(db_tag)
            session.flush()
            return TagResponse.model_validate(db_tag)

    # Post-tag operations
    def get_posts_by_tag_id(self, tag_id: int) -> List[PostResponse]:
        with self._session_factory() as session:
            posts = session.execute(
                select(Post)
                .join(PostTag, PostTag.post_id == Post.id)
                .where(PostTag.tag_id == tag_id)
                .order_by(Post.published_at.desc())
            ).scalars().unique().all()
            return [PostResponse.model_validate(post) for post in posts]

    def get_tags_by_post_id(self, post_id: int) -> List[TagResponse]:
        with self._session_factory() as session:
            tags = session.execute(
                select(Tag)
                .join(PostTag, PostTag.tag_id == Tag.id)
                .where(PostTag.post_id == post_id)
                .order_by(Tag.id)
            ).scalars().unique().all()
            return [TagResponse.model_validate(tag) for tag in tags]

    def add_tag_to_post(self, post_tag: PostTagCreate) -> PostTagResponse:
        with self._transaction("Post tag") as session:
            existing = session.execute(
                select(PostTag).where(and_(
                    PostTag.post_id == post_tag.post_id,
                    PostTag.tag_id == post_tag.tag_id
                ))
            ).scalars().first()
            if existing is not None:
                return PostTagResponse.model_validate(existing)
            db_post_tag = PostTag(post_id=post_tag.post_id, tag_id=post_tag.tag_id)
            session.add(db_post_tag)
            session.flush()
            return PostTagResponse.model_validate(db_post_tag)

    def remove_tag_from_post(self, post_id: int, tag_id: int) -> bool:
        with self._transaction("Post tag") as session:
            result = session.execute(
                delete(PostTag).where(and_(
                    PostTag.post_id == post_id,
                    PostTag.tag_id == tag_id
                ))
            )
            return result.rowcount > 0

    # Subscriber operations
    def create_subscriber(self, subscriber: SubscriberCreate) -> SubscriberResponse:
        with self._transaction("Subscriber") as session:
            db_subscriber = Subscriber(email=subscriber.email, created_at=utcnow())
            session.add(db_subscriber)
            session.flush()
            return SubscriberResponse.model_validate(db_subscriber)

    def get_subscriber_by_email(self, email: str) -> Optional[SubscriberResponse]:
        with self._session_factory() as session:
            subscriber = session.execute(
                select(Subscriber).where(Subscriber.email == email)
            ).scalar_one_or_none()
            return SubscriberResponse.model_validate(subscriber) if subscriber else None

    def get_all_subscribers(self) -> List[SubscriberResponse]:
        with self._session_factory() as session:
            subscribers = session.execute(select(Subscriber).order_by(Subscriber.id)).scalars().all()
            return [SubscriberResponse.model_validate(sub) for sub in subscribers]
