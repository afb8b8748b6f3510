import itertools
import logging
import threading
from typing import Dict, List, Optional, Tuple

from devblog.core.timeutils import utcnow
from devblog.schemas.post import PostCreate, PostResponse, PostUpdate
from devblog.schemas.subscriber import SubscriberCreate, SubscriberResponse
from devblog.schemas.tag import PostTagCreate, PostTagResponse, TagCreate, TagResponse
from devblog.schemas.user import UserCreate, UserInDB
from devblog.storage.base import BlogStorage
from devblog.storage.exceptions import ConstraintViolationError
from devblog.storage.seed import seed_storage

logger = logging.getLogger(__name__)


class MemoryStorage(BlogStorage):
    """Dict-backed storage for demos and tests

    Rows live in one dict per entity keyed by auto-incrementing ids. Unique
    keys are checked on write; foreign keys are not. Routes run in a
    threadpool, so every operation holds one re-entrant lock.
    """

    def __init__(self, seed: bool = True):
        self._lock = threading.RLock()

        self._users: Dict[int, UserInDB] = {}
        self._posts: Dict[int, PostResponse] = {}
        self._tags: Dict[int, TagResponse] = {}
        self._post_tags: Dict[int, PostTagResponse] = {}
        self._subscribers: Dict[int, SubscriberResponse] = {}

        self._user_ids = itertools.count(1)
        self._post_ids = itertools.count(1)
        self._tag_ids = itertools.count(1)
        self._post_tag_ids = itertools.count(1)
        self._subscriber_ids = itertools.count(1)

        if seed:
            seed_storage(self)

    def _check_unique(self, rows, field: str, value, entity: str, exclude_id: Optional[int] = None):
        for row in rows.values():
            if row.id != exclude_id and getattr(row, field) == value:
                logger.warning("Rejected duplicate %s %s=%r", entity, field, value)
                raise ConstraintViolationError(f"{entity} {field} already exists", field=field)

    @staticmethod
    def _by_recency(posts) -> List[PostResponse]:
        # stable sort: posts sharing a timestamp keep insertion order
        return sorted(posts, key=lambda post: post.published_at, reverse=True)

    # User operations
    def get_user(self, user_id: int) -> Optional[UserInDB]:
        with self._lock:
            return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[UserInDB]:
        with self._lock:
            return next((user for user in self._users.values() if user.username == username), None)

    def create_user(self, user: UserCreate) -> UserInDB:
        with self._lock:
            self._check_unique(self._users, "username", user.username, "User")
            db_user = UserInDB(id=next(self._user_ids), **user.model_dump())
            self._users[db_user.id] = db_user
            return db_user

    def count_users(self) -> int:
        with self._lock:
            return len(self._users)

    # Post operations
    def get_all_posts(self) -> List[PostResponse]:
        with self._lock:
            return self._by_recency(self._posts.values())

    def get_post_by_id(self, post_id: int) -> Optional[PostResponse]:
        with self._lock:
            return self._posts.get(post_id)

    def get_post_by_slug(self, slug: str) -> Optional[PostResponse]:
        with self._lock:
            return next((post for post in self._posts.values() if post.slug == slug), None)

    def create_post(self, post: PostCreate) -> PostResponse:
        with self._lock:
            self._check_unique(self._posts, "slug", post.slug, "Post")
            data = post.model_dump()
            data["published_at"] = post.published_at or utcnow()
            db_post = PostResponse(id=next(self._post_ids), **data)
            self._posts[db_post.id] = db_post
            return db_post

    def update_post(self, post_id: int, post_update: PostUpdate) -> Optional[PostResponse]:
        with self._lock:
            post = self._posts.get(post_id)
            if post is None:
                return None
            changes = post_update.changes()
            if "slug" in changes:
                self._check_unique(self._posts, "slug", changes["slug"], "Post", exclude_id=post_id)
            updated_post = post.model_copy(update=changes)
            self._posts[post_id] = updated_post
            return updated_post

    def delete_post(self, post_id: int) -> bool:
        with self._lock:
            if post_id not in self._posts:
                return False
            for post_tag_id in [pt.id for pt in self._post_tags.values() if pt.post_id == post_id]:
                del self._post_tags[post_tag_id]
            del self._posts[post_id]
            return True

    def get_featured_post(self) -> Optional[PostResponse]:
        all_posts = self.get_all_posts()
        return all_posts[0] if all_posts else None

    def get_paginated_posts(self, page: int, limit: int) -> Tuple[List[PostResponse], int]:
        all_posts = self.get_all_posts()
        start = (page - 1) * limit
        return all_posts[start:start + limit], len(all_posts)

    # Tag operations
    def get_all_tags(self) -> List[TagResponse]:
        with self._lock:
            return list(self._tags.values())

    def get_tag_by_id(self, tag_id: int) -> Optional[TagResponse]:
        with self._lock:
            return self._tags.get(tag_id)

    def get_tag_by_slug(self, slug: str) -> Optional[TagResponse]:
        with self._lock:
            return next((tag for tag in self._tags.values() if tag.slug == slug), None)

    def create_tag(self, tag: TagCreate) -> TagResponse:
        with self._lock:
            self._check_unique(self._tags, "name", tag.name, "Tag")
            self._check_unique(self._tags, "slug", tag.slug, "Tag")
            db_tag = TagResponse(id=next(self._tag_ids), name=tag.name, slug=tag.slug)
            self._tags[db_tag.id] = db_tag
            return db_tag

    # Post-tag operations
    def get_posts_by_tag_id(self, tag_id: int) -> List[PostResponse]:
        with self._lock:
            post_ids = {pt.post_id for pt in self._post_tags.values() if pt.tag_id == tag_id}
            return self._by_recency(post for post in self._posts.values() if post.id in post_ids)

    def get_tags_by_post_id(self, post_id: int) -> List[TagResponse]:
        with self._lock:
            tag_ids = {pt.tag_id for pt in self._post_tags.values() if pt.post_id == post_id}
            return [tag for tag in self._tags.values() if tag.id in tag_ids]

    def add_tag_to_post(self, post_tag: PostTagCreate) -> PostTagResponse:
        with self._lock:
            for existing in self._post_tags.values():
                if existing.post_id == post_tag.post_id and existing.tag_id == post_tag.tag_id:
                    return existing
            db_post_tag = PostTagResponse(id=next(self._post_tag_ids), **post_tag.model_dump())
            self._post_tags[db_post_tag.id] = db_post_tag
            return db_post_tag

    def remove_tag_from_post(self, post_id: int, tag_id: int) -> bool:
        with self._lock:
            matches = [
                pt.id for pt in self._post_tags.values()
                if pt.post_id == post_id and pt.tag_id == tag_id
            ]
            for post_tag_id in matches:
                del self._post_tags[post_tag_id]
            return bool(matches)

    # Subscriber operations
    def create_subscriber(self, subscriber: SubscriberCreate) -> SubscriberResponse:
        with self._lock:
            self._check_unique(self._subscribers, "email", subscriber.email, "Subscriber")
            db_subscriber = SubscriberResponse(
                id=next(self._subscriber_ids),
                email=subscriber.email,
                created_at=utcnow()
            )
            self._subscribers[db_subscriber.id] = db_subscriber
            return db_subscriber

    def get_subscriber_by_email(self, email: str) -> Optional[SubscriberResponse]:
        with self._lock:
            return next((sub for sub in self._subscribers.values() if sub.email == email), None)

    def get_all_subscribers(self) -> List[SubscriberResponse]:
        with self._lock:
            return list(self._subscribers.values())
