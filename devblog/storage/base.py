"""Storage interface shared by the in-memory and database backends.

Routes only ever talk to :class:`BlogStorage`. Reads by id or slug return
``None`` when nothing matches; writes return the stored row and raise
:class:`~devblog.storage.exceptions.ConstraintViolationError` when a unique
or foreign key constraint is broken.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from devblog.schemas.post import PostCreate, PostResponse, PostUpdate
from devblog.schemas.subscriber import SubscriberCreate, SubscriberResponse
from devblog.schemas.tag import PostTagCreate, PostTagResponse, TagCreate, TagResponse
from devblog.schemas.user import UserCreate, UserInDB


class BlogStorage(ABC):
    """Capability interface for blog persistence"""

    # User operations
    @abstractmethod
    def get_user(self, user_id: int) -> Optional[UserInDB]:
        ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[UserInDB]:
        ...

    @abstractmethod
    def create_user(self, user: UserCreate) -> UserInDB:
        ...

    @abstractmethod
    def count_users(self) -> int:
        ...

    # Post operations
    @abstractmethod
    def get_all_posts(self) -> List[PostResponse]:
        """All posts, most recently published first"""

    @abstractmethod
    def get_post_by_id(self, post_id: int) -> Optional[PostResponse]:
        ...

    @abstractmethod
    def get_post_by_slug(self, slug: str) -> Optional[PostResponse]:
        ...

    @abstractmethod
    def create_post(self, post: PostCreate) -> PostResponse:
        ...

    @abstractmethod
    def update_post(self, post_id: int, post_update: PostUpdate) -> Optional[PostResponse]:
        """Apply a partial update; ``None`` if the post does not exist"""

    @abstractmethod
    def delete_post(self, post_id: int) -> bool:
        """Delete a post together with its tag associations"""

    @abstractmethod
    def get_featured_post(self) -> Optional[PostResponse]:
        """The most recently published post"""

    @abstractmethod
    def get_paginated_posts(self, page: int, limit: int) -> Tuple[List[PostResponse], int]:
        """One page of posts (1-based ``page``) and the total post count"""

    # Tag operations
    @abstractmethod
    def get_all_tags(self) -> List[TagResponse]:
        ...

    @abstractmethod
    def get_tag_by_id(self, tag_id: int) -> Optional[TagResponse]:
        ...

    @abstractmethod
    def get_tag_by_slug(self, slug: str) -> Optional[TagResponse]:
        ...

    @abstractmethod
    def create_tag(self, tag: TagCreate) -> TagResponse:
        ...

    # Post-tag operations
    @abstractmethod
    def get_posts_by_tag_id(self, tag_id: int) -> List[PostResponse]:
        ...

    def get_posts_by_tag_slug(self, tag_slug: str) -> List[PostResponse]:
        tag = self.get_tag_by_slug(tag_slug)
        if tag is None:
            return []
        return self.get_posts_by_tag_id(tag.id)

    @abstractmethod
    def get_tags_by_post_id(self, post_id: int) -> List[TagResponse]:
        ...

    @abstractmethod
    def add_tag_to_post(self, post_tag: PostTagCreate) -> PostTagResponse:
        """Associate a tag with a post; an existing association is returned as is"""

    @abstractmethod
    def remove_tag_from_post(self, post_id: int, tag_id: int) -> bool:
        ...

    # Subscriber operations
    @abstractmethod
    def create_subscriber(self, subscriber: SubscriberCreate) -> SubscriberResponse:
        ...

    @abstractmethod
    def get_subscriber_by_email(self, email: str) -> Optional[SubscriberResponse]:
        ...

    @abstractmethod
    def get_all_subscribers(self) -> List[SubscriberResponse]:
        ...
