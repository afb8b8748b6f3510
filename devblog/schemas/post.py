from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator, model_validator
from devblog.core.slugs import slugify
from devblog.core.timeutils import to_naive_utc
from devblog.schemas.common import CamelModel
from devblog.schemas.tag import TagResponse

SLUG_PATTERN = r"^[\w-]+$"


class PostBase(CamelModel):
    """Post base model"""
    title: str = Field(..., min_length=1, max_length=200)
    excerpt: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    cover_image: Optional[str] = None
    reading_time: str = Field(..., min_length=1, description="e.g. \"5 min read\"")
    author_id: Optional[int] = None


class PostCreate(PostBase):
    """Create post request model"""
    slug: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=200,
        pattern=SLUG_PATTERN,
        description="Post slug, derived from the title when omitted"
    )
    published_at: Optional[datetime] = Field(default=None, description="Defaults to creation time")

    @field_validator("published_at")
    @classmethod
    def normalize_published_at(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value) if value is not None else None

    @model_validator(mode="after")
    def derive_slug(self) -> "PostCreate":
        if not self.slug:
            self.slug = slugify(self.title)
            if not self.slug:
                raise ValueError("slug cannot be derived from title")
        return self


class PostUpdate(CamelModel):
    """Update post request model, every field optional"""
    slug: Optional[str] = Field(default=None, min_length=1, max_length=200, pattern=SLUG_PATTERN)
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    excerpt: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = Field(default=None, min_length=1)
    cover_image: Optional[str] = None
    published_at: Optional[datetime] = None
    reading_time: Optional[str] = Field(default=None, min_length=1)
    author_id: Optional[int] = None

    @field_validator("published_at")
    @classmethod
    def normalize_published_at(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value) if value is not None else None

    def changes(self) -> dict:
        """Fields the client actually sent; null is only kept for nullable columns"""
        return {
            field: value
            for field, value in self.model_dump(exclude_unset=True).items()
            if value is not None or field in NULLABLE_POST_FIELDS
        }


NULLABLE_POST_FIELDS = frozenset({"cover_image", "author_id"})


class PostResponse(CamelModel):
    """Post response model

    Carries stored rows as they are; length limits only apply to requests.
    """
    id: int
    slug: str
    title: str
    excerpt: str
    content: str
    cover_image: Optional[str] = None
    published_at: datetime
    reading_time: str
    author_id: Optional[int] = None


class PostWithTags(PostResponse):
    """Post with its tags merged in"""
    tags: List[TagResponse] = Field(default_factory=list)


class PaginationMeta(CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int


class PaginatedPosts(CamelModel):
    """Paginated post listing"""
    posts: List[PostWithTags]
    pagination: PaginationMeta
