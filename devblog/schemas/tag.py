from typing import Optional

from pydantic import Field, model_validator
from devblog.core.slugs import slugify
from devblog.schemas.common import CamelModel


class TagBase(CamelModel):
    """Tag base model"""
    name: str = Field(..., min_length=1, max_length=50, description="Tag name")
    slug: str = Field(..., description="Tag slug")


class TagCreate(CamelModel):
    """Create tag request model"""
    name: str = Field(..., min_length=1, max_length=50, description="Tag name")
    slug: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=50,
        pattern=r"^[\w-]+$",
        description="Tag slug, derived from the name when omitted"
    )

    @model_validator(mode="after")
    def derive_slug(self) -> "TagCreate":
        if not self.slug:
            self.slug = slugify(self.name)
            if not self.slug:
                raise ValueError("slug cannot be derived from name")
        return self


class TagResponse(TagBase):
    """Tag response model"""
    id: int = Field(..., description="Tag ID")


class PostTagCreate(CamelModel):
    """Post-tag association request model"""
    post_id: int
    tag_id: int


class PostTagResponse(PostTagCreate):
    """Post-tag association response model"""
    id: int
