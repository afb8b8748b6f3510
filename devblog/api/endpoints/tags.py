from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from devblog.api.deps import get_storage
from devblog.api.endpoints.posts import with_tags
from devblog.schemas.post import PostWithTags
from devblog.schemas.tag import TagCreate, TagResponse
from devblog.storage.base import BlogStorage

router = APIRouter()


@router.get("", response_model=List[TagResponse], summary="List all tags")
def list_tags(storage: BlogStorage = Depends(get_storage)):
    """List all tags"""
    return storage.get_all_tags()


@router.get("/{slug}", response_model=TagResponse, summary="Get a specific tag")
def get_tag(slug: str, storage: BlogStorage = Depends(get_storage)):
    """Get a specific tag"""
    tag = storage.get_tag_by_slug(slug)
    if not tag:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tag not found"
        )
    return tag


@router.get("/{slug}/posts", response_model=List[PostWithTags], summary="List posts with a tag")
def list_tag_posts(slug: str, storage: BlogStorage = Depends(get_storage)):
    """List posts with a tag, newest first, each with all of its tags"""
    return [with_tags(storage, post) for post in storage.get_posts_by_tag_slug(slug)]


@router.post("", response_model=TagResponse, status_code=status.HTTP_201_CREATED, summary="Create a new tag")
def create_tag(tag: TagCreate, storage: BlogStorage = Depends(get_storage)):
    """Create a new tag"""
    # Check if tag name or slug already exists
    if any(existing.name == tag.name for existing in storage.get_all_tags()):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Tag name already exists"
        )
    if storage.get_tag_by_slug(tag.slug):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Tag slug already exists"
        )
    return storage.create_tag(tag)
