import math

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from devblog.api.deps import get_storage
from devblog.schemas.post import (
    PaginatedPosts,
    PaginationMeta,
    PostCreate,
    PostResponse,
    PostUpdate,
    PostWithTags,
)
from devblog.schemas.tag import PostTagCreate, PostTagResponse
from devblog.storage.base import BlogStorage

router = APIRouter()


def with_tags(storage: BlogStorage, post: PostResponse) -> PostWithTags:
    """Merge a post's tags into it, one tag query per post"""
    return PostWithTags(**post.model_dump(), tags=storage.get_tags_by_post_id(post.id))


def get_post_or_404(storage: BlogStorage, slug: str) -> PostResponse:
    post = storage.get_post_by_slug(slug)
    if not post:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Post not found"
        )
    return post


@router.get("", response_model=PaginatedPosts, summary="List posts, newest first")
def list_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(6, ge=1),
    storage: BlogStorage = Depends(get_storage)
):
    """List one page of posts with their tags"""
    posts, total = storage.get_paginated_posts(page, limit)
    return PaginatedPosts(
        posts=[with_tags(storage, post) for post in posts],
        pagination=PaginationMeta(
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit)
        )
    )


@router.get("/featured", response_model=PostWithTags, summary="Get the featured post")
def get_featured_post(storage: BlogStorage = Depends(get_storage)):
    """Get the most recently published post"""
    post = storage.get_featured_post()
    if not post:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No featured post found"
        )
    return with_tags(storage, post)


@router.get("/{slug}", response_model=PostWithTags, summary="Get a specific post")
def get_post(slug: str, storage: BlogStorage = Depends(get_storage)):
    """Get a specific post with its tags"""
    return with_tags(storage, get_post_or_404(storage, slug))


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED, summary="Create a new post")
def create_post(post: PostCreate, storage: BlogStorage = Depends(get_storage)):
    """Create a new post"""
    # Check if slug already exists
    if storage.get_post_by_slug(post.slug):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Post slug already exists"
        )
    return storage.create_post(post)


@router.patch("/{slug}", response_model=PostResponse, summary="Update a post")
def update_post(slug: str, post_update: PostUpdate, storage: BlogStorage = Depends(get_storage)):
    """Update only the fields that are sent"""
    post = get_post_or_404(storage, slug)

    # Check if new slug already exists
    if post_update.slug and post_update.slug != post.slug and storage.get_post_by_slug(post_update.slug):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Post slug already exists"
        )

    updated = storage.update_post(post.id, post_update)
    if not updated:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Post not found"
        )
    return updated


@router.delete("/{slug}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a post and its tag links")
def delete_post(slug: str, storage: BlogStorage = Depends(get_storage)):
    """Delete a post and its tag associations"""
    post = get_post_or_404(storage, slug)
    storage.delete_post(post.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{slug}/tags/{tag_slug}",
    response_model=PostTagResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a tag to a post"
)
def add_tag_to_post(slug: str, tag_slug: str, storage: BlogStorage = Depends(get_storage)):
    """Add a tag to a post; adding it twice keeps a single link"""
    post = get_post_or_404(storage, slug)
    tag = storage.get_tag_by_slug(tag_slug)
    if not tag:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tag not found"
        )
    return storage.add_tag_to_post(PostTagCreate(post_id=post.id, tag_id=tag.id))


@router.delete(
    "/{slug}/tags/{tag_slug}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a tag from a post"
)
def remove_tag_from_post(slug: str, tag_slug: str, storage: BlogStorage = Depends(get_storage)):
    """Remove a tag from a post"""
    post = get_post_or_404(storage, slug)
    tag = storage.get_tag_by_slug(tag_slug)
    if not tag:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tag not found"
        )
    if not storage.remove_tag_from_post(post.id, tag.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tag is not attached to this post"
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
