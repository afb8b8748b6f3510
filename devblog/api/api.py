from fastapi import APIRouter
from devblog.api.endpoints import (
    feed,
    posts,
    subscribers,
    tags
)

api_router = APIRouter()

api_router.include_router(posts.router, prefix="/posts", tags=["posts"])
api_router.include_router(tags.router, prefix="/tags", tags=["tags"])
api_router.include_router(subscribers.router, tags=["subscribers"])

# served at the site root, outside the /api prefix
feed_router = feed.router
