import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response
from devblog.api.deps import get_app_settings, get_storage
from devblog.core.config import Settings
from devblog.core.rss import build_rss_feed
from devblog.storage.base import BlogStorage

logger = logging.getLogger(__name__)

router = APIRouter()


def feed_base_url(request: Request, settings: Settings) -> str:
    """Configured BASE_URL, otherwise the scheme and Host header of the request"""
    if settings.base_url:
        return settings.base_url
    host = request.headers.get("host") or request.url.netloc
    return f"{request.url.scheme}://{host}"


@router.get("/rss.xml", response_class=Response, summary="RSS 2.0 feed of all posts")
def rss_feed(
    request: Request,
    storage: BlogStorage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings)
):
    """RSS 2.0 feed with one item per post, newest first"""
    try:
        document = build_rss_feed(
            storage.get_all_posts(),
            feed_base_url(request, settings),
            title=settings.site_title,
            description=settings.site_description,
        )
    except Exception:
        logger.exception("Error generating RSS feed")
        return PlainTextResponse("Error generating RSS feed", status_code=500)
    return Response(content=document, media_type="application/xml")
