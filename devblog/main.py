from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from .api.api import api_router, feed_router
from .core.config import Settings, get_settings
from .core.logging_config import setup_logging
from .storage.base import BlogStorage
from .storage.exceptions import ConstraintViolationError
from .storage.factory import build_storage
from .storage.seed import seed_storage
import logging
import json
import traceback

logger = logging.getLogger("fastapi")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    if getattr(app.state, "storage", None) is None:
        app.state.storage = build_storage(app.state.settings)
    try:
        seed_storage(app.state.storage)
    except Exception:
        # the API still serves whatever is already stored
        logger.exception("Error seeding storage")
    yield


def format_validation_error(exc: RequestValidationError) -> str:
    """Flatten pydantic errors into one readable message"""
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        details.append(f'{error.get("msg")} at "{location}"' if location else error.get("msg"))
    return "Validation error: " + "; ".join(details)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": format_validation_error(exc)}
    )


async def constraint_violation_handler(request: Request, exc: ConstraintViolationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": exc.message}
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    # details were already logged by log_requests
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )


async def log_requests(request: Request, call_next):
    body = await request.body()
    request_info = {
        "url": str(request.url),
        "method": request.method,
        "headers": dict(request.headers),
        "body": body.decode(errors="replace") if body else None,
        "path_params": request.path_params,
        "query_params": dict(request.query_params)
    }

    try:
        # execute the request
        response = await call_next(request)
    except Exception as e:
        logger.error(
            f"Request failed with exception\n"
            f"Request: {json.dumps(request_info, indent=2)}\n"
            f"Error: {str(e)}\n"
            f"Traceback: {traceback.format_exc()}"
        )
        raise

    if response.status_code >= 400:
        response_body = b""
        async for chunk in response.body_iterator:
            response_body += chunk

        logger.error(
            f"Request failed with status {response.status_code}\n"
            f"Request: {json.dumps(request_info, indent=2)}\n"
            f"Response: {response_body.decode(errors='replace')}\n"
        )
        # body iterator is consumed, send a copy
        return Response(
            content=response_body,
            status_code=response.status_code,
            headers=dict(response.headers),
            media_type=response.media_type
        )

    return response


def create_app(storage: Optional[BlogStorage] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the application

    Args:
        storage: storage to serve; when omitted it is built from settings at startup
        settings: defaults to the environment-derived settings
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title=settings.site_title, lifespan=lifespan)
    app.state.settings = settings
    app.state.storage = storage

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ConstraintViolationError, constraint_violation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
    app.middleware("http")(log_requests)

    # register the API router
    app.include_router(api_router, prefix="/api")
    app.include_router(feed_router)
    return app


app = create_app()
