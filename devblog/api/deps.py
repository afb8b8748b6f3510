from fastapi import Request

from devblog.core.config import Settings
from devblog.storage.base import BlogStorage


def get_storage(request: Request) -> BlogStorage:
    """Storage configured on the application at startup"""
    return request.app.state.storage


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
