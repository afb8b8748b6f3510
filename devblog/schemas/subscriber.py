from datetime import datetime

from pydantic import EmailStr
from devblog.schemas.common import CamelModel


class SubscriberCreate(CamelModel):
    """Subscribe request model"""
    email: EmailStr


class SubscriberResponse(CamelModel):
    """Subscriber response model"""
    id: int
    email: str
    created_at: datetime
