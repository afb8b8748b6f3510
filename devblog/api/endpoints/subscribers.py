from fastapi import APIRouter, Depends, HTTPException, status
from devblog.api.deps import get_storage
from devblog.schemas.common import MessageResponse
from devblog.schemas.subscriber import SubscriberCreate
from devblog.storage.base import BlogStorage

router = APIRouter()


@router.post(
    "/subscribe",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Subscribe to the newsletter"
)
def subscribe(subscriber: SubscriberCreate, storage: BlogStorage = Depends(get_storage)):
    """Subscribe an email address to the newsletter"""
    # Check if email already exists
    if storage.get_subscriber_by_email(subscriber.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already subscribed"
        )
    storage.create_subscriber(subscriber)
    return MessageResponse(message="Subscription successful")
