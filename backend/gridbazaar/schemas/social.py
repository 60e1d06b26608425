"""
GridBazaar - Social Schemas
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict

from gridbazaar.db.models.social import PostType, InteractionType


class SocialPostResponse(BaseModel):
    """Social feed post."""
    id: int
    user_id: int
    content: str
    post_type: PostType
    related_listing_id: Optional[int] = None
    hashtags: list[str] = []
    visibility: str
    created_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class NotificationActor(BaseModel):
    """Profile that interacted with the post."""
    id: int
    company_name: Optional[str] = None
    role: Optional[str] = None


class NotificationResponse(BaseModel):
    """Interaction on one of the caller's posts."""
    id: int
    post_id: int
    interaction_type: InteractionType
    content: Optional[str] = None
    created_at: datetime
    actor: NotificationActor
    post_preview: str
    is_read: bool = False


class NotificationList(BaseModel):
    """Notifications, newest first."""
    unread_count: int
    notifications: list[NotificationResponse]


class MarkReadResponse(BaseModel):
    marked: int
    unread_count: int
