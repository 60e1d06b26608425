"""
GridBazaar - Social Notification Endpoints
"""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from gridbazaar.dependencies import get_db, get_current_profile
from gridbazaar.db.models.profile import Profile
from gridbazaar.core.social.notifications import SocialNotificationService
from gridbazaar.schemas.social import NotificationList, MarkReadResponse

router = APIRouter()


@router.get("/notifications", response_model=NotificationList)
async def get_notifications(
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Interactions by others on the caller's posts, newest 50."""
    notifications = await SocialNotificationService(db).get_notifications(profile.id)
    return NotificationList(
        unread_count=sum(1 for n in notifications if not n["is_read"]),
        notifications=notifications,
    )


@router.post("/notifications/{notification_id}/read", response_model=MarkReadResponse)
async def mark_notification_read(
    notification_id: int,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    service = SocialNotificationService(db)
    marked = await service.mark_as_read(profile.id, [notification_id])
    return MarkReadResponse(marked=marked, unread_count=await service.unread_count(profile.id))


@router.post("/notifications/read-all", response_model=MarkReadResponse)
async def mark_all_notifications_read(
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    service = SocialNotificationService(db)
    marked = await service.mark_all_as_read(profile.id)
    return MarkReadResponse(marked=marked, unread_count=await service.unread_count(profile.id))
