"""
Social Notifications

Interactions by other profiles on a profile's posts, with persisted
read receipts.
"""
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gridbazaar.db.models.profile import Profile
from gridbazaar.db.models.social import SocialPost, SocialInteraction, NotificationRead


NOTIFICATION_LIMIT = 50
PREVIEW_LENGTH = 100


def post_preview(content: str | None, length: int = PREVIEW_LENGTH) -> str:
    """First ``length`` characters, with '...' when cut."""
    content = content or ""
    if len(content) > length:
        return content[:length] + "..."
    return content


class SocialNotificationService:
    """Notification feed of one profile."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def _interactions(self, profile_id: int, limit: int = NOTIFICATION_LIMIT):
        stmt = (
            select(SocialInteraction, SocialPost.content, Profile)
            .join(SocialPost, SocialInteraction.post_id == SocialPost.id)
            .outerjoin(Profile, SocialInteraction.user_id == Profile.id)
            .where(
                SocialPost.user_id == profile_id,
                SocialInteraction.user_id != profile_id,
            )
            .order_by(SocialInteraction.created_at.desc(), SocialInteraction.id.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return result.all()
    
    async def _read_ids(self, profile_id: int) -> set[int]:
        result = await self.db.execute(
            select(NotificationRead.interaction_id).where(NotificationRead.profile_id == profile_id)
        )
        return set(result.scalars().all())
    
    async def get_notifications(self, profile_id: int) -> list[dict[str, Any]]:
        """Newest 50 interactions on the profile's posts, enriched for display."""
        rows = await self._interactions(profile_id)
        read_ids = await self._read_ids(profile_id)
        
        notifications = []
        for interaction, content, actor in rows:
            notifications.append({
                "id": interaction.id,
                "post_id": interaction.post_id,
                "interaction_type": interaction.interaction_type,
                "content": interaction.content,
                "created_at": interaction.created_at,
                "actor": {
                    "id": interaction.user_id,
                    "company_name": actor.company_name if actor else None,
                    "role": actor.role.value if actor and actor.role else None,
                },
                "post_preview": post_preview(content),
                "is_read": interaction.id in read_ids,
            })
        return notifications
    
    async def unread_count(self, profile_id: int) -> int:
        notifications = await self.get_notifications(profile_id)
        return sum(1 for n in notifications if not n["is_read"])
    
    async def mark_as_read(self, profile_id: int, interaction_ids: list[int]) -> int:
        """Store read receipts for the given notifications; returns how many were new."""
        visible = {row[0].id for row in await self._interactions(profile_id)}
        already_read = await self._read_ids(profile_id)
        new_ids = [i for i in dict.fromkeys(interaction_ids) if i in visible and i not in already_read]
        for interaction_id in new_ids:
            self.db.add(NotificationRead(profile_id=profile_id, interaction_id=interaction_id))
        if new_ids:
            await self.db.commit()
        return len(new_ids)
    
    async def mark_all_as_read(self, profile_id: int) -> int:
        rows = await self._interactions(profile_id)
        return await self.mark_as_read(profile_id, [row[0].id for row in rows])
