"""
GridBazaar - Social Models
Posts, interactions and notification read receipts
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship
import enum

from gridbazaar.db.database import Base


class PostType(str, enum.Enum):
    """Kind of social post."""
    GENERAL = "general"
    LISTING_ANNOUNCEMENT = "listing_announcement"
    MARKET_UPDATE = "market_update"


class InteractionType(str, enum.Enum):
    """Kind of interaction on a post."""
    LIKE = "like"
    COMMENT = "comment"
    SHARE = "share"
    BOOKMARK = "bookmark"


class SocialPost(Base):
    """Social feed post."""
    
    __tablename__ = "voltmarket_social_posts"
    
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("gridbazaar_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    post_type = Column(SQLEnum(PostType), default=PostType.GENERAL, nullable=False)
    related_listing_id = Column(Integer, ForeignKey("voltmarket_listings.id", ondelete="SET NULL"), nullable=True)
    hashtags = Column(JSON, default=list)
    visibility = Column(String(20), default="public", nullable=False)
    
    created_at = Column(DateTime, default=datetime.utcnow)
    
    interactions = relationship("SocialInteraction", back_populates="post", cascade="all, delete-orphan")
    
    def __repr__(self):
        return f"<SocialPost {self.id} ({self.post_type.value})>"


class SocialInteraction(Base):
    """Interaction of a profile with a post."""
    
    __tablename__ = "voltmarket_social_interactions"
    
    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("voltmarket_social_posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("gridbazaar_profiles.id", ondelete="CASCADE"), nullable=False)
    interaction_type = Column(SQLEnum(InteractionType), nullable=False)
    content = Column(Text, nullable=True)
    
    created_at = Column(DateTime, default=datetime.utcnow)
    
    post = relationship("SocialPost", back_populates="interactions")
    
    def __repr__(self):
        return f"<SocialInteraction {self.interaction_type.value} on post {self.post_id}>"


class NotificationRead(Base):
    """Read receipt for an interaction notification."""
    
    __tablename__ = "voltmarket_notification_reads"
    __table_args__ = (
        UniqueConstraint("profile_id", "interaction_id", name="uq_notification_reads_profile_interaction"),
    )
    
    id = Column(Integer, primary_key=True, index=True)
    profile_id = Column(Integer, ForeignKey("gridbazaar_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    interaction_id = Column(Integer, ForeignKey("voltmarket_social_interactions.id", ondelete="CASCADE"), nullable=False)
    read_at = Column(DateTime, default=datetime.utcnow)
