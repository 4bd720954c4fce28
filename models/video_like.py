from datetime import datetime
from enum import IntEnum

from sqlalchemy import Column, Integer, ForeignKey, DateTime, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from database import Base


class Polarity(IntEnum):
    LIKE = 1
    DISLIKE = -1


class VideoLike(Base):
    """A user's like (+1) or dislike (-1) on a video. At most one row per user and video."""
    __tablename__ = 'video_likes'
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    video_id = Column(Integer, ForeignKey('videos.id', ondelete='CASCADE'), nullable=False, index=True)
    polarity = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    video = relationship("Video", back_populates="likes")

    __table_args__ = (
        UniqueConstraint('user_id', 'video_id', name='_user_video_like_uc'),
        CheckConstraint('polarity IN (1, -1)', name='_video_like_polarity_ck'),
    )

    def __repr__(self):
        return f"<VideoLike {self.user_id} -> {self.video_id} ({self.polarity:+d})>"
