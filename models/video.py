from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship

from database import Base

if TYPE_CHECKING:
    from .user import User
    from .view import View
    from .video_like import VideoLike
    from .comment import Comment


class Video(Base):
    """
    An uploaded video. The media itself lives elsewhere and is referenced by URL.

    Videos are immutable once created. Deleting one removes its views,
    reactions and comments first.
    """
    __tablename__ = 'videos'

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    url = Column(String(512), nullable=False, comment='URL to the media file')
    thumbnail = Column(String(512), nullable=True, comment='URL to the thumbnail image')
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    owner = relationship("User", back_populates="videos")
    views = relationship("View", back_populates="video", passive_deletes=True)
    likes = relationship("VideoLike", back_populates="video", passive_deletes=True)
    comments = relationship(
        "Comment",
        back_populates="video",
        passive_deletes=True,
        order_by="Comment.created_at.desc()",
    )

    def __repr__(self):
        return f"<Video {self.id} {self.title!r}>"
