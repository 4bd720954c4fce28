from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.orm import relationship

from database import Base

# Import for type checking to avoid circular imports
if TYPE_CHECKING:
    from .video import Video
    from .comment import Comment
    from .subscription import Subscription

DEFAULT_AVATAR = "https://res.cloudinary.com/tubeshare/image/upload/default-avatar.png"
DEFAULT_COVER = "https://res.cloudinary.com/tubeshare/image/upload/default-cover.png"


class User(Base):
    """A registered user. Every user is also a channel other users can subscribe to."""
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    avatar = Column(String(512), default=DEFAULT_AVATAR)
    cover = Column(String(512), default=DEFAULT_COVER)
    about = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships - using string-based references to avoid circular imports
    videos = relationship("Video", back_populates="owner")
    comments = relationship("Comment", back_populates="owner")
    subscriptions = relationship(
        "Subscription",
        foreign_keys="Subscription.subscriber_id",
        back_populates="subscriber",
    )
    subscribers = relationship(
        "Subscription",
        foreign_keys="Subscription.subscribed_to_id",
        back_populates="subscribed_to",
    )

    def __repr__(self):
        return f"<User {self.id} {self.username!r}>"
