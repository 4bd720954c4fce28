from sqlalchemy import Column, Integer, ForeignKey, DateTime, UniqueConstraint
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy.orm import relationship

from database import Base

# Import for type checking to avoid circular imports
if TYPE_CHECKING:
    from .user import User


class Subscription(Base):
    """A subscriber -> channel edge. Channels are users."""
    __tablename__ = 'subscriptions'

    id = Column(Integer, primary_key=True, index=True)
    subscriber_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    subscribed_to_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    subscriber = relationship("User", foreign_keys=[subscriber_id], back_populates="subscriptions")
    subscribed_to = relationship("User", foreign_keys=[subscribed_to_id], back_populates="subscribers")

    __table_args__ = (
        UniqueConstraint('subscriber_id', 'subscribed_to_id', name='_subscriber_channel_uc'),
    )

    def __repr__(self):
        return f"<Subscription {self.subscriber_id} -> {self.subscribed_to_id}>"
