from typing import List

from sqlalchemy import distinct, exists, func
from sqlalchemy.orm import Session
import logging

from core.exceptions import BadRequestError, NotFoundError
from database import insert_or_ignore
from models import Subscription, User

logger = logging.getLogger(__name__)


class SubscriptionGraph:
    """Subscriber -> channel edges. A channel is the user who owns the videos."""

    def __init__(self, db: Session):
        self.db = db

    async def count_subscribers(self, channel_id: int) -> int:
        """Number of distinct users subscribed to the channel."""
        return self.db.query(func.count(distinct(Subscription.subscriber_id)))\
            .filter(Subscription.subscribed_to_id == channel_id)\
            .scalar()

    async def is_subscribed(self, subscriber_id: int, channel_id: int) -> bool:
        return bool(self.db.query(
            exists().where(
                Subscription.subscriber_id == subscriber_id,
                Subscription.subscribed_to_id == channel_id
            )
        ).scalar())

    async def channels_for(self, subscriber_id: int) -> List[User]:
        """Channels the user subscribes to, oldest subscription first."""
        return self.db.query(User)\
            .join(Subscription, Subscription.subscribed_to_id == User.id)\
            .filter(Subscription.subscriber_id == subscriber_id)\
            .order_by(Subscription.created_at, Subscription.id)\
            .all()

    async def toggle_subscription(self, subscriber_id: int, channel_id: int) -> bool:
        """
        Subscribe to a channel, or unsubscribe if already subscribed.

        Returns:
            True if the user is subscribed after the call

        Raises:
            BadRequestError: If the user tries to subscribe to themselves
            NotFoundError: If the channel does not exist
        """
        if subscriber_id == channel_id:
            raise BadRequestError("You cannot subscribe to your own channel")

        channel = self.db.query(User).filter(User.id == channel_id).first()
        if channel is None:
            raise NotFoundError(f"No channel found with id: {channel_id}")

        try:
            subscribed = insert_or_ignore(
                self.db,
                Subscription,
                {"subscriber_id": subscriber_id, "subscribed_to_id": channel_id},
                conflict_columns=("subscriber_id", "subscribed_to_id"),
            )
            if not subscribed:
                self.db.query(Subscription).filter(
                    Subscription.subscriber_id == subscriber_id,
                    Subscription.subscribed_to_id == channel_id
                ).delete(synchronize_session=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"User {subscriber_id} {'subscribed to' if subscribed else 'unsubscribed from'} "
            f"channel {channel_id}"
        )
        return subscribed
