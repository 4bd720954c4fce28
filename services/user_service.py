from typing import Any, Dict

from sqlalchemy.orm import Session
import logging

from core.exceptions import NotFoundError
from models.user import User
from services.subscription_service import SubscriptionGraph
from services.video_service import serialize_user

logger = logging.getLogger(__name__)


class UserService:
    """Service for handling user-related operations."""

    def __init__(self, db: Session):
        self.db = db

    async def get_or_create_by_email(self, username: str, email: str) -> User:
        """
        Find the user with this email, creating it on first sign-in.

        The username is only used when the user is created.
        """
        user = self.db.query(User).filter(User.email == email).first()
        if user is not None:
            return user

        user = User(username=username, email=email)
        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Created user {user.id} for {email}")
        return user

    async def get_user(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if user is None:
            raise NotFoundError(f"No user found with id: {user_id}")
        return user

    async def get_profile(self, user: User) -> Dict[str, Any]:
        """The user with the channels they subscribe to."""
        channels = await SubscriptionGraph(self.db).channels_for(user.id)
        data = serialize_user(user)
        data.update({
            "email": user.email,
            "created_at": user.created_at,
            "channels": [serialize_user(channel) for channel in channels],
        })
        return data
