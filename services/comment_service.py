from typing import Any, Dict

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload
import logging

from core.exceptions import NotFoundError, ForbiddenError
from models import Comment
from services.video_service import get_video_or_404, serialize_user

logger = logging.getLogger(__name__)


def serialize_comment(comment: Comment) -> Dict[str, Any]:
    data = comment.to_dict()
    data["user"] = serialize_user(comment.owner)
    return data


class CommentService:
    """Service for comments on videos."""

    def __init__(self, db: Session):
        self.db = db

    async def add_comment(self, video_id: int, user_id: int, text: str) -> Dict[str, Any]:
        get_video_or_404(self.db, video_id)

        comment = Comment(text=text, user_id=user_id, video_id=video_id)
        try:
            self.db.add(comment)
            self.db.commit()
            self.db.refresh(comment)
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"User {user_id} commented on video {video_id}")
        return serialize_comment(comment)

    async def delete_comment(self, video_id: int, comment_id: int, user_id: int) -> None:
        """
        Delete a comment written by ``user_id``.

        Raises:
            NotFoundError: If the comment does not exist on this video
            ForbiddenError: If the comment belongs to someone else
        """
        comment = self.db.query(Comment).filter(
            Comment.id == comment_id,
            Comment.video_id == video_id
        ).first()

        if comment is None:
            raise NotFoundError(f"No comment found with id: {comment_id}")
        if comment.user_id != user_id:
            raise ForbiddenError("You are not authorized to delete this comment!")

        try:
            self.db.delete(comment)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    async def count_comments(self, video_id: int) -> int:
        return self.db.query(func.count(Comment.id))\
            .filter(Comment.video_id == video_id)\
            .scalar()

    async def list_comments(self, video_id: int) -> list:
        """Comments of a video, newest first, each with its author."""
        comments = self.db.query(Comment)\
            .options(joinedload(Comment.owner))\
            .filter(Comment.video_id == video_id)\
            .order_by(Comment.created_at.desc(), Comment.id.desc())\
            .all()
        return [serialize_comment(comment) for comment in comments]
