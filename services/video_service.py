from typing import Any, Dict, Optional

from sqlalchemy.orm import Session
import logging

from core.exceptions import NotFoundError, ForbiddenError, UnauthenticatedError
from models import Video, View, VideoLike, Comment, User
from schemas.video import VideoCreate

logger = logging.getLogger(__name__)


def get_video_or_404(db: Session, video_id: int, *options) -> Video:
    """Load a video by id or raise ``NotFoundError``."""
    video = db.query(Video).options(*options).filter(Video.id == video_id).first()
    if video is None:
        raise NotFoundError(f"No video found with id: {video_id}")
    return video


def serialize_user(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "avatar": user.avatar,
        "cover": user.cover,
        "about": user.about,
    }


def serialize_video(video: Video) -> Dict[str, Any]:
    """Video columns plus the owner, as exposed by every video payload."""
    data = video.to_dict()
    data["user"] = serialize_user(video.owner)
    return data


class VideoService:
    """Service for publishing and deleting videos."""

    def __init__(self, db: Session):
        self.db = db

    async def create_video(self, user_id: int, video_data: VideoCreate) -> Dict[str, Any]:
        """
        Publish a video whose media has already been uploaded.

        Args:
            user_id: ID of the owner
            video_data: Title, description, media URL and thumbnail URL

        Returns:
            The created video with its owner
        """
        video = Video(
            title=video_data.title,
            description=video_data.description,
            url=video_data.url,
            thumbnail=video_data.thumbnail,
            user_id=user_id,
        )
        try:
            self.db.add(video)
            self.db.commit()
            self.db.refresh(video)
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"User {user_id} published video {video.id}")
        return serialize_video(video)

    async def delete_video(self, video_id: int, requester_id: Optional[int]) -> None:
        """
        Delete a video owned by the requester.

        Views, reactions and comments are removed before the video row,
        all in one transaction.

        Raises:
            UnauthenticatedError: If there is no requester
            NotFoundError: If the video does not exist
            ForbiddenError: If the requester does not own the video
        """
        if requester_id is None:
            raise UnauthenticatedError()

        video = get_video_or_404(self.db, video_id)
        if video.user_id != requester_id:
            raise ForbiddenError("You are not authorized to delete this video!")

        try:
            views = self.db.query(View).filter(View.video_id == video_id)\
                .delete(synchronize_session=False)
            reactions = self.db.query(VideoLike).filter(VideoLike.video_id == video_id)\
                .delete(synchronize_session=False)
            comments = self.db.query(Comment).filter(Comment.video_id == video_id)\
                .delete(synchronize_session=False)
            self.db.delete(video)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(f"Error deleting video {video_id}", exc_info=True)
            raise

        logger.info(
            f"Deleted video {video_id} with {views} views, "
            f"{reactions} reactions and {comments} comments"
        )
