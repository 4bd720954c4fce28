from typing import Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session
import logging

from core.exceptions import UnauthenticatedError
from database import insert_or_ignore
from models import VideoLike, Polarity
from services.video_service import get_video_or_404

logger = logging.getLogger(__name__)


class ReactionStore:
    """
    Likes and dislikes of users on videos.

    Each (user, video) pair is in one of three states: no reaction, liked
    or disliked. Repeating the held reaction clears it; the opposite
    reaction flips it in place. The ``_user_video_like_uc`` unique
    constraint keeps at most one row per pair.
    """

    def __init__(self, db: Session):
        self.db = db

    async def query_reaction(self, user_id: int, video_id: int) -> Optional[Polarity]:
        """Return the user's reaction to the video, or None."""
        row = self.db.query(VideoLike.polarity).filter(
            VideoLike.user_id == user_id,
            VideoLike.video_id == video_id
        ).first()
        return Polarity(row.polarity) if row is not None else None

    async def set_reaction(
        self,
        user_id: Optional[int],
        video_id: int,
        polarity: Polarity
    ) -> Optional[Polarity]:
        """
        Apply a like or dislike action and return the resulting state.

        The read-decide-write runs in one transaction. The insert for the
        "no reaction yet" case is a single conflict-ignoring statement, so
        two concurrent first reactions cannot both create a row: the loser
        falls through to the locked update/delete path and is applied on
        top of the winner's row.

        Args:
            user_id: ID of the reacting user
            video_id: ID of the video
            polarity: LIKE or DISLIKE

        Returns:
            The new reaction, or None if the action cleared it

        Raises:
            UnauthenticatedError: If there is no user
            NotFoundError: If the video does not exist
        """
        if user_id is None:
            raise UnauthenticatedError()
        polarity = Polarity(polarity)
        get_video_or_404(self.db, video_id)

        try:
            inserted = insert_or_ignore(
                self.db,
                VideoLike,
                {"user_id": user_id, "video_id": video_id, "polarity": int(polarity)},
                conflict_columns=("user_id", "video_id"),
            )

            if inserted:
                state = polarity
            else:
                reaction = self.db.query(VideoLike).filter(
                    VideoLike.user_id == user_id,
                    VideoLike.video_id == video_id
                ).with_for_update().first()

                if reaction is None:
                    # Cleared by a concurrent toggle after our insert was skipped
                    self.db.add(VideoLike(user_id=user_id, video_id=video_id, polarity=int(polarity)))
                    state = polarity
                elif reaction.polarity == polarity:
                    self.db.delete(reaction)
                    state = None
                else:
                    reaction.polarity = int(polarity)
                    state = polarity

            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(
                f"Error applying {polarity.name} by user {user_id} on video {video_id}",
                exc_info=True
            )
            raise

        logger.info(
            f"User {user_id} {polarity.name} on video {video_id} -> "
            f"{state.name if state is not None else 'NONE'}"
        )
        return state

    async def like(self, user_id: Optional[int], video_id: int) -> Optional[Polarity]:
        return await self.set_reaction(user_id, video_id, Polarity.LIKE)

    async def dislike(self, user_id: Optional[int], video_id: int) -> Optional[Polarity]:
        return await self.set_reaction(user_id, video_id, Polarity.DISLIKE)

    async def count_reactions(self, video_id: int) -> Tuple[int, int]:
        """Return ``(likes, dislikes)`` for a video in one grouped query."""
        rows = self.db.query(VideoLike.polarity, func.count(VideoLike.id))\
            .filter(VideoLike.video_id == video_id)\
            .group_by(VideoLike.polarity)\
            .all()
        counts = {polarity: count for polarity, count in rows}
        return counts.get(Polarity.LIKE, 0), counts.get(Polarity.DISLIKE, 0)
