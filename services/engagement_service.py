from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session, joinedload
import logging

from core.exceptions import NotFoundError
from models import Polarity, User, Video
from services.comment_service import CommentService
from services.reaction_service import ReactionStore
from services.subscription_service import SubscriptionGraph
from services.video_service import get_video_or_404, serialize_user, serialize_video
from services.view_service import ViewLedger

logger = logging.getLogger(__name__)


class EngagementAggregator:
    """
    Derives the engagement aggregate of a video on every read.

    Nothing is cached: counts and viewer flags are recomputed from the
    reaction, view, subscription and comment tables each time.
    """

    def __init__(self, db: Session):
        self.db = db
        self.reactions = ReactionStore(db)
        self.views = ViewLedger(db)
        self.subscriptions = SubscriptionGraph(db)
        self.comments = CommentService(db)

    async def get_video_detail(self, video_id: int, viewer_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Get a video with its counts and the viewer's relationship to it.

        Args:
            video_id: ID of the video
            viewer_id: ID of the current user, or None for anonymous callers

        Returns:
            Dictionary with the video, its owner, comments, counts and flags.
            For anonymous callers every viewer flag is False and no
            viewer-scoped table is read.

        Raises:
            NotFoundError: If the video does not exist
        """
        video = get_video_or_404(self.db, video_id, joinedload(Video.owner))

        is_video_mine = False
        is_liked = False
        is_disliked = False
        is_viewed = False
        is_subscribed = False

        if viewer_id is not None:
            is_video_mine = viewer_id == video.user_id
            reaction = await self.reactions.query_reaction(viewer_id, video.id)
            is_liked = reaction is Polarity.LIKE
            is_disliked = reaction is Polarity.DISLIKE
            is_viewed = await self.views.has_viewed(viewer_id, video.id)
            is_subscribed = await self.subscriptions.is_subscribed(viewer_id, video.user_id)

        likes_count, dislikes_count = await self.reactions.count_reactions(video.id)
        comments = await self.comments.list_comments(video.id)

        detail = serialize_video(video)
        detail.update({
            "views": await self.views.count_views(video.id),
            "likes_count": likes_count,
            "dislikes_count": dislikes_count,
            "subscribers_count": await self.subscriptions.count_subscribers(video.user_id),
            "comments_count": await self.comments.count_comments(video.id),
            "comments": comments,
            "is_liked": is_liked,
            "is_disliked": is_disliked,
            "is_viewed": is_viewed,
            "is_subscribed": is_subscribed,
            "is_video_mine": is_video_mine,
        })
        return detail

    async def get_channel_profile(self, channel_id: int, viewer_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Public profile of a channel with its subscriber count and the
        viewer's relationship to it.

        Without a viewer, ``is_subscribed`` and ``is_me`` are False and the
        subscription edges of the viewer are not read.

        Raises:
            NotFoundError: If the channel does not exist
        """
        channel = self.db.query(User).filter(User.id == channel_id).first()
        if channel is None:
            raise NotFoundError(f"No channel found with id: {channel_id}")

        is_me = False
        is_subscribed = False
        if viewer_id is not None:
            is_me = viewer_id == channel.id
            is_subscribed = await self.subscriptions.is_subscribed(viewer_id, channel.id)

        profile = serialize_user(channel)
        profile.update({
            "subscribers_count": await self.subscriptions.count_subscribers(channel.id),
            "is_subscribed": is_subscribed,
            "is_me": is_me,
        })
        return profile

    async def annotate_views(self, videos: Sequence[Video]) -> List[Dict[str, Any]]:
        """Attach ``views`` to each video, keeping the given order."""
        counts = await self.views.count_views_bulk(video.id for video in videos)
        feed = []
        for video in videos:
            item = serialize_video(video)
            item["views"] = counts.get(video.id, 0)
            feed.append(item)
        return feed
