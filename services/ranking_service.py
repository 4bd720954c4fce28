from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload
import logging

from core.exceptions import BadRequestError, NotFoundError
from models import Polarity, Subscription, User, Video, VideoLike, View
from schemas.video import FeedKind
from services.engagement_service import EngagementAggregator

logger = logging.getLogger(__name__)


class RankingEngine:
    """
    Builds the video feeds.

    The recency, trending and search feeds cover the whole video table; the
    channel, subscription, history and liked feeds are scoped to one user.
    Every feed is annotated with view counts in one grouped query.
    """

    def __init__(self, db: Session, aggregator: Optional[EngagementAggregator] = None):
        self.db = db
        self.aggregator = aggregator or EngagementAggregator(db)

    def _videos_query(self):
        return self.db.query(Video).options(joinedload(Video.owner))

    async def recent_feed(self) -> List[Dict[str, Any]]:
        """All videos, newest first, with view counts."""
        videos = self._videos_query()\
            .order_by(Video.created_at.desc(), Video.id.desc())\
            .all()
        return await self.aggregator.annotate_views(videos)

    async def trending_feed(self) -> List[Dict[str, Any]]:
        """
        All videos by view count, highest first.

        The sort is stable, so videos with equal counts keep their
        newest-first order.
        """
        feed = await self.recent_feed()
        return sorted(feed, key=lambda item: item["views"], reverse=True)

    async def search_feed(self, query: Optional[str]) -> List[Dict[str, Any]]:
        """
        Videos whose title or description contains ``query``, ignoring case.

        Results come back in storage order.

        Raises:
            BadRequestError: If the query is missing or empty
        """
        if not query:
            raise BadRequestError("Please enter a search query")

        videos = self._videos_query()\
            .filter(or_(
                Video.title.icontains(query, autoescape=True),
                Video.description.icontains(query, autoescape=True),
            ))\
            .order_by(Video.id)\
            .all()
        logger.debug(f"Search {query!r} matched {len(videos)} videos")
        return await self.aggregator.annotate_views(videos)

    async def channel_feed(self, channel_id: int) -> List[Dict[str, Any]]:
        """
        Videos published by one channel, newest first.

        Raises:
            NotFoundError: If the channel does not exist
        """
        if self.db.query(User.id).filter(User.id == channel_id).first() is None:
            raise NotFoundError(f"No channel found with id: {channel_id}")

        videos = self._videos_query()\
            .filter(Video.user_id == channel_id)\
            .order_by(Video.created_at.desc(), Video.id.desc())\
            .all()
        return await self.aggregator.annotate_views(videos)

    async def subscription_feed(self, user_id: int) -> List[Dict[str, Any]]:
        """Videos of every channel the user subscribes to, newest first."""
        videos = self._videos_query()\
            .join(Subscription, Subscription.subscribed_to_id == Video.user_id)\
            .filter(Subscription.subscriber_id == user_id)\
            .order_by(Video.created_at.desc(), Video.id.desc())\
            .all()
        return await self.aggregator.annotate_views(videos)

    async def history_feed(self, user_id: int) -> List[Dict[str, Any]]:
        """
        Videos the user has watched, most recently watched first.

        A video watched several times appears once, at the position of its
        latest view. Anonymous views are never part of a history.
        """
        last_views = self.db.query(
            View.video_id,
            func.max(View.id).label("last_view_id")
        )\
            .filter(View.user_id == user_id)\
            .group_by(View.video_id)\
            .subquery()

        videos = self._videos_query()\
            .join(last_views, last_views.c.video_id == Video.id)\
            .order_by(last_views.c.last_view_id.desc())\
            .all()
        return await self.aggregator.annotate_views(videos)

    async def liked_feed(self, user_id: int) -> List[Dict[str, Any]]:
        """Videos the user currently likes, most recently liked first."""
        videos = self._videos_query()\
            .join(VideoLike, VideoLike.video_id == Video.id)\
            .filter(
                VideoLike.user_id == user_id,
                VideoLike.polarity == int(Polarity.LIKE)
            )\
            .order_by(VideoLike.updated_at.desc(), VideoLike.id.desc())\
            .all()
        return await self.aggregator.annotate_views(videos)

    async def get_feed(self, kind: FeedKind = FeedKind.RECENT, query: Optional[str] = None) -> List[Dict[str, Any]]:
        """Dispatch to the search feed when a query is given, else to ``kind``."""
        if query is not None:
            return await self.search_feed(query)
        if FeedKind(kind) is FeedKind.TRENDING:
            return await self.trending_feed()
        return await self.recent_feed()
