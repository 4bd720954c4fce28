from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from database import get_db
from models import User
from routers.auth import get_current_user, get_optional_current_user
from schemas.channel import ChannelResponse
from schemas.user import SubscriptionStatus
from schemas.video import VideoListResponse
from services.engagement_service import EngagementAggregator
from services.ranking_service import RankingEngine
from services.subscription_service import SubscriptionGraph

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Channels"])


def _internal_error(action: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"An error occurred while {action}"
    )


# Personal feeds are declared before /{channel_id}

@router.get("/feed/subscriptions", response_model=VideoListResponse, summary="Videos from subscribed channels")
async def get_subscription_feed(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        return {"videos": await RankingEngine(db).subscription_feed(current_user.id)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting subscription feed for user {current_user.id}: {str(e)}", exc_info=True)
        raise _internal_error("retrieving the subscription feed")


@router.get("/feed/history", response_model=VideoListResponse, summary="Watch history")
async def get_history_feed(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Videos the current user has watched, most recently watched first."""
    try:
        return {"videos": await RankingEngine(db).history_feed(current_user.id)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting history for user {current_user.id}: {str(e)}", exc_info=True)
        raise _internal_error("retrieving the watch history")


@router.get("/feed/liked", response_model=VideoListResponse, summary="Liked videos")
async def get_liked_feed(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        return {"videos": await RankingEngine(db).liked_feed(current_user.id)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting liked videos for user {current_user.id}: {str(e)}", exc_info=True)
        raise _internal_error("retrieving liked videos")


@router.get("/feed/mine", response_model=VideoListResponse, summary="Your videos")
async def get_my_videos(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        return {"videos": await RankingEngine(db).channel_feed(current_user.id)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting videos of user {current_user.id}: {str(e)}", exc_info=True)
        raise _internal_error("retrieving your videos")


@router.get("/{channel_id}", response_model=ChannelResponse, summary="Channel page")
async def get_channel(
    channel_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_current_user)
):
    """
    Get a channel with its subscriber count, its videos and the caller's
    relationship to it.

    Works without authentication; ``isSubscribed`` and ``isMe`` are then false.
    """
    try:
        viewer_id = current_user.id if current_user else None
        aggregator = EngagementAggregator(db)
        channel = await aggregator.get_channel_profile(channel_id, viewer_id)
        channel["videos"] = await RankingEngine(db, aggregator).channel_feed(channel_id)
        return {"channel": channel}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting channel {channel_id}: {str(e)}", exc_info=True)
        raise _internal_error("retrieving the channel")


@router.post(
    "/{channel_id}/toggle-subscribe",
    response_model=SubscriptionStatus,
    summary="Subscribe to or unsubscribe from a channel"
)
async def toggle_subscribe(
    channel_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Subscribe the current user to a channel, or unsubscribe if already subscribed.

    - **channel_id**: ID of the user whose channel to (un)subscribe
    """
    try:
        graph = SubscriptionGraph(db)
        subscribed = await graph.toggle_subscription(current_user.id, channel_id)
        return SubscriptionStatus(
            is_subscribed=subscribed,
            subscribers_count=await graph.count_subscribers(channel_id),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error toggling subscription to channel {channel_id}: {str(e)}", exc_info=True)
        raise _internal_error("updating the subscription")
