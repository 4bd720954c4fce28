from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
import logging

from database import get_db
from models import User
from routers.auth import get_current_user, get_optional_current_user
from schemas.comment import CommentCreate, CommentResponse
from schemas.video import (
    VideoCreate, VideoCreatedResponse, VideoDetailResponse, VideoListResponse
)
from services.comment_service import CommentService
from services.engagement_service import EngagementAggregator
from services.ranking_service import RankingEngine
from services.reaction_service import ReactionStore
from services.video_service import VideoService
from services.view_service import ViewLedger

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Videos"])


def _internal_error(action: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"An error occurred while {action}"
    )


# Feeds come first so that /trending and /search are not taken for a {video_id}

@router.get("", response_model=VideoListResponse, summary="Recommended videos, newest first")
async def get_recommended_videos(db: Session = Depends(get_db)):
    try:
        return {"videos": await RankingEngine(db).recent_feed()}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting recommended videos: {str(e)}", exc_info=True)
        raise _internal_error("retrieving videos")


@router.get("/trending", response_model=VideoListResponse, summary="Videos by view count")
async def get_trending_videos(db: Session = Depends(get_db)):
    try:
        return {"videos": await RankingEngine(db).trending_feed()}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting trending videos: {str(e)}", exc_info=True)
        raise _internal_error("retrieving trending videos")


@router.get("/search", response_model=VideoListResponse, summary="Search videos by title or description")
async def search_videos(
    query: Optional[str] = Query(None, description="Text to look for, case-insensitive"),
    db: Session = Depends(get_db)
):
    """
    Search videos whose title or description contains the query.

    A missing or empty query is rejected with 400.
    """
    try:
        return {"videos": await RankingEngine(db).search_feed(query)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error searching videos for {query!r}: {str(e)}", exc_info=True)
        raise _internal_error("searching videos")


@router.post(
    "",
    response_model=VideoCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Publish a video"
)
async def add_video(
    video_data: VideoCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        return {"video": await VideoService(db).create_video(current_user.id, video_data)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating video: {str(e)}", exc_info=True)
        raise _internal_error("creating the video")


@router.get("/{video_id}", response_model=VideoDetailResponse, summary="Video detail")
async def get_video(
    video_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_current_user)
):
    """
    Get a video with its counts, comments and the caller's relationship to it.

    Works without authentication; the viewer flags are then all false.
    """
    try:
        viewer_id = current_user.id if current_user else None
        return {"video": await EngagementAggregator(db).get_video_detail(video_id, viewer_id)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting video {video_id}: {str(e)}", exc_info=True)
        raise _internal_error("retrieving the video")


@router.delete("/{video_id}", summary="Delete a video and everything attached to it")
async def delete_video(
    video_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        await VideoService(db).delete_video(video_id, current_user.id)
        return {}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting video {video_id}: {str(e)}", exc_info=True)
        raise _internal_error("deleting the video")


@router.post("/{video_id}/view", summary="Record a view")
async def add_video_view(
    video_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_current_user)
):
    try:
        await ViewLedger(db).record_view(video_id, current_user.id if current_user else None)
        return {}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error recording view on video {video_id}: {str(e)}", exc_info=True)
        raise _internal_error("recording the view")


@router.post("/{video_id}/like", summary="Like a video, or remove the like")
async def like_video(
    video_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        await ReactionStore(db).like(current_user.id, video_id)
        return {}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error liking video {video_id}: {str(e)}", exc_info=True)
        raise _internal_error("liking the video")


@router.post("/{video_id}/dislike", summary="Dislike a video, or remove the dislike")
async def dislike_video(
    video_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        await ReactionStore(db).dislike(current_user.id, video_id)
        return {}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error disliking video {video_id}: {str(e)}", exc_info=True)
        raise _internal_error("disliking the video")


@router.post("/{video_id}/comments", response_model=CommentResponse, summary="Comment on a video")
async def add_comment(
    video_id: int,
    comment_data: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        comment = await CommentService(db).add_comment(video_id, current_user.id, comment_data.text)
        return {"comment": comment}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error commenting on video {video_id}: {str(e)}", exc_info=True)
        raise _internal_error("adding the comment")


@router.delete("/{video_id}/comments/{comment_id}", summary="Delete your comment")
async def delete_comment(
    video_id: int,
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        await CommentService(db).delete_comment(video_id, comment_id, current_user.id)
        return {}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting comment {comment_id}: {str(e)}", exc_info=True)
        raise _internal_error("deleting the comment")
