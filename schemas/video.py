from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .comment import Comment
from .user import UserPublic


class FeedKind(str, Enum):
    RECENT = "recent"
    TRENDING = "trending"


class VideoCreate(BaseModel):
    """Schema for publishing a video whose media is already uploaded."""
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    url: str = Field(..., min_length=1, max_length=512, description="URL of the uploaded media file")
    thumbnail: Optional[str] = Field(None, max_length=512, description="URL of the thumbnail image")


class Video(BaseModel):
    """A video together with its owner."""
    id: int
    title: str
    description: Optional[str] = None
    url: str
    thumbnail: Optional[str] = None
    user_id: int
    created_at: datetime
    user: UserPublic

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class VideoFeedItem(Video):
    """Feed entry: the video annotated with its total view count."""
    views: int = 0


class VideoDetail(Video):
    """Full engagement aggregate of a video as seen by one viewer."""
    views: int = 0
    likes_count: int = 0
    dislikes_count: int = 0
    subscribers_count: int = 0
    comments_count: int = 0
    is_liked: bool = False
    is_disliked: bool = False
    is_viewed: bool = False
    is_subscribed: bool = False
    is_video_mine: bool = False
    comments: List[Comment] = Field(default_factory=list)


class VideoListResponse(BaseModel):
    videos: List[VideoFeedItem]


class VideoDetailResponse(BaseModel):
    video: VideoDetail


class VideoCreatedResponse(BaseModel):
    video: Video
