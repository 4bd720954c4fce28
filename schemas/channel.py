from typing import List

from pydantic import BaseModel, Field

from .user import UserPublic
from .video import VideoFeedItem


class ChannelProfile(UserPublic):
    """A channel page: the owner's public profile, audience and videos."""
    subscribers_count: int = 0
    is_subscribed: bool = False
    is_me: bool = False
    videos: List[VideoFeedItem] = Field(default_factory=list)


class ChannelResponse(BaseModel):
    channel: ChannelProfile
