from .user import (
    UserPublic, UserResponse, MeResponse, GoogleLoginRequest, TokenResponse, SubscriptionStatus
)
from .comment import Comment, CommentCreate, CommentResponse
from .video import (
    FeedKind, Video, VideoCreate, VideoFeedItem, VideoDetail,
    VideoListResponse, VideoDetailResponse, VideoCreatedResponse
)
from .channel import ChannelProfile, ChannelResponse

__all__ = [
    # User models
    'UserPublic', 'UserResponse', 'MeResponse', 'GoogleLoginRequest', 'TokenResponse',
    'SubscriptionStatus',

    # Comment models
    'Comment', 'CommentCreate', 'CommentResponse',

    # Video models
    'FeedKind', 'Video', 'VideoCreate', 'VideoFeedItem', 'VideoDetail',
    'VideoListResponse', 'VideoDetailResponse', 'VideoCreatedResponse',

    # Channel models
    'ChannelProfile', 'ChannelResponse',
]
