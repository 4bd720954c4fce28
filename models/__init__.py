"""
Models package for the application.

This package contains all SQLAlchemy models for the application.
"""

# Import all models here to make them available when importing from models
from .user import User
from .video import Video
from .view import View
from .video_like import VideoLike, Polarity
from .subscription import Subscription
from .comment import Comment

__all__ = [
    'User',
    'Video',
    'View',
    'VideoLike',
    'Polarity',
    'Subscription',
    'Comment',
]
