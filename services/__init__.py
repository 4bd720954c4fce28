"""
Services package for the application.

This package contains the service classes that hold the business logic:
reactions, views, subscriptions, the engagement aggregate and the feeds.
"""
from .reaction_service import ReactionStore
from .view_service import ViewLedger
from .subscription_service import SubscriptionGraph
from .engagement_service import EngagementAggregator
from .ranking_service import RankingEngine
from .video_service import VideoService
from .comment_service import CommentService
from .user_service import UserService

__all__ = [
    'ReactionStore',
    'ViewLedger',
    'SubscriptionGraph',
    'EngagementAggregator',
    'RankingEngine',
    'VideoService',
    'CommentService',
    'UserService',
]
