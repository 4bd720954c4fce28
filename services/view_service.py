from typing import Dict, Iterable, Optional

from sqlalchemy import exists, func
from sqlalchemy.orm import Session
import logging

from models import View
from services.video_service import get_video_or_404

logger = logging.getLogger(__name__)


class ViewLedger:
    """Append-only log of view events. Every call counts; nothing is deduplicated."""

    def __init__(self, db: Session):
        self.db = db

    async def record_view(self, video_id: int, user_id: Optional[int] = None) -> View:
        """
        Record one view of a video, attributed to ``user_id`` when given.

        Raises:
            NotFoundError: If the video does not exist
        """
        get_video_or_404(self.db, video_id)

        view = View(video_id=video_id, user_id=user_id)
        try:
            self.db.add(view)
            self.db.commit()
            self.db.refresh(view)
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"View on video {video_id} by {user_id if user_id is not None else 'anonymous'}")
        return view

    async def count_views(self, video_id: int) -> int:
        return self.db.query(func.count(View.id))\
            .filter(View.video_id == video_id)\
            .scalar()

    async def count_views_bulk(self, video_ids: Iterable[int]) -> Dict[int, int]:
        """
        View counts for many videos with a single grouped query.

        Videos without views are absent from the result.
        """
        video_ids = list(video_ids)
        if not video_ids:
            return {}

        rows = self.db.query(View.video_id, func.count(View.id))\
            .filter(View.video_id.in_(video_ids))\
            .group_by(View.video_id)\
            .all()
        return {video_id: count for video_id, count in rows}

    async def has_viewed(self, user_id: int, video_id: int) -> bool:
        return bool(self.db.query(
            exists().where(View.user_id == user_id, View.video_id == video_id)
        ).scalar())
