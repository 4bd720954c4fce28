from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .user import UserPublic


class CommentCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=5000)


class Comment(BaseModel):
    id: int
    text: str
    user_id: int
    video_id: int
    created_at: datetime
    user: UserPublic

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class CommentResponse(BaseModel):
    comment: Comment
