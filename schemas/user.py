from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class UserPublic(BaseModel):
    """Public view of a user / channel, embedded in video payloads."""
    id: int
    username: str
    avatar: Optional[str] = None
    cover: Optional[str] = None
    about: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class UserResponse(UserPublic):
    """The signed-in user, with the channels they subscribe to."""
    email: str
    created_at: datetime
    channels: List[UserPublic] = Field(default_factory=list)


class MeResponse(BaseModel):
    user: UserResponse


class GoogleLoginRequest(BaseModel):
    """Identity asserted by the external identity provider."""
    username: str = Field(..., min_length=1, max_length=50, examples=["example_user"])
    email: EmailStr = Field(..., examples=["user@example.com"])


class TokenResponse(BaseModel):
    """Schema for token response."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token expiration time in seconds")


class SubscriptionStatus(BaseModel):
    is_subscribed: bool
    subscribers_count: int

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
