"""User Data Transfer Objects."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    created_at: datetime | None = None


class CurrentUser(UserResponse):
    """The authenticated caller, resolved by the auth guard for each request."""

    model_config = ConfigDict(from_attributes=True, frozen=True)
