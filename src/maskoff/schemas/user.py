"""Profile directory schemas."""

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    """Public profile information."""

    user_id: str
    username: str
    display_name: str | None = None

    model_config = ConfigDict(from_attributes=True)
