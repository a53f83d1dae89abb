from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import Optional


class AuthUser(BaseModel):
    id: str
    email: Optional[str] = None
    user_metadata: dict = {}


class Profile(BaseModel):
    id: str
    display_name: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def name(self) -> str:
        return self.display_name or self.full_name or fallback_name(None)

    @classmethod
    def fallback_for(cls, user: AuthUser) -> "Profile":
        """Profile to show when the profiles row is missing or unreadable."""
        name = fallback_name(user)
        return cls(id=user.id, full_name=name, display_name=name)


class Meeting(BaseModel):
    id: Optional[str] = None
    room_name: str
    host_id: str
    started_at: Optional[datetime] = None
    participant_count: int = 0

    @field_validator("participant_count", mode="before")
    @classmethod
    def default_count(cls, value):
        return value or 0


def fallback_name(user: Optional[AuthUser]) -> str:
    """Metadata full name, else the e-mail local part, else "User"."""
    if user is not None:
        full_name = user.user_metadata.get("full_name")
        if full_name:
            return full_name
        if user.email:
            local_part = user.email.split("@")[0]
            if local_part:
                return local_part
    return "User"
