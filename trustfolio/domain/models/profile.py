"""Profile settings shown on the public portfolio."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

MAX_BIO_LENGTH = 500


class ProfileSettings(BaseModel):
    display_name: str = Field("", alias="displayName")
    bio: str = Field("", max_length=MAX_BIO_LENGTH)
    updated_at: Optional[str] = Field(None, alias="updatedAt")

    class Config:
        """Pydantic model configuration."""
        populate_by_name = True

    def stamped(self) -> "ProfileSettings":
        now = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        return self.model_copy(update={"updated_at": now})


def public_username(email: Optional[str]) -> str:
    """Username used in the public portfolio link: the email's local part."""
    if not email:
        return "demo"
    return email.split("@")[0] or "demo"


def display_name_from_username(username: str) -> str:
    if not username:
        return username
    return username[0].upper() + username[1:]
