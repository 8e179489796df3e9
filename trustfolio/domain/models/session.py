"""Identity and token handed to the claims core by the auth layer."""

from typing import Optional, Union

from pydantic import BaseModel, Field

# Token value an OAuth-only sign-in receives; it grants no backend access.
LOCAL_ONLY_TOKEN = "nextauth_session"


class Session(BaseModel):
    """Explicit auth state passed into every store operation."""

    token: Optional[str] = Field(None, description="Bearer token for the claims API")
    user_id: Optional[Union[int, str]] = Field(None, description="Backend user id")
    issuer_id: Optional[Union[int, str]] = Field(None, description="Issuer id from OAuth sign-in")
    email: Optional[str] = None
    name: Optional[str] = None

    class Config:
        """Pydantic model configuration."""
        frozen = True

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def is_local_only(self) -> bool:
        return self.token == LOCAL_ONLY_TOKEN

    @property
    def identity(self) -> Optional[Union[int, str]]:
        """Issuer id when known, otherwise the backend user id."""
        if self.issuer_id not in (None, ""):
            return self.issuer_id
        if self.user_id not in (None, ""):
            return self.user_id
        return None

    @property
    def is_remote_eligible(self) -> bool:
        """Authenticated, holding a real backend token, with an identity."""
        return self.is_authenticated and not self.is_local_only and self.identity is not None


ANONYMOUS = Session()
