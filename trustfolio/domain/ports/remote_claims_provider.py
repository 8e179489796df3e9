"""Port interface for the remote claims API."""

from abc import ABC, abstractmethod
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from ..models.claim import Claim, ClaimInput, ClaimPatch


class IssuerClaimsPage(BaseModel):
    """One page of claims made by a single issuer."""

    claims: List[Claim] = Field(default_factory=list)
    page: int = 1
    limit: int = 50
    total: Optional[int] = None


class RemoteClaimsProvider(ABC):
    """Abstract interface for a bearer-authenticated claims backend.

    Every operation takes the caller's token explicitly. Implementations
    raise ``HttpError`` for non-2xx answers and ``NetworkError`` when the
    backend is unreachable; they never retry and never fall back.
    """

    @abstractmethod
    async def create(self, claim_input: ClaimInput, token: str) -> Optional[Claim]:
        """Create a claim and return it with its server-assigned id.

        Returns None when the backend accepted the claim without echoing it.
        """
        pass

    @abstractmethod
    async def list_by_subject(self, subject: str, token: str) -> List[Claim]:
        """List claims about a subject URI."""
        pass

    @abstractmethod
    async def list_by_issuer(
        self,
        user_id: Union[int, str],
        token: str,
        page: int = 1,
        limit: int = 50,
    ) -> IssuerClaimsPage:
        """List claims issued by a user.

        Args:
            user_id: Backend user/issuer id, turned into an issuer URI
            token: Bearer token
            page: 1-based page number
            limit: Page size

        Returns:
            Page of claims
        """
        pass

    @abstractmethod
    async def update(self, claim_id: int, patch: ClaimPatch, token: str) -> None:
        """Apply a partial update to a remote claim."""
        pass

    @abstractmethod
    async def delete(self, claim_id: int, token: str) -> None:
        """Delete a remote claim."""
        pass

    @abstractmethod
    async def shutdown(self) -> None:
        """Release network resources."""
        pass

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get the provider name."""
        pass
