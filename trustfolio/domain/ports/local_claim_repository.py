"""Port for the locally owned claim array."""

from typing import List, Optional, Protocol

from ..models.claim import Claim, ClaimInput, ClaimPatch


class LocalClaimRepository(Protocol):
    """Protocol for local claim persistence.

    Implementations never raise: missing or unreadable data reads as empty
    and failed writes are reported through return values.
    """

    def list_local(self) -> List[Claim]:
        ...

    def get_local(self, claim_id: int) -> Optional[Claim]:
        ...

    def create_local(self, claim_input: ClaimInput) -> Claim:
        ...

    def update_local(self, claim_id: int, patch: ClaimPatch) -> bool:
        ...

    def delete_local(self, claim_id: int) -> bool:
        ...

    def replace_all(self, claims: List[Claim]) -> bool:
        """Persist the whole array in one write; False leaves it unchanged."""
        ...

    def clear(self) -> None:
        ...
