"""Result values produced by the mode resolver and the transfer service."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .claim import Claim


class Provenance(str, Enum):
    """Where a claim set in hand came from."""

    BACKEND = "backend"
    LOCAL = "local"


class ClaimSet(BaseModel):
    """A homogeneously sourced set of claims plus where it came from."""

    claims: List[Claim] = Field(default_factory=list)
    provenance: Provenance
    fallback: bool = Field(
        default=False,
        description="True when local data stands in for a failed remote read",
    )
    notice: Optional[str] = Field(None, description="Informational message for the user")
    page: Optional[int] = None
    limit: Optional[int] = None
    total: Optional[int] = None

    def __len__(self) -> int:
        return len(self.claims)


class ConfirmationAction(str, Enum):
    """Operations that need an explicit yes from the user."""

    DELETE_CLAIM = "delete_claim"
    IMPORT_CLAIMS = "import_claims"
    SAVE_LOCALLY = "save_locally"
    DELETE_ACCOUNT = "delete_account"


class ConfirmationRequired(BaseModel):
    """Returned instead of acting; the caller repeats the call with its answer."""

    status: str = "confirmation_required"
    action: ConfirmationAction
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class CreateResult(BaseModel):
    status: str = "created"
    claim: Optional[Claim] = Field(None, description="Absent when the backend did not echo the new claim")
    provenance: Provenance
    notice: Optional[str] = None


class UpdateResult(BaseModel):
    status: str = "updated"
    claim_id: int
    provenance: Provenance
    found: bool = True


class DeleteResult(BaseModel):
    status: str = "deleted"
    claim_id: int
    provenance: Provenance


class MergedResult(BaseModel):
    """Outcome of merging an imported batch into the local store."""

    status: str = "imported"
    imported: int
    total: int
    assigned_ids: List[int] = Field(default_factory=list)
    claims: List[Claim] = Field(default_factory=list)
