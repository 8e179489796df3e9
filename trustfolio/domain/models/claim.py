"""Domain model for achievement claims."""

from datetime import date
from enum import Enum
from typing import Optional, Union

from pydantic import AliasChoices, BaseModel, Field

from ..normalization import normalize_uri, stars_to_score, user_uri

MAX_STATEMENT_LENGTH = 500


class ClaimType(str, Enum):
    """Kinds of assertion a portfolio claim can make."""

    HAS_SKILL = "HAS_SKILL"
    COMPLETED_PROJECT = "COMPLETED_PROJECT"


class HowKnown(str, Enum):
    """Provenance of the knowledge behind a claim."""

    FIRST_HAND = "FIRST_HAND"
    SECOND_HAND = "SECOND_HAND"
    WEB_DOCUMENT = "WEB_DOCUMENT"
    VERIFIED_LOGIN = "VERIFIED_LOGIN"
    SIGNED_DOCUMENT = "SIGNED_DOCUMENT"


class Claim(BaseModel):
    """A stored achievement record, local or remote.

    Field names are snake_case in Python and camelCase on the wire, so
    ``model_dump(by_alias=True)`` yields the same document the claims API
    and the browser store use.
    """

    id: int = Field(..., description="Store-unique identifier")
    subject: str = Field("", description="Absolute URI the claim is about")
    claim_type: str = Field(
        "",
        validation_alias=AliasChoices("claim", "claimType", "claim_type"),
        serialization_alias="claim",
        description="Assertion tag, e.g. HAS_SKILL",
    )
    statement: str = Field("", description="Free-text description")
    effective_date: Optional[str] = Field(None, alias="effectiveDate")
    how_known: Optional[str] = Field(HowKnown.FIRST_HAND.value, alias="howKnown")
    stars: Optional[int] = Field(None, description="Rating 1-5")
    score: Optional[float] = Field(None, description="Trust score in [-1, 1]")
    aspect: Optional[str] = Field(None, description="Category label")
    created_at: Optional[str] = Field(None, alias="createdAt")

    class Config:
        """Pydantic model configuration."""
        populate_by_name = True
        # unknown keys from other app versions round-trip through storage
        extra = "allow"
        json_schema_extra = {
            "example": {
                "id": 1733856000000,
                "subject": "http://trustclaims.whatscookin.us/user/42",
                "claim": "COMPLETED_PROJECT",
                "statement": "Built a claims extraction pipeline with LangChain.",
                "effectiveDate": "2025-12-01",
                "howKnown": "FIRST_HAND",
                "stars": 5,
                "score": 1.0,
                "aspect": "project",
                "createdAt": "2025-12-10T18:40:00.000Z",
            }
        }

    def to_wire(self) -> dict:
        """Serialize with camelCase names, dropping empty optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ClaimInput(BaseModel):
    """Payload for creating a claim in either store."""

    subject: str = Field(..., min_length=1)
    claim_type: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("claim", "claimType", "claim_type"),
        serialization_alias="claim",
    )
    statement: str = Field(...)
    effective_date: str = Field(..., alias="effectiveDate")
    how_known: str = Field(HowKnown.FIRST_HAND.value, alias="howKnown")
    stars: Optional[int] = Field(None, ge=1, le=5)
    score: Optional[float] = Field(None, ge=-1.0, le=1.0)
    aspect: Optional[str] = None

    class Config:
        """Pydantic model configuration."""
        populate_by_name = True

    def normalized(self) -> "ClaimInput":
        """Return a copy ready for persistence.

        The subject becomes an absolute URI and a missing score is derived
        from the star rating.
        """
        score = self.score
        if self.stars is not None and score is None:
            score = stars_to_score(self.stars)
        return self.model_copy(
            update={"subject": normalize_uri(self.subject), "score": score}
        )

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ClaimPatch(BaseModel):
    """Partial update; ``id`` and ``createdAt`` are never patchable."""

    subject: Optional[str] = None
    claim_type: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("claim", "claimType", "claim_type"),
        serialization_alias="claim",
    )
    statement: Optional[str] = None
    effective_date: Optional[str] = Field(None, alias="effectiveDate")
    how_known: Optional[str] = Field(None, alias="howKnown")
    stars: Optional[int] = Field(None, ge=1, le=5)
    score: Optional[float] = Field(None, ge=-1.0, le=1.0)
    aspect: Optional[str] = None

    class Config:
        """Pydantic model configuration."""
        populate_by_name = True

    def normalized(self) -> "ClaimPatch":
        """Derive the score when only stars change; an explicit score wins."""
        update = {}
        if self.stars is not None and self.score is None:
            update["score"] = stars_to_score(self.stars)
        if self.subject:
            update["subject"] = normalize_uri(self.subject)
        return self.model_copy(update=update)

    def changes(self) -> dict:
        """Fields set on this patch, keyed by Python field name."""
        return self.model_dump(exclude_none=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class AchievementForm(BaseModel):
    """What a user fills in on the create and edit screens."""

    category: str = Field(default="project", description="project, skill, certification, ...")
    statement: str = Field(..., min_length=1, max_length=MAX_STATEMENT_LENGTH)
    stars: int = Field(default=5, ge=1, le=5)
    date: str = Field(default_factory=lambda: date.today().isoformat())

    def to_patch(self) -> ClaimPatch:
        """Edit-screen semantics: statement, date, rating and category change."""
        return ClaimPatch(
            statement=self.statement,
            effective_date=self.date,
            stars=self.stars,
            aspect=self.category,
        ).normalized()


def claim_type_for_category(category: str) -> ClaimType:
    if category == "skill":
        return ClaimType.HAS_SKILL
    return ClaimType.COMPLETED_PROJECT


def compose_claim_input(
    form: AchievementForm,
    identity: Optional[Union[str, int]],
    subject_uri_template: str,
    default_subject: str,
) -> ClaimInput:
    """Build a create payload from a filled-in achievement form.

    Args:
        form: Form values
        identity: Issuer/user id of the signed-in user, if any
        subject_uri_template: Namespace template with a ``{user_id}`` slot
        default_subject: Subject used when nobody is signed in

    Returns:
        Normalized claim input
    """
    subject = user_uri(subject_uri_template, identity) if identity else default_subject
    return ClaimInput(
        subject=subject,
        claim_type=claim_type_for_category(form.category).value,
        statement=form.statement,
        effective_date=form.date,
        how_known=HowKnown.FIRST_HAND.value,
        stars=form.stars,
        aspect=form.category,
    ).normalized()
