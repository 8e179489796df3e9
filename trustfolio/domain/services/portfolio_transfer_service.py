"""Export of claim sets and import/merge into the local store."""

import json
import logging
from datetime import date, datetime
from typing import Any, Callable, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError, model_validator

from ..errors import InvalidFormatError, PersistenceError
from ..models.claim import Claim
from ..models.claim_set import ClaimSet, ConfirmationAction, ConfirmationRequired, MergedResult
from ..normalization import iso_timestamp, normalize_uri, stars_to_score, utc_now
from ..ports.local_claim_repository import LocalClaimRepository

logger = logging.getLogger(__name__)

EXPORT_FILENAME_TEMPLATE = "trustfolio-achievements-{day}.json"

ImportPayload = Union[str, bytes, List[Any]]


class ExportDocument(BaseModel):
    """A downloadable JSON document of claims."""

    filename: str
    content: str
    media_type: str = "application/json"

    @property
    def content_bytes(self) -> bytes:
        return self.content.encode("utf-8")


class ImportedClaim(Claim):
    """A record in an import batch.

    Accepts every record an export can contain, including sparse backend
    claims without a date or rating. Only records carrying none of subject,
    claim type and statement are rejected.
    """

    id: Optional[Union[int, str]] = Field(None, description="Ignored; a fresh id is assigned")

    @model_validator(mode="after")
    def _require_claim_content(self) -> "ImportedClaim":
        if not (self.subject or self.claim_type or self.statement):
            raise ValueError("record has no subject, claim or statement")
        return self

    def normalized(self) -> "ImportedClaim":
        score = self.score
        if self.stars is not None and score is None:
            score = stars_to_score(self.stars)
        return self.model_copy(update={"subject": normalize_uri(self.subject), "score": score})


def export_claims(claim_set: ClaimSet, today: Optional[date] = None) -> ExportDocument:
    """Serialize the full claim array as a pretty-printed UTF-8 JSON document."""
    day = (today or date.today()).isoformat()
    content = json.dumps(
        [claim.to_wire() for claim in claim_set.claims],
        indent=2,
        ensure_ascii=False,
    )
    return ExportDocument(filename=EXPORT_FILENAME_TEMPLATE.format(day=day), content=content)


def parse_import_payload(payload: ImportPayload) -> List[ImportedClaim]:
    """Validate an import batch without touching any store.

    Args:
        payload: JSON text/bytes, or an already-decoded list

    Returns:
        Validated records in batch order

    Raises:
        InvalidFormatError: If the payload is not a list of claim records
    """
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidFormatError(f"Import file is not UTF-8: {e}") from e
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except ValueError as e:
            raise InvalidFormatError(f"Import file is not valid JSON: {e}") from e

    if not isinstance(payload, list):
        raise InvalidFormatError(f"Import must be a JSON array of claims, got {type(payload).__name__}")

    records = []
    for position, item in enumerate(payload):
        if not isinstance(item, dict):
            raise InvalidFormatError(f"Record {position} is not an object")
        try:
            records.append(ImportedClaim.model_validate(item))
        except ValidationError as e:
            fields = ", ".join(".".join(str(part) for part in err["loc"]) or err["msg"] for err in e.errors())
            raise InvalidFormatError(f"Record {position} is not a valid claim ({fields})") from e
    return records


class PortfolioTransferService:
    """Moves claim sets in and out of files."""

    def __init__(
        self,
        local: LocalClaimRepository,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._local = local
        self._clock = clock or utc_now

    def export(self, claim_set: ClaimSet, today: Optional[date] = None) -> ExportDocument:
        document = export_claims(claim_set, today or self._clock().date())
        logger.info(f"📤 Exported {len(claim_set.claims)} {claim_set.provenance.value} claims to {document.filename}")
        return document

    def import_batch(
        self,
        payload: ImportPayload,
        confirmed: bool = False,
    ) -> Union[MergedResult, ConfirmationRequired]:
        """Merge an external batch into the local claim set.

        Every record gets a fresh id above the current maximum, in batch
        order. Records are appended without deduplication and written in a
        single storage write.

        Args:
            payload: Batch to import
            confirmed: Whether the user already agreed to the import

        Returns:
            The merge outcome, or a confirmation request

        Raises:
            InvalidFormatError: If the payload is malformed; nothing changes
            PersistenceError: If the merged set could not be written; the
                stored set is left as it was
        """
        records = parse_import_payload(payload)
        if not confirmed:
            return ConfirmationRequired(
                action=ConfirmationAction.IMPORT_CLAIMS,
                message=f"Import {len(records)} achievements into local storage?",
                details={"count": len(records)},
            )

        existing = self._local.list_local()
        max_id = max([0] + [claim.id for claim in existing])
        stamp = iso_timestamp(self._clock())

        imported = []
        for position, record in enumerate(records):
            payload_fields = record.normalized().model_dump(exclude={"id", "created_at"})
            imported.append(
                Claim(
                    id=max_id + position + 1,
                    # an exported createdAt survives the copy; only the id is reassigned
                    created_at=record.created_at or stamp,
                    **payload_fields,
                )
            )

        merged = existing + imported
        if not self._local.replace_all(merged):
            raise PersistenceError("Import aborted: local claims could not be written")

        logger.info(f"📥 Imported {len(imported)} claims; local store now holds {len(merged)}")
        return MergedResult(
            imported=len(imported),
            total=len(merged),
            assigned_ids=[claim.id for claim in imported],
            claims=imported,
        )
