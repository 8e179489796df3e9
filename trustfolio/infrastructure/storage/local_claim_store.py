"""Claims persisted in a single local storage slot."""

import json
import logging
from datetime import datetime
from typing import Any, Callable, Iterable, List, Optional

from pydantic import ValidationError

from ...domain.errors import ParseError, StorageUnavailableError
from ...domain.models.claim import Claim, ClaimInput, ClaimPatch
from ...domain.normalization import iso_timestamp, utc_now
from ...domain.ports.key_value_storage import CLAIMS_KEY, KeyValueStorage
from ...domain.ports.local_claim_repository import LocalClaimRepository

logger = logging.getLogger(__name__)


def decode_records(raw: str) -> List[Any]:
    """Decode the serialized claim array, keeping unreadable records as-is.

    Valid records become ``Claim`` objects; anything else stays the raw JSON
    value so a later write can put it back untouched.

    Raises:
        ParseError: If the value is not a JSON array
    """
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise ParseError(f"Stored claims are not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise ParseError(f"Stored claims must be a JSON array, got {type(data).__name__}")

    records: List[Any] = []
    for position, record in enumerate(data):
        try:
            records.append(Claim.model_validate(record))
        except ValidationError as e:
            logger.warning(f"⚠️ Unreadable local claim at position {position} kept as-is: {e.error_count()} errors")
            records.append(record)
    return records


def decode_claims(raw: str) -> List[Claim]:
    """Decode the serialized claim array, skipping unreadable records."""
    return [record for record in decode_records(raw) if isinstance(record, Claim)]


def encode_claims(records: Iterable[Any]) -> str:
    """Serialize claims with wire names; raw records are written unchanged."""
    return json.dumps(
        [record.to_wire() if isinstance(record, Claim) else record for record in records],
        ensure_ascii=False,
    )


class LocalClaimStore(LocalClaimRepository):
    """CRUD over the locally owned claim array.

    Nothing here raises to callers: unreadable or unavailable storage reads
    as an empty list and failed writes are logged and skipped. Records that
    do not validate as claims are hidden from reads but written back
    unchanged, so no mutation ever drops them.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = CLAIMS_KEY,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._storage = storage
        self._key = key
        self._clock = clock or utc_now

    @property
    def key(self) -> str:
        return self._key

    def _records(self) -> List[Any]:
        try:
            raw = self._storage.get_item(self._key)
        except StorageUnavailableError as e:
            logger.warning(f"⚠️ Local storage unavailable, treating as empty: {e}")
            return []
        if not raw:
            return []
        try:
            return decode_records(raw)
        except ParseError as e:
            logger.warning(f"⚠️ {e}; treating local claims as empty")
            return []

    def _write(self, records: List[Any]) -> bool:
        try:
            self._storage.set_item(self._key, encode_claims(records))
            return True
        except StorageUnavailableError as e:
            logger.error(f"❌ Could not persist local claims: {e}")
            return False

    def list_local(self) -> List[Claim]:
        return [record for record in self._records() if isinstance(record, Claim)]

    def get_local(self, claim_id: int) -> Optional[Claim]:
        for claim in self.list_local():
            if claim.id == claim_id:
                return claim
        return None

    def next_id(self, existing: Iterable[Claim], now: Optional[datetime] = None) -> int:
        """Time-derived id that is still greater than every stored id."""
        now_ms = int((now or self._clock()).timestamp() * 1000)
        highest = max((claim.id for claim in existing), default=0)
        return max(now_ms, highest + 1)

    def create_local(self, claim_input: ClaimInput) -> Claim:
        """Append a new claim and persist the whole array.

        Args:
            claim_input: Claim payload; normalized before it is stored

        Returns:
            The stored claim with its new id and ``createdAt``
        """
        records = self._records()
        claims = [record for record in records if isinstance(record, Claim)]
        payload = claim_input.normalized()
        now = self._clock()
        claim = Claim(
            id=self.next_id(claims, now),
            created_at=iso_timestamp(now),
            **payload.model_dump(),
        )
        records.append(claim)
        if self._write(records):
            logger.info(f"📦 Saved claim {claim.id} locally")
        return claim

    def update_local(self, claim_id: int, patch: ClaimPatch) -> bool:
        """Apply a patch in place. Returns False when the id is unknown."""
        records = self._records()
        changes = patch.normalized().changes()
        for index, record in enumerate(records):
            if isinstance(record, Claim) and record.id == claim_id:
                records[index] = record.model_copy(update=changes)
                self._write(records)
                return True
        logger.info(f"Local claim {claim_id} not found; nothing to update")
        return False

    def delete_local(self, claim_id: int) -> bool:
        """Remove a claim. Returns False when the id is unknown."""
        records = self._records()
        remaining = [
            record for record in records
            if not (isinstance(record, Claim) and record.id == claim_id)
        ]
        if len(remaining) == len(records):
            logger.info(f"Local claim {claim_id} not found; nothing to delete")
            return False
        self._write(remaining)
        return True

    def replace_all(self, claims: List[Claim]) -> bool:
        """Write the whole claim array in one storage write.

        Unreadable records already in the slot are kept after ``claims``.

        Returns:
            True if the write happened; on False the slot is unchanged
        """
        unreadable = [record for record in self._records() if not isinstance(record, Claim)]
        return self._write(list(claims) + unreadable)

    def clear(self) -> None:
        try:
            self._storage.remove_item(self._key)
        except StorageUnavailableError as e:
            logger.error(f"❌ Could not clear local claims: {e}")
