"""Tests for export and import/merge."""

import json
from datetime import date

import pytest

from trustfolio.domain.errors import InvalidFormatError, PersistenceError, StorageUnavailableError
from trustfolio.domain.models.claim import Claim
from trustfolio.domain.models.claim_set import ClaimSet, ConfirmationAction, ConfirmationRequired, MergedResult, Provenance
from trustfolio.domain.ports.key_value_storage import CLAIMS_KEY
from trustfolio.domain.services.portfolio_transfer_service import (
    PortfolioTransferService,
    export_claims,
    parse_import_payload,
)
from trustfolio.infrastructure.storage.local_claim_store import LocalClaimStore
from trustfolio.infrastructure.storage.memory_storage import MemoryStorage

BATCH = [
    {
        "subject": "trustfolio.app/student/dana",
        "claim": "HAS_SKILL",
        "statement": "Python",
        "effectiveDate": "2025-01-01",
        "stars": 4,
        "aspect": "skill",
    },
    {
        "id": 7,
        "subject": "https://trustfolio.app/student/dana",
        "claim": "COMPLETED_PROJECT",
        "statement": "Capstone",
        "effectiveDate": "2025-05-01",
        "howKnown": "FIRST_HAND",
        "stars": 5,
        "score": 1.0,
        "aspect": "project",
        "createdAt": "2025-05-02T10:00:00.000Z",
    },
]


class ReadOnlyStorage(MemoryStorage):
    """Storage that can be read but rejects writes."""

    def set_item(self, key, value):
        raise StorageUnavailableError("quota exceeded")


@pytest.fixture
def transfer_service(local_store, clock):
    return PortfolioTransferService(local_store, clock=clock)


def test_import_asks_for_confirmation_first(transfer_service, local_store):
    result = transfer_service.import_batch(json.dumps(BATCH))

    assert isinstance(result, ConfirmationRequired)
    assert result.action == ConfirmationAction.IMPORT_CLAIMS
    assert result.details == {"count": 2}
    assert local_store.list_local() == []


def test_import_appends_with_ids_above_existing(transfer_service, local_store, make_input):
    existing = [local_store.create_local(make_input()) for _ in range(3)]
    highest = max(claim.id for claim in existing)

    result = transfer_service.import_batch(json.dumps(BATCH), confirmed=True)

    assert isinstance(result, MergedResult)
    assert result.imported == 2
    assert result.total == 5
    assert result.assigned_ids == [highest + 1, highest + 2]
    stored = local_store.list_local()
    assert [claim.id for claim in stored[:3]] == [claim.id for claim in existing]
    assert [claim.statement for claim in stored[3:]] == ["Python", "Capstone"]


def test_import_into_empty_store_starts_at_one(transfer_service):
    result = transfer_service.import_batch(BATCH, confirmed=True)
    assert result.assigned_ids == [1, 2]


def test_import_normalizes_and_keeps_created_at(transfer_service, local_store):
    transfer_service.import_batch(BATCH, confirmed=True)

    first, second = local_store.list_local()
    assert first.subject == "https://trustfolio.app/student/dana"
    assert first.score == pytest.approx(0.6)
    assert first.created_at == "2025-12-10T18:40:00.000Z"
    assert second.created_at == "2025-05-02T10:00:00.000Z"
    assert second.id != 7


def test_importing_twice_duplicates(transfer_service, local_store):
    transfer_service.import_batch(BATCH, confirmed=True)
    result = transfer_service.import_batch(BATCH, confirmed=True)

    assert result.total == 4
    ids = [claim.id for claim in local_store.list_local()]
    assert len(set(ids)) == 4


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        json.dumps({"claims": BATCH}),
        json.dumps([1, 2]),
        json.dumps([{}]),
        json.dumps([BATCH[0], {"id": 3, "stars": 4}]),
        json.dumps([{"statement": "Python", "stars": "many"}]),
        b"\xff\xfe",
    ],
)
def test_malformed_import_changes_nothing(transfer_service, local_store, make_input, payload):
    before = [local_store.create_local(make_input())]

    with pytest.raises(InvalidFormatError):
        transfer_service.import_batch(payload, confirmed=True)

    assert local_store.list_local() == before


def test_failed_write_raises_persistence_error():
    storage = ReadOnlyStorage({CLAIMS_KEY: "[]"})
    service = PortfolioTransferService(LocalClaimStore(storage))

    with pytest.raises(PersistenceError):
        service.import_batch(BATCH, confirmed=True)
    assert storage.get_item(CLAIMS_KEY) == "[]"


def test_parse_accepts_bytes():
    records = parse_import_payload(json.dumps(BATCH).encode("utf-8"))
    assert [record.claim_type for record in records] == ["HAS_SKILL", "COMPLETED_PROJECT"]


def test_export_document(transfer_service, local_store, make_input):
    local_store.create_local(make_input(statement="Café menu app"))
    claim_set = ClaimSet(claims=local_store.list_local(), provenance=Provenance.LOCAL)

    document = transfer_service.export(claim_set, today=date(2025, 12, 10))

    assert document.filename == "trustfolio-achievements-2025-12-10.json"
    assert document.media_type == "application/json"
    assert "Café" in document.content
    assert "\n  " in document.content
    exported = json.loads(document.content_bytes)
    assert exported[0]["claim"] == "COMPLETED_PROJECT"
    assert exported[0]["createdAt"] == "2025-12-10T18:40:00.000Z"


def test_export_then_import_round_trip_appends(transfer_service, local_store, make_input):
    local_store.create_local(make_input())
    document = export_claims(ClaimSet(claims=local_store.list_local(), provenance=Provenance.LOCAL))

    result = transfer_service.import_batch(document.content, confirmed=True)

    assert result.total == 2


def test_export_empty_set():
    document = export_claims(ClaimSet(provenance=Provenance.BACKEND), today=date(2026, 1, 1))
    assert json.loads(document.content) == []


def test_sparse_backend_export_imports(transfer_service, local_store):
    backend_set = ClaimSet(
        claims=[
            Claim(id=99, subject="https://trustfolio.app/student/dana", claim_type="HAS_SKILL", statement="s", stars=4),
            Claim(id=100, statement="only a statement"),
        ],
        provenance=Provenance.BACKEND,
    )
    document = transfer_service.export(backend_set, today=date(2025, 12, 10))

    result = transfer_service.import_batch(document.content, confirmed=True)

    assert result.imported == 2
    first, second = local_store.list_local()
    assert first.effective_date is None
    assert first.score == pytest.approx(0.6)
    assert second.statement == "only a statement"
    assert second.subject == ""
    assert [first.id, second.id] == [1, 2]
