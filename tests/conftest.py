"""Test configuration and common fixtures."""

from datetime import datetime, timedelta, timezone
from typing import Callable, List
from unittest.mock import AsyncMock

import pytest

from trustfolio.domain.models.claim import ClaimInput
from trustfolio.domain.models.session import LOCAL_ONLY_TOKEN, Session
from trustfolio.domain.ports.remote_claims_provider import IssuerClaimsPage, RemoteClaimsProvider
from trustfolio.domain.services.claim_sync_service import ClaimSyncService
from trustfolio.infrastructure.storage.local_claim_store import LocalClaimStore
from trustfolio.infrastructure.storage.memory_storage import MemoryStorage

SUBJECT_TEMPLATE = "http://trustclaims.whatscookin.us/user/{user_id}"
DEFAULT_SUBJECT = "https://trustfolio.app/student/dana"


class TickingClock:
    """Clock that advances one millisecond per call."""

    def __init__(self, start: datetime):
        self._now = start
        self.calls = 0

    def __call__(self) -> datetime:
        current = self._now
        self._now = self._now + timedelta(milliseconds=1)
        self.calls += 1
        return current


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock(datetime(2025, 12, 10, 18, 40, 0, tzinfo=timezone.utc))


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def local_store(storage: MemoryStorage, clock: TickingClock) -> LocalClaimStore:
    return LocalClaimStore(storage, clock=clock)


@pytest.fixture
def make_input() -> Callable[..., ClaimInput]:
    def _make(**overrides) -> ClaimInput:
        values = {
            "subject": "trustfolio.app/student/dana",
            "claim_type": "COMPLETED_PROJECT",
            "statement": "Built a claims extraction pipeline",
            "effective_date": "2025-12-01",
            "how_known": "FIRST_HAND",
            "stars": 5,
            "aspect": "project",
        }
        values.update(overrides)
        return ClaimInput(**values)

    return _make


@pytest.fixture
def remote() -> AsyncMock:
    """Remote provider double; every call succeeds with empty data by default."""
    provider = AsyncMock(spec=RemoteClaimsProvider)
    provider.provider_name = "TestRemote"
    provider.list_by_issuer.return_value = IssuerClaimsPage(claims=[])
    provider.list_by_subject.return_value = []
    return provider


@pytest.fixture
def sync_service(remote: AsyncMock, local_store: LocalClaimStore) -> ClaimSyncService:
    return ClaimSyncService(
        remote=remote,
        local=local_store,
        subject_uri_template=SUBJECT_TEMPLATE,
        default_subject=DEFAULT_SUBJECT,
    )


@pytest.fixture
def backend_session() -> Session:
    return Session(token="jwt-token", user_id=42, email="dana@example.com", name="Dana")


@pytest.fixture
def oauth_session() -> Session:
    return Session(token=LOCAL_ONLY_TOKEN, issuer_id=42, email="dana@example.com")


@pytest.fixture
def anonymous_session() -> Session:
    return Session()
