"""Tests for the FastAPI application."""

import json

import pytest
from fastapi.testclient import TestClient

from trustfolio.api import app as app_module
from trustfolio.api.app import app
from trustfolio.api.endpoints import health
from trustfolio.domain.errors import HttpError, NetworkError
from trustfolio.domain.models.claim import Claim
from trustfolio.domain.models.session import LOCAL_ONLY_TOKEN
from trustfolio.domain.ports.key_value_storage import CLAIMS_KEY
from trustfolio.domain.ports.remote_claims_provider import IssuerClaimsPage
from trustfolio.infrastructure import dependencies
from trustfolio.infrastructure.config import AppConfig, StorageConfig
from trustfolio.infrastructure.dependencies import ServiceContainer

BACKEND_HEADERS = {"Authorization": "Bearer jwt-token", "X-User-Id": "42", "X-User-Email": "dana@example.com"}
OAUTH_HEADERS = {"Authorization": f"Bearer {LOCAL_ONLY_TOKEN}", "X-Issuer-Id": "42"}

CLAIM_BODY = {
    "subject": "trustfolio.app/student/dana",
    "claim": "HAS_SKILL",
    "statement": "Python",
    "effectiveDate": "2025-12-01",
    "stars": 4,
    "aspect": "skill",
}

REMOTE_CLAIM = Claim(id=501, subject="https://trustfolio.app/student/dana", claim_type="HAS_SKILL", statement="Python", stars=4)


@pytest.fixture
def container(storage, remote):
    return ServiceContainer(
        config=AppConfig(storage=StorageConfig(backend="memory")),
        storage=storage,
        remote=remote,
    )


@pytest.fixture
def test_client(monkeypatch, container):
    """Create a test client wired to in-memory storage and a fake remote."""
    for module in (app_module, health, dependencies):
        monkeypatch.setattr(module, "get_service_container", lambda: container)
    with TestClient(app) as client:
        yield client


def test_health_check(test_client):
    response = test_client.get("/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert data["remote_provider"] == "TestRemote"
    assert data["storage_backend"] == "memory"
    assert data["storage_available"] is True


def test_anonymous_caller_gets_local_claims(test_client, remote):
    test_client.post("/claims", json=CLAIM_BODY)

    response = test_client.get("/claims")
    assert response.status_code == 200

    data = response.json()
    assert data["provenance"] == "local"
    assert data["fallback"] is False
    assert data["claims"][0]["subject"] == "https://trustfolio.app/student/dana"
    assert data["claims"][0]["claim"] == "HAS_SKILL"
    remote.list_by_issuer.assert_not_awaited()


def test_backend_list_falls_back_on_failure(test_client, remote):
    remote.list_by_issuer.side_effect = NetworkError("down")

    response = test_client.get("/claims", headers=BACKEND_HEADERS)

    assert response.status_code == 200
    assert response.json()["provenance"] == "local"
    assert response.json()["fallback"] is True


def test_backend_list(test_client, remote):
    remote.list_by_issuer.return_value = IssuerClaimsPage(claims=[REMOTE_CLAIM], page=2, limit=10, total=11)

    response = test_client.get("/claims", params={"page": 2, "limit": 10}, headers=BACKEND_HEADERS)

    data = response.json()
    assert data["provenance"] == "backend"
    assert data["total"] == 11
    remote.list_by_issuer.assert_awaited_once_with("42", "jwt-token", page=2, limit=10)


def test_create_on_backend(test_client, remote):
    remote.create.return_value = REMOTE_CLAIM

    response = test_client.post("/claims", json=CLAIM_BODY, headers=BACKEND_HEADERS)

    assert response.status_code == 200
    assert response.json()["provenance"] == "backend"
    assert response.json()["claim"]["id"] == 501


def test_create_failure_round_trip(test_client, remote, storage):
    remote.create.side_effect = HttpError(500, "boom")

    first = test_client.post("/claims", json=CLAIM_BODY, headers=BACKEND_HEADERS)
    assert first.json()["status"] == "confirmation_required"
    assert first.json()["action"] == "save_locally"
    assert storage.get_item(CLAIMS_KEY) is None

    second = test_client.post(
        "/claims",
        json=CLAIM_BODY,
        params={"save_locally_on_failure": "true"},
        headers=BACKEND_HEADERS,
    )
    assert second.json()["status"] == "created"
    assert second.json()["provenance"] == "local"

    declined = test_client.post(
        "/claims",
        json=CLAIM_BODY,
        params={"save_locally_on_failure": "false"},
        headers=BACKEND_HEADERS,
    )
    assert declined.status_code == 502
    assert declined.json()["detail"]["upstream_status"] == 500


def test_create_rejects_invalid_rating(test_client):
    response = test_client.post("/claims", json={**CLAIM_BODY, "stars": 6})
    assert response.status_code == 422


def test_create_achievement_uses_identity_subject(test_client, remote):
    remote.create.return_value = REMOTE_CLAIM

    test_client.post(
        "/claims/achievement",
        json={"category": "skill", "statement": "Python", "stars": 4, "date": "2025-12-01"},
        headers=BACKEND_HEADERS,
    )

    claim_input = remote.create.await_args.args[0]
    assert claim_input.subject == "http://trustclaims.whatscookin.us/user/42"
    assert claim_input.claim_type == "HAS_SKILL"
    assert claim_input.score == pytest.approx(0.6)


def test_local_update_and_delete(test_client):
    created = test_client.post("/claims", json=CLAIM_BODY, headers=OAUTH_HEADERS).json()
    claim_id = created["claim"]["id"]

    updated = test_client.put(
        f"/claims/{claim_id}",
        params={"provenance": "local"},
        json={"stars": 5},
        headers=OAUTH_HEADERS,
    )
    assert updated.status_code == 200
    fetched = test_client.get(f"/claims/{claim_id}", params={"provenance": "local"}).json()
    assert fetched["score"] == 1.0

    pending = test_client.delete(f"/claims/{claim_id}", params={"provenance": "local"})
    assert pending.json()["status"] == "confirmation_required"

    deleted = test_client.delete(f"/claims/{claim_id}", params={"provenance": "local", "confirmed": "true"})
    assert deleted.json()["status"] == "deleted"
    assert test_client.get(f"/claims/{claim_id}", params={"provenance": "local"}).status_code == 404


def test_update_unknown_local_claim(test_client):
    response = test_client.put("/claims/123", params={"provenance": "local"}, json={"stars": 2})
    assert response.status_code == 404


def test_backend_write_needs_backend_session(test_client, remote):
    response = test_client.put(
        "/claims/501",
        params={"provenance": "backend"},
        json={"statement": "x"},
        headers=OAUTH_HEADERS,
    )
    assert response.status_code == 403
    remote.update.assert_not_awaited()


def test_backend_delete_unreachable(test_client, remote):
    remote.delete.side_effect = NetworkError("down")

    response = test_client.delete(
        "/claims/501",
        params={"provenance": "backend", "confirmed": "true"},
        headers=BACKEND_HEADERS,
    )
    assert response.status_code == 503


def test_export_and_import(test_client):
    test_client.post("/claims", json=CLAIM_BODY)

    exported = test_client.get("/portfolio/export")
    assert exported.status_code == 200
    assert exported.headers["content-disposition"].startswith('attachment; filename="trustfolio-achievements-')
    assert exported.headers["x-claims-provenance"] == "local"

    pending = test_client.post("/portfolio/import", content=exported.content)
    assert pending.json()["status"] == "confirmation_required"
    assert pending.json()["details"] == {"count": 1}

    merged = test_client.post("/portfolio/import", params={"confirmed": "true"}, content=exported.content)
    assert merged.json()["imported"] == 1
    assert merged.json()["total"] == 2


def test_import_rejects_malformed_file(test_client):
    response = test_client.post(
        "/portfolio/import",
        params={"confirmed": "true"},
        content=json.dumps({"claims": []}),
    )
    assert response.status_code == 422


def test_analytics_and_public_view(test_client):
    test_client.post("/claims", json=CLAIM_BODY)
    test_client.post("/claims", json={**CLAIM_BODY, "stars": 5, "aspect": "project"})

    analytics = test_client.get("/portfolio/analytics").json()
    assert analytics["count"] == 2
    assert analytics["average_rating"] == "4.5"
    assert analytics["provenance"] == "local"

    public = test_client.get("/portfolio/public/dana").json()
    assert public["display_name"] == "Dana"
    assert len(public["claims"]) == 2
    assert len(public["top_categories"]) == 2


def test_profile_requires_sign_in(test_client):
    assert test_client.get("/profile").status_code == 401


def test_profile_round_trip(test_client):
    saved = test_client.put("/profile", json={"display_name": "Dana K.", "bio": "Engineer"}, headers=BACKEND_HEADERS)
    assert saved.status_code == 200

    loaded = test_client.get("/profile", headers=BACKEND_HEADERS).json()
    assert loaded["displayName"] == "Dana K."
    assert loaded["bio"] == "Engineer"

    link = test_client.get("/profile/link", params={"origin": "https://trustfolio.app"}, headers=BACKEND_HEADERS)
    assert link.json() == {"url": "https://trustfolio.app/p/dana"}


def test_delete_account(test_client, storage):
    test_client.post("/claims", json=CLAIM_BODY)

    pending = test_client.delete("/profile/account", headers=BACKEND_HEADERS)
    assert pending.json()["status"] == "confirmation_required"
    assert storage.get_item(CLAIMS_KEY) is not None

    done = test_client.delete("/profile/account", params={"confirmation": "DELETE"}, headers=BACKEND_HEADERS)
    assert done.json() == {"status": "deleted"}
    assert storage.get_item(CLAIMS_KEY) is None


def test_get_backend_claim_from_later_page(test_client, remote):
    remote.list_by_issuer.return_value = IssuerClaimsPage(claims=[REMOTE_CLAIM], page=3, limit=10, total=25)

    response = test_client.get(
        "/claims/501",
        params={"provenance": "backend", "page": 3, "limit": 10},
        headers=BACKEND_HEADERS,
    )

    assert response.status_code == 200
    assert response.json()["id"] == 501
    remote.list_by_issuer.assert_awaited_once_with("42", "jwt-token", page=3, limit=10)
