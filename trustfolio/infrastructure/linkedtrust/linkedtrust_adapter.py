"""LinkedTrust implementation of the remote claims port."""

import logging
from typing import Any, List, Optional, Union
from urllib.parse import quote

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from ...domain.errors import HttpError, NetworkError
from ...domain.models.claim import Claim, ClaimInput, ClaimPatch
from ...domain.normalization import user_uri
from ...domain.ports.remote_claims_provider import IssuerClaimsPage, RemoteClaimsProvider
from .config import LinkedTrustConfig

logger = logging.getLogger(__name__)


class ClaimsEnvelope(BaseModel):
    """``{"claims": [...]}`` list body, possibly with paging fields."""

    claims: List[Claim]
    page: Optional[int] = None
    limit: Optional[int] = None
    total: Optional[int] = None
    count: Optional[int] = None


RemoteListResponse = Union[List[Claim], ClaimsEnvelope]

_list_response = TypeAdapter(RemoteListResponse)


def parse_list_response(body: Any) -> RemoteListResponse:
    """Validate a list body into one of the accepted shapes.

    Raises:
        ValidationError: If the body is neither a claim array nor an envelope
    """
    return _list_response.validate_python(body)


def normalize_list_response(body: Any) -> List[Claim]:
    """Reduce any accepted list body to a plain list of claims.

    Unrecognized shapes yield an empty list and a logged warning.
    """
    try:
        parsed = parse_list_response(body)
    except ValidationError as e:
        logger.warning(
            f"⚠️ Unexpected claims list shape ({type(body).__name__}, {e.error_count()} errors); treating as empty"
        )
        return []
    if isinstance(parsed, ClaimsEnvelope):
        return list(parsed.claims)
    return list(parsed)


class LinkedTrustAdapter(RemoteClaimsProvider):
    """Claims CRUD against the LinkedTrust API over ``httpx``."""

    def __init__(
        self,
        config: Optional[LinkedTrustConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        provider_name: str = "LinkedTrust",
    ):
        """Initialize the adapter.

        Args:
            config: Adapter configuration
            client: Preconfigured HTTP client (tests inject one)
            provider_name: Name of the provider
        """
        self._config = config or LinkedTrustConfig()
        self._client = client
        self._name = provider_name

    @property
    def config(self) -> LinkedTrustConfig:
        return self._config

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url,
                timeout=self._config.timeout,
            )
        return self._client

    @staticmethod
    def _headers(token: str) -> dict:
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    def issuer_uri(self, user_id: Union[int, str]) -> str:
        return user_uri(self._config.issuer_uri_template, user_id)

    async def _request(self, method: str, path: str, token: str, **kwargs: Any) -> httpx.Response:
        """Send one request, mapping transport and status failures to domain errors."""
        client = self._get_client()
        try:
            response = await client.request(method, path, headers=self._headers(token), **kwargs)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            logger.error(f"❌ {method} {path} failed with HTTP {e.response.status_code}")
            raise HttpError(e.response.status_code, e.response.text) from e
        except httpx.RequestError as e:
            logger.error(f"❌ {method} {path} could not reach the claims API: {e}")
            raise NetworkError(f"Claims API unreachable: {e}") from e

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            logger.warning(f"⚠️ Non-JSON body from {response.request.method} {response.request.url}")
            return None

    async def create(self, claim_input: ClaimInput, token: str) -> Optional[Claim]:
        payload = claim_input.normalized()
        response = await self._request("POST", "/claims", token, json=payload.to_wire())
        body = self._json(response)

        # Some deployments wrap the created record as {"claim": {...}}
        if isinstance(body, dict) and isinstance(body.get("claim"), dict):
            body = body["claim"]
        try:
            return Claim.model_validate(body)
        except ValidationError:
            # The claim exists remotely even when the body does not describe it
            logger.warning(f"⚠️ Create succeeded with HTTP {response.status_code} but returned no readable claim")
            return None

    async def list_by_subject(self, subject: str, token: str) -> List[Claim]:
        encoded = quote(subject, safe="")
        response = await self._request("GET", f"/claims/subject/{encoded}", token)
        return normalize_list_response(self._json(response))

    async def list_by_issuer(
        self,
        user_id: Union[int, str],
        token: str,
        page: int = 1,
        limit: int = 50,
    ) -> IssuerClaimsPage:
        params = {"issuer_id": self.issuer_uri(user_id), "limit": limit, "page": page}
        response = await self._request("GET", "/claim", token, params=params)
        body = self._json(response)

        total = None
        if isinstance(body, dict):
            total = body.get("total", body.get("count"))
        return IssuerClaimsPage(
            claims=normalize_list_response(body),
            page=page,
            limit=limit,
            total=total if isinstance(total, int) else None,
        )

    async def update(self, claim_id: int, patch: ClaimPatch, token: str) -> None:
        await self._request("PUT", f"/claims/{claim_id}", token, json=patch.normalized().to_wire())

    async def delete(self, claim_id: int, token: str) -> None:
        await self._request("DELETE", f"/claims/{claim_id}", token)

    async def shutdown(self) -> None:
        """Clean up resources."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def provider_name(self) -> str:
        return self._name
