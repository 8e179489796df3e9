"""Claim CRUD endpoints routed through the mode resolver."""

import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query

from ...domain.errors import TrustfolioError
from ...domain.models.claim import AchievementForm, Claim, ClaimInput, ClaimPatch
from ...domain.models.claim_set import (
    ClaimSet,
    ConfirmationRequired,
    CreateResult,
    DeleteResult,
    Provenance,
    UpdateResult,
)
from ...domain.models.session import Session
from ...domain.services.claim_sync_service import DEFAULT_PAGE_SIZE, ClaimSyncService
from ...infrastructure.dependencies import get_claim_sync_service
from ..errors import to_http_exception
from ..session import get_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/claims", tags=["claims"])


@router.get("", response_model=ClaimSet)
async def list_claims(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=500),
    session: Session = Depends(get_session),
    service: ClaimSyncService = Depends(get_claim_sync_service),
) -> ClaimSet:
    """Load the caller's claims from the backend or local storage."""
    return await service.load_claims(session, page=page, limit=limit)


@router.get("/subject", response_model=ClaimSet)
async def list_subject_claims(
    uri: str = Query(..., min_length=1),
    session: Session = Depends(get_session),
    service: ClaimSyncService = Depends(get_claim_sync_service),
) -> ClaimSet:
    return await service.load_subject_claims(session, uri)


async def _create(
    service: ClaimSyncService,
    session: Session,
    claim_input: ClaimInput,
    save_locally_on_failure: Optional[bool],
) -> Union[CreateResult, ConfirmationRequired]:
    try:
        return await service.create_claim(session, claim_input, save_locally_on_failure)
    except TrustfolioError as e:
        raise to_http_exception(e)


@router.post("", response_model=Union[CreateResult, ConfirmationRequired])
async def create_claim(
    claim_input: ClaimInput,
    save_locally_on_failure: Optional[bool] = Query(None),
    session: Session = Depends(get_session),
    service: ClaimSyncService = Depends(get_claim_sync_service),
) -> Union[CreateResult, ConfirmationRequired]:
    """Create a claim.

    If the backend fails, the response asks whether to save locally; repeat
    the request with ``save_locally_on_failure`` set to answer.
    """
    return await _create(service, session, claim_input, save_locally_on_failure)


@router.post("/achievement", response_model=Union[CreateResult, ConfirmationRequired])
async def create_achievement(
    form: AchievementForm,
    save_locally_on_failure: Optional[bool] = Query(None),
    session: Session = Depends(get_session),
    service: ClaimSyncService = Depends(get_claim_sync_service),
) -> Union[CreateResult, ConfirmationRequired]:
    """Create a claim from the achievement form fields."""
    claim_input = service.compose_claim(session, form)
    return await _create(service, session, claim_input, save_locally_on_failure)


@router.get("/{claim_id}", response_model=Claim)
async def get_claim(
    claim_id: int,
    provenance: Provenance = Query(...),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=500),
    session: Session = Depends(get_session),
    service: ClaimSyncService = Depends(get_claim_sync_service),
) -> Claim:
    """Fetch one claim; backend lookups use the page the list was loaded with."""
    try:
        claim = await service.get_claim(session, provenance, claim_id, page=page, limit=limit)
    except TrustfolioError as e:
        raise to_http_exception(e)
    if claim is None:
        raise HTTPException(status_code=404, detail="Achievement not found")
    return claim


async def _update(
    service: ClaimSyncService,
    session: Session,
    provenance: Provenance,
    claim_id: int,
    patch: ClaimPatch,
) -> UpdateResult:
    try:
        result = await service.update_claim(session, provenance, claim_id, patch)
    except TrustfolioError as e:
        raise to_http_exception(e)
    if not result.found:
        raise HTTPException(status_code=404, detail="Achievement not found")
    return result


@router.put("/{claim_id}", response_model=UpdateResult)
async def update_claim(
    claim_id: int,
    patch: ClaimPatch,
    provenance: Provenance = Query(...),
    session: Session = Depends(get_session),
    service: ClaimSyncService = Depends(get_claim_sync_service),
) -> UpdateResult:
    """Update a claim in the store its set was loaded from."""
    return await _update(service, session, provenance, claim_id, patch)


@router.put("/{claim_id}/achievement", response_model=UpdateResult)
async def update_achievement(
    claim_id: int,
    form: AchievementForm,
    provenance: Provenance = Query(...),
    session: Session = Depends(get_session),
    service: ClaimSyncService = Depends(get_claim_sync_service),
) -> UpdateResult:
    return await _update(service, session, provenance, claim_id, form.to_patch())


@router.delete("/{claim_id}", response_model=Union[DeleteResult, ConfirmationRequired])
async def delete_claim(
    claim_id: int,
    provenance: Provenance = Query(...),
    confirmed: bool = Query(False),
    session: Session = Depends(get_session),
    service: ClaimSyncService = Depends(get_claim_sync_service),
) -> Union[DeleteResult, ConfirmationRequired]:
    try:
        return await service.delete_claim(session, provenance, claim_id, confirmed=confirmed)
    except TrustfolioError as e:
        raise to_http_exception(e)
