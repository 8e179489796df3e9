"""Profile settings endpoints."""

from typing import Union

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from ...domain.errors import TrustfolioError
from ...domain.models.claim_set import ConfirmationRequired
from ...domain.models.profile import MAX_BIO_LENGTH, ProfileSettings
from ...domain.models.session import Session
from ...domain.services.profile_service import ProfileService
from ...infrastructure.dependencies import get_profile_service
from ..errors import to_http_exception
from ..session import get_session

router = APIRouter(prefix="/profile", tags=["profile"])


class ProfileUpdateRequest(BaseModel):
    display_name: str = Field(..., description="Name shown on the public portfolio")
    bio: str = Field(default="", max_length=MAX_BIO_LENGTH)


def _require_signed_in(session: Session) -> None:
    if not session.is_authenticated:
        raise HTTPException(status_code=401, detail="Sign in to manage your profile")


@router.get("", response_model=ProfileSettings)
async def get_profile(
    session: Session = Depends(get_session),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileSettings:
    _require_signed_in(session)
    return service.load_profile(session)


@router.put("", response_model=ProfileSettings)
async def update_profile(
    request: ProfileUpdateRequest,
    session: Session = Depends(get_session),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileSettings:
    _require_signed_in(session)
    try:
        return service.save_profile(request.display_name, request.bio)
    except TrustfolioError as e:
        raise to_http_exception(e)


@router.get("/link")
async def portfolio_link(
    origin: str = Query(..., description="Public origin, e.g. https://trustfolio.app"),
    session: Session = Depends(get_session),
) -> dict:
    _require_signed_in(session)
    return {"url": ProfileService.public_portfolio_link(origin, session)}


@router.delete("/account", response_model=Union[ConfirmationRequired, dict])
async def delete_account(
    confirmation: str = Query(None),
    session: Session = Depends(get_session),
    service: ProfileService = Depends(get_profile_service),
) -> Union[ConfirmationRequired, dict]:
    """Delete local achievements and settings; requires ``confirmation=DELETE``."""
    _require_signed_in(session)
    try:
        result = service.delete_account_data(confirmation)
    except TrustfolioError as e:
        raise to_http_exception(e)
    if isinstance(result, ConfirmationRequired):
        return result
    return {"status": "deleted"}
