"""Analytics, export and import endpoints."""

import logging
from typing import Any, Dict, Union

from fastapi import APIRouter, Depends, Query, Request, Response

from ...domain.errors import TrustfolioError
from ...domain.models.analytics import PortfolioAnalytics
from ...domain.models.claim_set import ConfirmationRequired, MergedResult
from ...domain.models.profile import display_name_from_username
from ...domain.models.session import ANONYMOUS, Session
from ...domain.services.analytics_service import AnalyticsService
from ...domain.services.claim_sync_service import ClaimSyncService
from ...domain.services.portfolio_transfer_service import PortfolioTransferService
from ...infrastructure.dependencies import (
    get_analytics_service,
    get_claim_sync_service,
    get_portfolio_transfer_service,
)
from ..errors import to_http_exception
from ..session import get_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/portfolio", tags=["portfolio"])


@router.get("/analytics", response_model=PortfolioAnalytics)
async def portfolio_analytics(
    session: Session = Depends(get_session),
    sync: ClaimSyncService = Depends(get_claim_sync_service),
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> PortfolioAnalytics:
    claim_set = await sync.load_claims(session)
    return analytics.summarize(claim_set)


@router.get("/export")
async def export_portfolio(
    session: Session = Depends(get_session),
    sync: ClaimSyncService = Depends(get_claim_sync_service),
    transfer: PortfolioTransferService = Depends(get_portfolio_transfer_service),
) -> Response:
    """Download the current claim set as a dated JSON file."""
    claim_set = await sync.load_claims(session)
    document = transfer.export(claim_set)
    return Response(
        content=document.content_bytes,
        media_type=f"{document.media_type}; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{document.filename}"',
            "X-Claims-Provenance": claim_set.provenance.value,
        },
    )


@router.post("/import", response_model=Union[MergedResult, ConfirmationRequired])
async def import_portfolio(
    request: Request,
    confirmed: bool = Query(False),
    transfer: PortfolioTransferService = Depends(get_portfolio_transfer_service),
) -> Union[MergedResult, ConfirmationRequired]:
    """Merge a JSON array of claims into local storage.

    The request body is the exported document. Without ``confirmed=true``
    nothing is written and the response asks for confirmation.
    """
    body = await request.body()
    try:
        return transfer.import_batch(body, confirmed=confirmed)
    except TrustfolioError as e:
        raise to_http_exception(e)


@router.get("/public/{username}")
async def public_portfolio(
    username: str,
    sync: ClaimSyncService = Depends(get_claim_sync_service),
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> Dict[str, Any]:
    """Shareable view of the locally stored portfolio."""
    claim_set = await sync.load_claims(ANONYMOUS)
    summary = analytics.summarize(claim_set)
    return {
        "display_name": display_name_from_username(username),
        "claims": [claim.to_wire() for claim in claim_set.claims],
        "analytics": summary.model_dump(mode="json"),
        "top_categories": [entry.model_dump() for entry in summary.top_categories()],
    }
