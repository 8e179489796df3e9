"""Translation of domain errors into HTTP responses."""

import logging

from fastapi import HTTPException

from ..domain.errors import (
    HttpError,
    InvalidFormatError,
    NetworkError,
    PersistenceError,
    SessionNotEligibleError,
    StorageUnavailableError,
    TrustfolioError,
)

logger = logging.getLogger(__name__)


def to_http_exception(error: TrustfolioError) -> HTTPException:
    if isinstance(error, HttpError):
        return HTTPException(
            status_code=502,
            detail={"message": "Claims API rejected the request", "upstream_status": error.status_code, "body": error.body},
        )
    if isinstance(error, NetworkError):
        return HTTPException(status_code=503, detail=f"Claims API unreachable: {error}")
    if isinstance(error, InvalidFormatError):
        return HTTPException(status_code=422, detail=str(error))
    if isinstance(error, SessionNotEligibleError):
        return HTTPException(status_code=403, detail=str(error))
    if isinstance(error, (PersistenceError, StorageUnavailableError)):
        return HTTPException(status_code=500, detail=str(error))
    logger.error(f"❌ Unmapped domain error: {error}")
    return HTTPException(status_code=500, detail=str(error))
