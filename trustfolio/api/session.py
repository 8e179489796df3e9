"""Per-request session extraction."""

from typing import Optional

from fastapi import Header

from ..domain.models.session import Session


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return credentials.strip()


def get_session(
    authorization: Optional[str] = Header(None),
    x_issuer_id: Optional[str] = Header(None),
    x_user_id: Optional[str] = Header(None),
    x_user_email: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None),
) -> Session:
    """Build the caller's session from request headers.

    The token comes from ``Authorization: Bearer ...``; identity from
    ``X-Issuer-Id`` / ``X-User-Id``.
    """
    return Session(
        token=parse_bearer(authorization),
        issuer_id=x_issuer_id or None,
        user_id=x_user_id or None,
        email=x_user_email or None,
        name=x_user_name or None,
    )
