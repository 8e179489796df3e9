"""Normalization rules shared by the local and remote claim stores."""

from datetime import datetime, timezone
from typing import Union

# 1 star -> -0.6, 3 stars -> 0.2, 5 stars -> 1.0
SCORE_MIDPOINT = 2.5


def stars_to_score(stars: int) -> float:
    """Convert a 1-5 star rating into a trust score in [-1, 1].

    Out-of-range input is not clamped; callers are expected to pass 1-5.
    """
    return (stars - SCORE_MIDPOINT) / SCORE_MIDPOINT


def normalize_uri(uri: str) -> str:
    """Make sure a subject identifier is an absolute http(s) URI."""
    if not uri:
        return uri
    if uri.startswith("http://") or uri.startswith("https://"):
        return uri
    return f"https://{uri}"


def user_uri(template: str, user_id: Union[str, int]) -> str:
    """Expand a namespace template such as ``https://host/user/{user_id}``."""
    return normalize_uri(template.format(user_id=user_id))


def iso_timestamp(moment: datetime) -> str:
    """Millisecond-precision UTC timestamp, e.g. ``2025-12-10T18:40:00.000Z``."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
