"""Configuration for the LinkedTrust claims API."""

import logging
import os
from typing import Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class LinkedTrustConfig(BaseModel):
    """Where the claims API lives and how identities map to URIs."""

    base_url: str = Field(
        default="https://dev.linkedtrust.us/api",
        description="Claims API root; endpoint paths are appended to it",
    )
    timeout: Optional[float] = Field(default=30.0, description="Request timeout in seconds")
    issuer_uri_template: str = Field(
        default="https://live.linkedtrust.us/userIds/{user_id}",
        description="Namespace template turning a user id into an issuer URI",
    )
    subject_uri_template: str = Field(
        default="http://trustclaims.whatscookin.us/user/{user_id}",
        description="Namespace template turning a user id into a claim subject",
    )
    default_subject: str = Field(
        default="https://trustfolio.app/student/dana",
        description="Subject used when nobody is signed in",
    )

    @classmethod
    def from_env(cls) -> "LinkedTrustConfig":
        """Create configuration from environment variables."""
        defaults = cls()
        timeout_env = os.getenv("LINKEDTRUST_TIMEOUT")
        timeout = defaults.timeout
        if timeout_env:
            try:
                timeout = float(timeout_env)
            except ValueError:
                logger.warning(f"⚠️ Ignoring invalid LINKEDTRUST_TIMEOUT={timeout_env!r}")

        config = cls(
            base_url=os.getenv("LINKEDTRUST_API_BASE_URL", defaults.base_url),
            timeout=timeout,
            issuer_uri_template=os.getenv("LINKEDTRUST_ISSUER_URI_TEMPLATE", defaults.issuer_uri_template),
            subject_uri_template=os.getenv("LINKEDTRUST_SUBJECT_URI_TEMPLATE", defaults.subject_uri_template),
            default_subject=os.getenv("TRUSTFOLIO_DEFAULT_SUBJECT", defaults.default_subject),
        )
        logger.info(f"🔗 Claims API configured at {config.base_url}")
        return config
