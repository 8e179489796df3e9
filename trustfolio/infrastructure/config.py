"""Application-wide settings loaded from the environment."""

import logging
import os
from typing import Optional

from pydantic import BaseModel, Field

from ..domain.models.session import Session
from .linkedtrust.config import LinkedTrustConfig

logger = logging.getLogger(__name__)


class StorageConfig(BaseModel):
    """Which local storage backend to use and where."""

    backend: str = Field(default="file", description="'file' or 'memory'")
    directory: str = Field(
        default=os.path.join("~", ".trustfolio"),
        description="Directory for the file backend",
    )

    @classmethod
    def from_env(cls) -> "StorageConfig":
        defaults = cls()
        return cls(
            backend=os.getenv("TRUSTFOLIO_STORAGE_BACKEND", defaults.backend).lower(),
            directory=os.getenv("TRUSTFOLIO_STORAGE_DIR", defaults.directory),
        )


class AppConfig(BaseModel):
    storage: StorageConfig = Field(default_factory=StorageConfig)
    linkedtrust: LinkedTrustConfig = Field(default_factory=LinkedTrustConfig)

    @classmethod
    def from_env(cls) -> "AppConfig":
        return cls(storage=StorageConfig.from_env(), linkedtrust=LinkedTrustConfig.from_env())


def session_from_env() -> Session:
    """Session for command-line use, taken from TRUSTFOLIO_* variables."""
    token: Optional[str] = os.getenv("TRUSTFOLIO_TOKEN") or None
    session = Session(
        token=token,
        user_id=os.getenv("TRUSTFOLIO_USER_ID") or None,
        issuer_id=os.getenv("TRUSTFOLIO_ISSUER_ID") or None,
        email=os.getenv("TRUSTFOLIO_EMAIL") or None,
    )
    if not token:
        logger.info("No TRUSTFOLIO_TOKEN set; running in local mode")
    return session
