"""Error taxonomy for claim storage and synchronization."""

from typing import Optional


class TrustfolioError(Exception):
    """Base class for all domain errors."""


class ParseError(TrustfolioError):
    """Stored local data could not be decoded."""


class StorageUnavailableError(TrustfolioError):
    """The local key-value storage cannot be read or written."""


class PersistenceError(TrustfolioError):
    """A write that must be all-or-nothing did not happen."""


class RemoteStoreError(TrustfolioError):
    """Base class for failures talking to the claims API."""


class NetworkError(RemoteStoreError):
    """The claims API could not be reached."""


class HttpError(RemoteStoreError):
    """The claims API answered with a non-2xx status."""

    def __init__(self, status_code: int, body: Optional[str] = None):
        self.status_code = status_code
        self.body = body or ""
        super().__init__(f"Claims API returned HTTP {status_code}: {self.body[:200]}")


class InvalidFormatError(TrustfolioError):
    """An import payload is not a list of claim records."""


class SessionNotEligibleError(TrustfolioError):
    """A backend-sourced claim was targeted without a backend session."""
