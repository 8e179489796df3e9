"""Port for the client-side key-value slots that hold local data."""

from typing import Optional, Protocol

CLAIMS_KEY = "trustfolio_claims"
SETTINGS_KEY = "trustfolio_settings"


class KeyValueStorage(Protocol):
    """Protocol for string-valued persistent slots.

    ``set_item`` replaces the whole value of a key in one atomic write.
    Implementations raise ``StorageUnavailableError`` when the backing
    medium cannot be used.
    """

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is absent."""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value."""
        ...

    def remove_item(self, key: str) -> None:
        """Delete a key; absent keys are ignored."""
        ...

    @property
    def is_available(self) -> bool:
        """Check whether the storage can currently be used."""
        ...
