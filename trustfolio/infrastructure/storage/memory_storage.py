"""In-process key-value storage."""

from typing import Dict, List, Optional

from ...domain.ports.key_value_storage import KeyValueStorage


class MemoryStorage(KeyValueStorage):
    """Dictionary-backed storage for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    @property
    def is_available(self) -> bool:
        return True

    def keys(self) -> List[str]:
        return list(self._items)
