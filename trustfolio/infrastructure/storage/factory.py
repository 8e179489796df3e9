"""Factory for creating key-value storage backends."""

import logging
from typing import Any, Dict, List, Type

from ...domain.ports.key_value_storage import KeyValueStorage
from .json_file_storage import JsonFileStorage
from .memory_storage import MemoryStorage

logger = logging.getLogger(__name__)


class StorageFactory:
    """Registry of storage backends selectable by name.

    ``file`` is the durable default; ``memory`` keeps everything in process.
    """

    def __init__(self):
        self._backend_registry: Dict[str, Type[KeyValueStorage]] = {}

        self.register_backend("file", JsonFileStorage)
        self.register_backend("memory", MemoryStorage)

    def register_backend(self, name: str, backend_class: Type[KeyValueStorage]) -> None:
        """Register a storage backend class.

        Args:
            name: Unique identifier for the backend
            backend_class: The class to register
        """
        if name in self._backend_registry:
            raise ValueError(f"Storage backend {name} already registered")
        self._backend_registry[name] = backend_class

    def create(self, name: str, **config: Any) -> KeyValueStorage:
        """Create a storage backend instance.

        Args:
            name: Name of the backend
            **config: Backend-specific keyword arguments

        Returns:
            Storage instance

        Raises:
            ValueError: If the backend is not registered
        """
        if name not in self._backend_registry:
            raise ValueError(f"Storage backend {name} not registered")

        storage = self._backend_registry[name](**config)
        if not storage.is_available:
            logger.warning(f"⚠️ Storage backend '{name}' is not writable; local data will degrade to empty")
        else:
            logger.info(f"✅ Storage backend '{name}' ready")
        return storage

    @property
    def available_backends(self) -> List[str]:
        return list(self._backend_registry)


storage_factory = StorageFactory()
