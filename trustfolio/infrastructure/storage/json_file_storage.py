"""Directory-backed key-value storage with one JSON file per key."""

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field

from ...domain.errors import StorageUnavailableError
from ...domain.ports.key_value_storage import KeyValueStorage

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileStorageConfig(BaseModel):
    """Configuration for file storage."""

    directory: str = Field(
        default=os.path.join("~", ".trustfolio"),
        description="Directory holding one file per storage key",
    )
    encoding: str = Field(default="utf-8", description="File encoding")


class JsonFileStorage(KeyValueStorage):
    """Durable storage that survives process restarts.

    Writes go to a temporary file in the same directory and are moved into
    place with ``os.replace``, so a key is either fully rewritten or left as
    it was.
    """

    def __init__(
        self,
        config: Optional[JsonFileStorageConfig] = None,
        directory: Optional[Union[str, Path]] = None,
    ):
        self._config = config or JsonFileStorageConfig()
        root = directory if directory is not None else self._config.directory
        self._directory = Path(os.path.expanduser(str(root)))

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding=self._config.encoding)
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageUnavailableError(f"Cannot read {path}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_name = None
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding=self._config.encoding,
                dir=self._directory,
                prefix=f".{key}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(value)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            raise StorageUnavailableError(f"Cannot write {path}: {e}") from e
        finally:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)

    def remove_item(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageUnavailableError(f"Cannot remove {path}: {e}") from e

    @property
    def is_available(self) -> bool:
        if self._directory.exists():
            return self._directory.is_dir() and os.access(self._directory, os.R_OK | os.W_OK)
        parent = self._directory.parent
        while not parent.exists() and parent != parent.parent:
            parent = parent.parent
        return os.access(parent, os.W_OK)
