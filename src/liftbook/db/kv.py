"""On-device key-value storage."""

from pathlib import Path
from typing import Protocol


class KeyValueStorage(Protocol):
    """Synchronous string key-value storage."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class FileKeyValueStorage:
    """Key-value storage keeping one file per key in a directory.

    Write errors propagate as ``OSError``.
    """

    def __init__(self, directory: Path):
        self.directory = directory

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(value, encoding="utf-8")
        tmp_path.replace(path)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
