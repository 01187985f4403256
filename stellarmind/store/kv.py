"""Key/value persistence injected into the stores.

Every store in this package talks to storage through ``get/put/delete`` on
bytes, so the same session, API key and user logic runs against memory in
tests, a directory of files on a desktop, or sqlite on the server.
"""

import re
from pathlib import Path
from typing import Protocol


class KeyValueStore(Protocol):
    """Protocol for blob persistence."""

    def get(self, key: str) -> bytes | None:
        """Return the stored value, or None when the key is absent."""
        ...

    def put(self, key: str, value: bytes) -> None:
        """Store a value, replacing any previous one."""
        ...

    def delete(self, key: str) -> None:
        """Remove a key; missing keys are ignored."""
        ...


class MemoryStore:
    """stores blobs in a dict."""

    def __init__(self) -> None:
        self.data: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        return self.data.get(key)

    def put(self, key: str, value: bytes) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)

    def clear(self) -> None:
        self.data.clear()


_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class FileStore:
    """Writes each key to its own file under a directory."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def get(self, key: str) -> bytes | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_bytes()

    def put(self, key: str, value: bytes) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(key).write_bytes(value)

    def delete(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()
