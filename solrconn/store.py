"""Persisted key-value stores holding the discovered configuration table."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

LOG = logging.getLogger(__name__)


class RegistryStoreError(RuntimeError):
    """Raised when a store file exists but cannot be decoded."""


@runtime_checkable
class RegistryStore(Protocol):
    """Namespaced key-value store surviving process restarts."""

    def get(self, namespace: str, key: str, default: Any = None) -> Any:
        """Return the stored value or ``default``."""

    def set(self, namespace: str, key: str, value: Any) -> None:
        """Store ``value`` replacing any previous one."""


class MemoryRegistryStore:
    """Store that only lives as long as the object (tests, dry runs)."""

    def __init__(self, initial: dict[str, dict[str, Any]] | None = None) -> None:
        self._entries: dict[str, dict[str, Any]] = {
            namespace: dict(values) for namespace, values in (initial or {}).items()
        }

    def get(self, namespace: str, key: str, default: Any = None) -> Any:
        return self._entries.get(namespace, {}).get(key, default)

    def set(self, namespace: str, key: str, value: Any) -> None:
        self._entries.setdefault(namespace, {})[key] = value


class FileRegistryStore:
    """JSON file backed store; the file is created on first write."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get(self, namespace: str, key: str, default: Any = None) -> Any:
        return self._read().get(namespace, {}).get(key, default)

    def set(self, namespace: str, key: str, value: Any) -> None:
        data = self._read()
        data.setdefault(namespace, {})[key] = value
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            tmp_path.write_text(json.dumps(data, indent=2))
            tmp_path.replace(self._path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
        LOG.debug("Registry entry written", extra={"namespace": namespace, "key": key, "path": str(self._path)})

    def _read(self) -> dict[str, dict[str, Any]]:
        try:
            raw = self._path.read_text()
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise RegistryStoreError(f"Registry file '{self._path}' is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise RegistryStoreError(f"Registry file '{self._path}' must contain a JSON object.")
        return data


__all__ = [
    "FileRegistryStore",
    "MemoryRegistryStore",
    "RegistryStore",
    "RegistryStoreError",
]
