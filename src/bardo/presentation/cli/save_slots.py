"""File-system storage backend for saves and achievements."""
from __future__ import annotations

import re
from pathlib import Path
from typing import List

from bardo.presentation.cli import config

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class FileStorage:
    """Stores each key as ``<key>.json`` under the per-user save directory."""

    def __init__(self, base_dir: Path | str | None = None) -> None:
        self._base_dir = Path(base_dir) if base_dir is not None else config.get_save_dir()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def read(self, key: str) -> str | None:
        """Return the stored text, or None when the key has never been written."""
        path = self._key_path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def write(self, key: str, value: str) -> None:
        """Persist the value, replacing the file atomically."""
        self._base_dir.mkdir(parents=True, exist_ok=True)
        path = self._key_path(key)
        temp_path = path.with_suffix(".tmp")
        temp_path.write_text(value, encoding="utf-8")
        temp_path.replace(path)

    def remove(self, key: str) -> None:
        """Delete the stored value if it exists."""
        path = self._key_path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return

    def keys(self) -> List[str]:
        if not self._base_dir.is_dir():
            return []
        return sorted(path.stem for path in self._base_dir.glob("*.json"))

    def _key_path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Storage key '{key}' contains unsupported characters.")
        return self._base_dir / f"{key}.json"
