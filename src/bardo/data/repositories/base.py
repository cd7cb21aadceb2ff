"""Base repository implementation for per-story JSON definition files."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Generic, TypeVar

from bardo.data import paths
from bardo.data.errors import DataValidationError
from bardo.data.json_loader import load_json

T = TypeVar("T")


class StoryFileRepository(Generic[T]):
    """Common caching and loading behavior for files named ``<story_id><suffix>``."""

    def __init__(self, suffix: str, base_path: Path | str | None = None) -> None:
        self._suffix = suffix
        self._base_path = Path(base_path) if base_path is not None else None
        self._definitions: Dict[str, T] = {}

    def _get_stories_dir(self) -> Path:
        return paths.get_stories_path(self._base_path)

    def _get_file_path(self, story_id: str) -> Path:
        return self._get_stories_dir() / f"{story_id}{self._suffix}"

    def _load_raw(self, story_id: str) -> dict[str, object]:
        file_path = self._get_file_path(story_id)
        raw = load_json(file_path)
        if not isinstance(raw, dict):
            raise DataValidationError(f"Expected top-level object in {file_path}")
        return raw

    def _build(self, story_id: str, raw: dict[str, object]) -> T:
        """Convert a raw dict into a typed definition."""
        raise NotImplementedError

    def get(self, story_id: str) -> T:
        """Return the definition for a story, loading it on first use."""
        if story_id not in self._definitions:
            raw = self._load_raw(story_id)
            self._definitions[story_id] = self._build(story_id, raw)
        return self._definitions[story_id]

    def exists(self, story_id: str) -> bool:
        return self._get_file_path(story_id).is_file()

    def list_ids(self) -> list[str]:
        """Return the story ids that have a file for this repository, sorted."""
        stories_dir = self._get_stories_dir()
        if not stories_dir.is_dir():
            return []
        return sorted(
            path.name[: -len(self._suffix)]
            for path in stories_dir.iterdir()
            if path.is_file() and path.name.endswith(self._suffix)
        )

    def clear_cache(self) -> None:
        self._definitions = {}

    @staticmethod
    def _require_mapping(value: object, context: str) -> dict[str, object]:
        if not isinstance(value, dict):
            raise DataValidationError(f"{context} must be an object/dict.")
        return value

    @staticmethod
    def _require_str(value: object, context: str) -> str:
        if not isinstance(value, str):
            raise DataValidationError(f"{context} must be a string.")
        return value

    @staticmethod
    def _require_bool(value: object, context: str) -> bool:
        if not isinstance(value, bool):
            raise DataValidationError(f"{context} must be a boolean.")
        return value

    @staticmethod
    def _require_int(value: object, context: str) -> int:
        if not isinstance(value, int) or isinstance(value, bool):
            raise DataValidationError(f"{context} must be an integer.")
        return value

    @staticmethod
    def _require_number(value: object, context: str) -> float:
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise DataValidationError(f"{context} must be a number.")
        return value

    @staticmethod
    def _require_list(value: object, context: str) -> list[object]:
        if not isinstance(value, list):
            raise DataValidationError(f"{context} must be a list.")
        return value
