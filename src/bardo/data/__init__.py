"""Data layer utilities for loading JSON definitions and persisted blobs."""

from .errors import DataLoadError, DataReferenceError, DataValidationError
from .paths import get_definitions_path, get_repo_root, get_stories_path
from .storage import InMemoryStorage, KeyValueStorage

__all__ = [
    "DataLoadError",
    "DataReferenceError",
    "DataValidationError",
    "InMemoryStorage",
    "KeyValueStorage",
    "get_definitions_path",
    "get_repo_root",
    "get_stories_path",
]
