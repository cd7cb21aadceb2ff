"""Exceptions raised while loading story graphs and game configs."""
from __future__ import annotations

from pathlib import Path


class DataError(Exception):
    """Base exception for the data layer."""


class DataLoadError(DataError):
    """A story or config file is missing, unreadable or not JSON."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class DataValidationError(DataError):
    """A story or config payload has the wrong shape."""


class DataReferenceError(DataError):
    """A story links to a node that does not exist."""
