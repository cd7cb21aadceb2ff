"""JSON helpers shared by the story and config repositories."""
from __future__ import annotations

import json
from pathlib import Path

from .errors import DataLoadError


def parse_json(text: str, source: Path) -> object:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DataLoadError(f"Invalid JSON in {source} (line {exc.lineno}): {exc.msg}", source) from exc


def load_json(path: Path) -> object:
    """Read a UTF-8 definition file, raising DataLoadError on any failure."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise DataLoadError(f"Definition file not found: {path}", path) from exc
    except OSError as exc:
        raise DataLoadError(f"Unable to read definition file {path}: {exc}", path) from exc
    return parse_json(text, path)
