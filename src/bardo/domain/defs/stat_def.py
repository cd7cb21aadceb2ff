"""Stat definition structures."""
from __future__ import annotations

from dataclasses import dataclass

from bardo.core.types import DisplayKind


@dataclass(slots=True)
class StatDef:
    """Static description of a bounded numeric stat."""

    id: str
    label: str
    initial: float = 0
    min: float | None = None
    max: float | None = None
    display_kind: DisplayKind = "value"
    icon: str = ""
    color: str | None = None

    def clamp(self, value: float) -> float:
        """Clamp a value to whichever bounds are defined."""
        if self.min is not None:
            value = max(self.min, value)
        if self.max is not None:
            value = min(self.max, value)
        return value


@dataclass(slots=True)
class ZeroStatAction:
    """What the front-end should do when a bar stat reaches zero."""

    action: str
    message: str = ""
