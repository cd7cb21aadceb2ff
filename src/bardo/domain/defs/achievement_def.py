"""Achievement definition structures."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class AchievementDef:
    """Unlockable achievement shown in the extras menu."""

    id: str
    title: str
    description: str = ""
    icon: str = "🏆"
    hidden: bool = False
