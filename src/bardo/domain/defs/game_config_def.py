"""Per-story game configuration."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from .achievement_def import AchievementDef
from .item_def import ItemDef
from .stat_def import StatDef, ZeroStatAction

DEFAULT_MAX_SLOTS = 10
DEFAULT_MAX_SAVES = 10


@dataclass(slots=True)
class GameConfigDef:
    """Static tables a story ships alongside its narrative."""

    story_id: str
    title: str = "BardoEngine Game"
    version: str = "0.1.0"
    stats_enabled: bool = False
    stats: List[StatDef] = field(default_factory=list)
    on_zero: Dict[str, ZeroStatAction] = field(default_factory=dict)
    inventory_enabled: bool = False
    max_slots: int = DEFAULT_MAX_SLOTS
    categories: List[str] = field(default_factory=lambda: ["items"])
    items: Dict[str, ItemDef] = field(default_factory=dict)
    achievements: List[AchievementDef] = field(default_factory=list)
    max_saves: int = DEFAULT_MAX_SAVES

    def stat(self, stat_id: str) -> StatDef | None:
        for definition in self.stats:
            if definition.id == stat_id:
                return definition
        return None
