"""Repository for per-story game configuration (stats, items, achievements)."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List

from bardo.data.errors import DataValidationError
from bardo.data.repositories.base import StoryFileRepository
from bardo.domain.defs import (
    DEFAULT_MAX_SAVES,
    DEFAULT_MAX_SLOTS,
    AchievementDef,
    GameConfigDef,
    ItemDef,
    StatDef,
    ZeroStatAction,
)

logger = logging.getLogger(__name__)

_DISPLAY_KINDS = ("bar", "value")


class GameConfigRepository(StoryFileRepository[GameConfigDef]):
    """Loads ``<story_id>.config.json``; a missing file means the defaults."""

    def __init__(self, base_path: Path | str | None = None) -> None:
        super().__init__(".config.json", base_path)

    def get(self, story_id: str) -> GameConfigDef:
        if story_id not in self._definitions and not self.exists(story_id):
            logger.warning("No game config for story '%s'; using defaults.", story_id)
            self._definitions[story_id] = GameConfigDef(story_id=story_id)
        return super().get(story_id)

    def _build(self, story_id: str, raw: dict[str, object]) -> GameConfigDef:
        return self.parse(story_id, raw)

    def parse(self, story_id: str, raw: dict[str, object]) -> GameConfigDef:
        """Validate an in-memory config payload."""
        meta = self._require_mapping(raw.get("meta", {}), f"config '{story_id}' meta")
        stats_section = self._require_mapping(raw.get("stats", {}), f"config '{story_id}' stats")
        inventory_section = self._require_mapping(raw.get("inventory", {}), f"config '{story_id}' inventory")
        saves_section = self._require_mapping(raw.get("saves", {}), f"config '{story_id}' saves")

        categories = [
            self._require_str(category, f"config '{story_id}' inventory.categories")
            for category in self._require_list(
                inventory_section.get("categories", ["items"]), f"config '{story_id}' inventory.categories"
            )
        ]
        return GameConfigDef(
            story_id=story_id,
            title=self._require_str(meta.get("title", "BardoEngine Game"), f"config '{story_id}' meta.title"),
            version=self._require_str(meta.get("version", "0.1.0"), f"config '{story_id}' meta.version"),
            stats_enabled=self._require_bool(
                stats_section.get("enabled", False), f"config '{story_id}' stats.enabled"
            ),
            stats=self._parse_stats(stats_section.get("definitions", []), story_id),
            on_zero=self._parse_on_zero(stats_section.get("onZero", {}), story_id),
            inventory_enabled=self._require_bool(
                inventory_section.get("enabled", False), f"config '{story_id}' inventory.enabled"
            ),
            max_slots=self._require_positive_int(
                inventory_section.get("maxSlots", DEFAULT_MAX_SLOTS), f"config '{story_id}' inventory.maxSlots"
            ),
            categories=categories,
            items=self._parse_items(raw.get("items", {}), story_id),
            achievements=self._parse_achievements(raw.get("achievements", []), story_id),
            max_saves=self._require_positive_int(
                saves_section.get("maxSaves", DEFAULT_MAX_SAVES), f"config '{story_id}' saves.maxSaves"
            ),
        )

    def _parse_stats(self, raw_stats: object, story_id: str) -> List[StatDef]:
        stats: List[StatDef] = []
        seen: set[str] = set()
        for index, entry in enumerate(self._require_list(raw_stats, f"config '{story_id}' stats.definitions")):
            context = f"config '{story_id}' stat[{index}]"
            stat_data = self._require_mapping(entry, context)
            stat_id = self._require_str(stat_data.get("id"), f"{context} id")
            if stat_id in seen:
                raise DataValidationError(f"{context} duplicates stat id '{stat_id}'.")
            seen.add(stat_id)
            display_kind = stat_data.get("displayType", "value")
            if display_kind not in _DISPLAY_KINDS:
                raise DataValidationError(f"{context} displayType must be one of {_DISPLAY_KINDS}.")
            min_value = stat_data.get("min")
            max_value = stat_data.get("max")
            color = stat_data.get("color")
            stats.append(
                StatDef(
                    id=stat_id,
                    label=self._require_str(stat_data.get("label", stat_id), f"{context} label"),
                    initial=self._require_number(stat_data.get("initial", 0), f"{context} initial"),
                    min=None if min_value is None else self._require_number(min_value, f"{context} min"),
                    max=None if max_value is None else self._require_number(max_value, f"{context} max"),
                    display_kind=display_kind,
                    icon=self._require_str(stat_data.get("icon", ""), f"{context} icon"),
                    color=None if color is None else self._require_str(color, f"{context} color"),
                )
            )
        return stats

    def _parse_on_zero(self, raw_on_zero: object, story_id: str) -> Dict[str, ZeroStatAction]:
        actions: Dict[str, ZeroStatAction] = {}
        for stat_id, entry in self._require_mapping(raw_on_zero, f"config '{story_id}' stats.onZero").items():
            context = f"config '{story_id}' stats.onZero.{stat_id}"
            action_data = self._require_mapping(entry, context)
            actions[stat_id] = ZeroStatAction(
                action=self._require_str(action_data.get("action"), f"{context} action"),
                message=self._require_str(action_data.get("message", ""), f"{context} message"),
            )
        return actions

    def _parse_items(self, raw_items: object, story_id: str) -> Dict[str, ItemDef]:
        items: Dict[str, ItemDef] = {}
        for item_id, entry in self._require_mapping(raw_items, f"config '{story_id}' items").items():
            context = f"config '{story_id}' item '{item_id}'"
            item_data = self._require_mapping(entry, context)
            items[item_id] = ItemDef(
                id=item_id,
                name=self._require_str(item_data.get("name", item_id), f"{context} name"),
                description=self._require_str(item_data.get("description", ""), f"{context} description"),
                category=self._require_str(item_data.get("category", "items"), f"{context} category"),
                stackable=self._require_bool(item_data.get("stackable", False), f"{context} stackable"),
                icon=self._require_str(item_data.get("icon", ""), f"{context} icon"),
            )
        return items

    def _parse_achievements(self, raw_achievements: object, story_id: str) -> List[AchievementDef]:
        achievements: List[AchievementDef] = []
        for index, entry in enumerate(self._require_list(raw_achievements, f"config '{story_id}' achievements")):
            context = f"config '{story_id}' achievement[{index}]"
            data = self._require_mapping(entry, context)
            hidden = data.get("hidden", data.get("secret", False))
            achievements.append(
                AchievementDef(
                    id=self._require_str(data.get("id"), f"{context} id"),
                    title=self._require_str(data.get("title"), f"{context} title"),
                    description=self._require_str(data.get("description", ""), f"{context} description"),
                    icon=self._require_str(data.get("icon", "🏆"), f"{context} icon"),
                    hidden=self._require_bool(hidden, f"{context} hidden"),
                )
            )
        return achievements

    def _require_positive_int(self, value: object, context: str) -> int:
        number = self._require_int(value, context)
        if number <= 0:
            raise DataValidationError(f"{context} must be positive.")
        return number
