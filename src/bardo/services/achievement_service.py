"""Achievement tracking persisted independently of save slots."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Sequence

from bardo.data.storage import KeyValueStorage
from bardo.domain.defs import AchievementDef

logger = logging.getLogger(__name__)

STORAGE_KEY_PREFIX = "bardo_achievements_"
HIDDEN_TITLE = "???"
HIDDEN_DESCRIPTION = "Secret achievement"


@dataclass(slots=True)
class AchievementView:
    """Achievement with unlock status and the text the menu should display."""

    definition: AchievementDef
    unlocked: bool
    display_title: str
    display_description: str


@dataclass(slots=True)
class AchievementProgress:
    total: int
    unlocked: int
    percentage: int


class AchievementService:
    """Unlocks achievements and tracks whether the story was ever completed (New Game+)."""

    def __init__(
        self,
        story_id: str,
        definitions: Sequence[AchievementDef],
        storage: KeyValueStorage,
    ) -> None:
        self._story_id = story_id
        self._definitions: Dict[str, AchievementDef] = {definition.id: definition for definition in definitions}
        self._storage = storage
        self._unlocked_ids: List[str] = []
        self._has_completed_game = False
        self.pending_toast: AchievementDef | None = None
        self._load()

    @property
    def storage_key(self) -> str:
        return f"{STORAGE_KEY_PREFIX}{self._story_id}"

    @property
    def unlocked_ids(self) -> List[str]:
        return list(self._unlocked_ids)

    @property
    def has_completed_game(self) -> bool:
        return self._has_completed_game

    def is_unlocked(self, achievement_id: str) -> bool:
        return achievement_id in self._unlocked_ids

    def unlock(self, achievement_id: str) -> bool:
        """Unlock and persist an achievement. Returns True only when newly unlocked."""
        if achievement_id in self._unlocked_ids:
            logger.info("Achievement '%s' already unlocked.", achievement_id)
            return False
        definition = self._definitions.get(achievement_id)
        if definition is None:
            logger.warning("Unknown achievement '%s'; unlock ignored.", achievement_id)
            return False
        self._unlocked_ids.append(achievement_id)
        self.pending_toast = definition
        logger.info("Achievement unlocked: %s", achievement_id)
        self._persist()
        return True

    def clear_toast(self) -> None:
        self.pending_toast = None

    def mark_game_complete(self) -> bool:
        if self._has_completed_game:
            return False
        self._has_completed_game = True
        logger.info("Story '%s' marked as completed.", self._story_id)
        self._persist()
        return True

    def reset_all(self) -> None:
        self._unlocked_ids = []
        self._has_completed_game = False
        self.pending_toast = None
        self._storage.remove(self.storage_key)

    def achievements(self) -> List[AchievementView]:
        views: List[AchievementView] = []
        for definition in self._definitions.values():
            unlocked = definition.id in self._unlocked_ids
            concealed = definition.hidden and not unlocked
            views.append(
                AchievementView(
                    definition=definition,
                    unlocked=unlocked,
                    display_title=HIDDEN_TITLE if concealed else definition.title,
                    display_description=HIDDEN_DESCRIPTION if concealed else definition.description,
                )
            )
        return views

    def progress(self) -> AchievementProgress:
        total = len(self._definitions)
        unlocked = sum(1 for achievement_id in self._unlocked_ids if achievement_id in self._definitions)
        percentage = round(unlocked / total * 100) if total else 0
        return AchievementProgress(total=total, unlocked=unlocked, percentage=percentage)

    def _read_payload(self) -> object:
        """Return the decoded document, None when absent, or "" when unreadable."""
        try:
            raw = self._storage.read(self.storage_key)
        except OSError as exc:
            logger.warning("Unable to read achievements under '%s': %s", self.storage_key, exc)
            return None
        except UnicodeDecodeError:
            return ""
        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return ""

    def _load(self) -> None:
        payload = self._read_payload()
        if payload is None:
            return
        if not isinstance(payload, dict):
            logger.warning("Corrupt achievement data under '%s'; starting empty.", self.storage_key)
            return
        unlocked = payload.get("unlockedIds")
        if isinstance(unlocked, list):
            self._unlocked_ids = [entry for entry in unlocked if isinstance(entry, str)]
        self._has_completed_game = payload.get("hasCompletedGame") is True

    def _persist(self) -> None:
        payload = {
            "unlockedIds": self._unlocked_ids,
            "hasCompletedGame": self._has_completed_game,
            "lastUpdated": datetime.now(timezone.utc).isoformat(),
        }
        try:
            self._storage.write(self.storage_key, json.dumps(payload))
        except OSError as exc:
            logger.warning("Failed to persist achievements for '%s': %s", self._story_id, exc)
