"""Routes parsed narrative tags to exactly one subsystem."""
from __future__ import annotations

import logging
from typing import Callable, Iterable, Mapping

from bardo.domain.tags import (
    AchievementUnlockTag,
    EffectTag,
    InputRequestTag,
    InventoryTag,
    MalformedMinigameTag,
    MinigameTag,
    StatTag,
    parse_tag,
)
from bardo.services.achievement_service import AchievementService
from bardo.services.controllers import MinigameController
from bardo.services.effects import EffectsSink, RecordingEffects
from bardo.services.game_systems_service import GameSystemsService

logger = logging.getLogger(__name__)

VariablesProvider = Callable[[], Mapping[str, object] | None]
InputRequestHandler = Callable[[InputRequestTag], None]


class TagDispatcher:
    """Applies the first matching rule for each tag: minigame, achievement, stat/inv, input, effects."""

    def __init__(
        self,
        minigames: MinigameController,
        systems: GameSystemsService,
        *,
        achievements: AchievementService | None = None,
        effects: EffectsSink | None = None,
        variables: VariablesProvider | None = None,
        on_input_request: InputRequestHandler | None = None,
    ) -> None:
        self._minigames = minigames
        self._systems = systems
        self._achievements = achievements
        self._effects = effects if effects is not None else RecordingEffects()
        self._variables = variables
        self._on_input_request = on_input_request

    @property
    def effects(self) -> EffectsSink:
        return self._effects

    def set_input_handler(self, handler: InputRequestHandler | None) -> None:
        self._on_input_request = handler

    def dispatch(self, tag: str) -> bool:
        """Route one tag. Returns whether some subsystem handled it."""
        variables = self._variables() if self._variables is not None else None
        parsed = parse_tag(tag, variables)
        match parsed:
            case None:
                return False
            case MinigameTag(config=config):
                logger.debug("Tag '%s' -> minigame %s", parsed.raw, config.type)
                self._minigames.queue_game(config)
                return True
            case MalformedMinigameTag(raw=raw, reason=reason):
                logger.warning("Malformed minigame tag '%s': %s", raw, reason)
                self._effects.trigger(raw)
                return True
            case AchievementUnlockTag(achievement_id=achievement_id):
                logger.debug("Tag '%s' -> achievement %s", parsed.raw, achievement_id)
                if self._achievements is not None:
                    self._achievements.unlock(achievement_id)
                else:
                    logger.warning("No achievement service; '%s' ignored.", achievement_id)
                return True
            case StatTag() | InventoryTag():
                logger.debug("Tag '%s' -> game systems", parsed.raw)
                return self._systems.process_tag(parsed)
            case InputRequestTag():
                logger.debug("Tag '%s' -> input request for '%s'", parsed.raw, parsed.variable)
                if self._on_input_request is not None:
                    self._on_input_request(parsed)
                return True
            case EffectTag(raw=raw):
                self._effects.trigger(raw)
                return True
        return False

    def dispatch_all(self, tags: Iterable[str]) -> None:
        """Dispatch tags in emission order."""
        for tag in tags:
            self.dispatch(tag)
