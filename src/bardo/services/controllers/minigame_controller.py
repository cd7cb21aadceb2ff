"""UI-agnostic minigame controller: the state machine that suspends the narrative."""
from __future__ import annotations

import logging
from typing import Callable

from bardo.core.types import MinigameStatus
from bardo.domain.minigame import MinigameConfig

logger = logging.getLogger(__name__)

CommitCallback = Callable[[int], None]


class MinigameController:
    """
    Tracks one queued or running minigame and commits its result.

    Transitions:
    - idle --queue_game--> pending
    - pending --start_game--> playing
    - playing --finish_game--> idle (fires the commit callback once)
    - any --cancel_game/reset--> idle (no callback)

    Rendering the game and reading player input belong to the presentation layer.
    """

    def __init__(self, on_commit: CommitCallback | None = None) -> None:
        self._on_commit = on_commit
        self._status: MinigameStatus = "idle"
        self._config: MinigameConfig | None = None
        self._last_result: int | None = None
        self._last_config: MinigameConfig | None = None

    def set_commit_callback(self, on_commit: CommitCallback | None) -> None:
        self._on_commit = on_commit

    @property
    def status(self) -> MinigameStatus:
        return self._status

    @property
    def config(self) -> MinigameConfig | None:
        return self._config

    @property
    def last_result(self) -> int | None:
        return self._last_result

    @property
    def last_config(self) -> MinigameConfig | None:
        """Config of the most recently finished game, for its consequence tags."""
        return self._last_config

    @property
    def is_pending(self) -> bool:
        return self._status == "pending"

    @property
    def is_playing(self) -> bool:
        return self._status == "playing"

    def queue_game(self, config: MinigameConfig) -> bool:
        """Hold a config until the player (or auto-start) begins the game."""
        if self._status == "playing":
            logger.warning("Refusing to queue '%s' while '%s' is playing.", config.type, self._current_type())
            return False
        if self._status == "pending":
            logger.info("Replacing pending minigame '%s' with '%s'.", self._current_type(), config.type)
        self._config = config
        self._status = "pending"
        logger.info("Minigame queued: %s %s", config.type, config.params)
        return True

    def start_game(self) -> bool:
        if self._status != "pending":
            logger.warning("start_game called while %s; ignored.", self._status)
            return False
        self._status = "playing"
        logger.info("Minigame started: %s", self._current_type())
        return True

    def finish_game(self, result: bool | int) -> bool:
        """Commit a result and return to idle. Only valid while playing."""
        if self._status != "playing":
            logger.warning("finish_game called while %s; ignored.", self._status)
            return False
        normalized = 1 if result is True or result == 1 else 0
        logger.info("Minigame finished: %s -> %s", self._current_type(), normalized)
        self._last_config = self._config
        self._config = None
        self._status = "idle"
        self._last_result = normalized
        if self._on_commit is not None:
            self._on_commit(normalized)
        return True

    def cancel_game(self) -> None:
        if self._status != "idle":
            logger.info("Minigame cancelled: %s", self._current_type())
        self._config = None
        self._status = "idle"

    def reset(self) -> None:
        self._config = None
        self._status = "idle"
        self._last_result = None
        self._last_config = None

    def _current_type(self) -> str:
        return self._config.type if self._config is not None else "<none>"
