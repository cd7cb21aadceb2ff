"""Continuation engine: drives the interpreter and fans its output out to subsystems."""
from __future__ import annotations

import logging
import time
from typing import Callable, List, Mapping

from bardo.core.types import HistoryKind
from bardo.domain.interpreter import StoryInterpreter
from bardo.domain.saves import SaveData
from bardo.domain.state import HistoryEntry, NarrativeState
from bardo.domain.stats import ZeroStatTrigger
from bardo.domain.tags import InputRequestTag, is_minigame_marker, is_pagination_marker
from bardo.services.achievement_service import AchievementService
from bardo.services.controllers import MinigameController
from bardo.services.effects import EffectsSink, RecordingEffects
from bardo.services.errors import SaveLoadError, StorySessionError
from bardo.services.game_systems_service import GameSystemsService
from bardo.services.save_service import SaveService
from bardo.services.tag_dispatcher import TagDispatcher

logger = logging.getLogger(__name__)

InterpreterFactory = Callable[[], StoryInterpreter]

MINIGAME_RESULT_VARIABLE = "minigame_result"
NEW_GAME_PLUS_VARIABLE = "new_game_plus"
PENDING_RESULT = -1


class NarrativeEngine:
    """
    Application service that owns one story session.

    The engine exclusively owns the interpreter, both stores, the minigame
    controller and the save collection of its story. Front-ends read
    ``state`` after each call and never mutate it.
    """

    def __init__(
        self,
        interpreter_factory: InterpreterFactory,
        *,
        story_id: str | None = None,
        systems: GameSystemsService | None = None,
        saves: SaveService | None = None,
        achievements: AchievementService | None = None,
        effects: EffectsSink | None = None,
        minigames: MinigameController | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._interpreter_factory = interpreter_factory
        self._story_id = story_id
        self._systems = systems or GameSystemsService()
        self._saves = saves
        self._achievements = achievements
        self._effects = effects if effects is not None else RecordingEffects()
        self._clock = clock
        self._interpreter: StoryInterpreter | None = None
        self.state = NarrativeState()
        self.minigames = minigames or MinigameController()
        self.minigames.set_commit_callback(self._on_minigame_result)
        self._dispatcher = TagDispatcher(
            self.minigames,
            self._systems,
            achievements=self._achievements,
            effects=self._effects,
            variables=self._interpreter_variables,
            on_input_request=self._on_input_request,
        )

    @property
    def story_id(self) -> str | None:
        return self._story_id

    @property
    def interpreter(self) -> StoryInterpreter | None:
        return self._interpreter

    @property
    def systems(self) -> GameSystemsService:
        return self._systems

    @property
    def saves(self) -> SaveService | None:
        return self._saves

    @property
    def achievements(self) -> AchievementService | None:
        return self._achievements

    @property
    def effects(self) -> EffectsSink:
        return self._effects

    @property
    def dispatcher(self) -> TagDispatcher:
        return self._dispatcher

    @property
    def has_story(self) -> bool:
        return self._interpreter is not None

    # ------------------------------------------------------------------
    # Continuation
    # ------------------------------------------------------------------
    def continue_story(self) -> None:
        """Consume interpreter output up to the next pause point and publish it."""
        interpreter = self._interpreter
        if interpreter is None or self.minigames.is_playing:
            return

        parts: List[str] = []
        tags: List[str] = []
        while interpreter.can_advance:
            batch = interpreter.advance().strip()
            batch_tags = list(interpreter.current_tags)
            if batch:
                parts.append(batch)
            tags.extend(batch_tags)
            if any(is_pagination_marker(tag) for tag in batch_tags):
                break
            if any(is_minigame_marker(tag) for tag in batch_tags):
                break

        text = "\n\n".join(parts).strip()
        self._publish(interpreter, text)
        if text:
            self._record_history(text, tags, "text")

        self._dispatcher.dispatch_all(tags)
        self._autosave()

    def make_choice(self, index: int) -> None:
        interpreter = self._require_interpreter()
        if self.minigames.is_playing:
            logger.warning("Choice %s ignored while a minigame is playing.", index)
            return
        choices = list(interpreter.current_choices)
        if not 0 <= index < len(choices):
            raise IndexError(f"Choice index {index} is invalid; {len(choices)} choices available.")
        selected = choices[index]
        self._effects.clear()
        interpreter.choose_choice(selected.index)
        self._record_history(f"> {selected.text}", [], "choice")
        self.continue_story()

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------
    def init_story(self, saved: SaveData | None = None) -> None:
        """Construct a fresh interpreter, optionally restoring a save into it."""
        interpreter = self._interpreter_factory()
        if saved is not None:
            interpreter.restore_state(saved.interpreter_blob)
        self._interpreter = interpreter
        self.state.clear()
        self._effects.clear()
        if self._achievements is not None:
            interpreter.variables[NEW_GAME_PLUS_VARIABLE] = self._achievements.has_completed_game
        self.minigames.reset()
        if saved is not None:
            self._systems.load_snapshot(saved.systems_snapshot)

        if saved is not None and saved.text:
            self._publish(interpreter, saved.text)
            self._record_history(saved.text, [], "text")
            return
        if interpreter.can_advance:
            self.continue_story()
        else:
            self._publish(interpreter, "")

    def new_game(self) -> None:
        self._systems.reset()
        self.init_story()

    def continue_game(self) -> SaveData | None:
        """Resume from the most recent record (autosave included)."""
        if self._saves is None:
            return None
        saved = self._saves.load_most_recent()
        if saved is not None:
            self.init_story(saved)
        return saved

    def load_save(self, save_id: str) -> SaveData | None:
        if self._saves is None:
            return None
        saved = self._saves.load(save_id)
        if saved is not None:
            self.init_story(saved)
        return saved

    def manual_save(self, name: str, overwrite_id: str | None = None) -> str | None:
        """Write a named save. Raises SaveLoadError if storage fails."""
        interpreter = self._interpreter
        if interpreter is None or self._saves is None or not self._story_id:
            return None
        return self._saves.save(
            name,
            interpreter.serialize_state(),
            self.state.text,
            self._systems.export_snapshot(),
            overwrite_id=overwrite_id,
        )

    def restart(self) -> None:
        self._systems.reset()
        self.init_story()

    def back_to_start(self) -> None:
        self._interpreter = None
        self.state.clear()
        self._systems.reset()
        self.minigames.reset()
        self._effects.clear()

    def finish_game(self) -> None:
        """Record completion for New Game+ and leave the session."""
        if self._achievements is not None:
            self._achievements.mark_game_complete()
        self.back_to_start()

    # ------------------------------------------------------------------
    # Minigames and input
    # ------------------------------------------------------------------
    def start_minigame(self) -> bool:
        """Begin the pending game: reset the result variable and consume its item."""
        config = self.minigames.config
        if not self.minigames.is_pending or config is None:
            logger.warning("start_minigame called with no pending game.")
            return False
        if self._interpreter is not None:
            self._interpreter.variables[MINIGAME_RESULT_VARIABLE] = PENDING_RESULT
        if config.consume_item:
            self._systems.inventory.remove(config.consume_item, 1)
        return self.minigames.start_game()

    def finish_minigame(self, result: bool | int) -> bool:
        return self.minigames.finish_game(result)

    def cancel_minigame(self) -> None:
        self.minigames.cancel_game()

    def submit_input(self, value: str) -> bool:
        """Write the player's answer into the variable named by the last input tag."""
        request = self.state.pending_input
        if request is None:
            logger.warning("submit_input called with no pending input request.")
            return False
        interpreter = self._require_interpreter()
        interpreter.variables[request.variable] = value
        self.state.pending_input = None
        logger.info("Input stored in '%s'.", request.variable)
        return True

    def zero_triggers(self) -> List[ZeroStatTrigger]:
        return self._systems.stats.zero_triggers()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _on_minigame_result(self, result: int) -> None:
        config = self.minigames.last_config
        if self._interpreter is not None:
            self._interpreter.variables[MINIGAME_RESULT_VARIABLE] = result
        consequence = config.consequence_for(result) if config is not None else None
        if consequence:
            logger.debug("Dispatching minigame consequence '%s'.", consequence)
            self._dispatcher.dispatch(consequence)
        self.continue_story()

    def _on_input_request(self, request: InputRequestTag) -> None:
        self.state.pending_input = request

    def _interpreter_variables(self) -> Mapping[str, object] | None:
        return self._interpreter.variables if self._interpreter is not None else None

    def _publish(self, interpreter: StoryInterpreter, text: str) -> None:
        choices = list(interpreter.current_choices)
        can_continue = interpreter.can_advance
        self.state.text = text
        self.state.choices = choices
        self.state.can_continue = can_continue
        self.state.is_ended = not can_continue and not choices

    def _record_history(self, text: str, tags: List[str], kind: HistoryKind) -> None:
        self.state.history.append(
            HistoryEntry(text=text, timestamp=int(self._clock() * 1000), tags=list(tags), kind=kind)
        )

    def _autosave(self) -> None:
        interpreter = self._interpreter
        if not self._story_id or self._saves is None or interpreter is None:
            return
        try:
            self._saves.autosave(interpreter.serialize_state(), self.state.text, self._systems.export_snapshot())
        except SaveLoadError as exc:
            logger.warning("Autosave failed for '%s': %s", self._story_id, exc)

    def _require_interpreter(self) -> StoryInterpreter:
        if self._interpreter is None:
            raise StorySessionError("No story is active.")
        return self._interpreter
