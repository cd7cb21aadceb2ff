"""Console-driven UI loops for BardoEngine."""
from __future__ import annotations

import logging
from typing import List, Literal

from bardo.data.errors import DataError
from bardo.data.repositories import GameConfigRepository, StoryRepository
from bardo.domain.defs import GameConfigDef
from bardo.domain.tags import is_pagination_marker
from bardo.presentation.cli import config, render
from bardo.presentation.cli.minigames import MINIGAMES, run_minigame
from bardo.presentation.cli.save_slots import FileStorage
from bardo.services import (
    AchievementService,
    GameSystemsService,
    GraphStoryInterpreter,
    NarrativeEngine,
    RecordingEffects,
    SaveLoadError,
    SaveService,
)

MenuAction = Literal["new_game", "continue", "load", "delete", "achievements", "back"]
LoopOutcome = Literal["menu", "ended"]


def main() -> None:
    """Start the interactive CLI session."""
    options = config.load_config()
    logging.basicConfig(
        level=config.resolve_log_level(options),
        format="%(levelname)s %(name)s: %(message)s",
    )
    storage = FileStorage()
    story_repo = StoryRepository()
    config_repo = GameConfigRepository()
    print("=== BardoEngine ===")
    while True:
        story_id = _select_story(story_repo)
        if story_id is None:
            break
        try:
            engine, game_config = _build_engine(story_id, story_repo, config_repo, storage)
        except DataError as exc:
            print(f"Unable to load story '{story_id}': {exc}")
            continue
        _story_menu_loop(engine, game_config, options["text_display_mode"])
    print("Goodbye!")


def _select_story(story_repo: StoryRepository) -> str | None:
    story_ids = story_repo.list_ids()
    if not story_ids:
        print("No stories found.")
        return None
    while True:
        render.render_menu("Stories", [*story_ids, "Quit"])
        raw = input("Select a story: ").strip()
        try:
            index = int(raw) - 1
        except ValueError:
            print("Please enter a number.")
            continue
        if index == len(story_ids):
            return None
        if 0 <= index < len(story_ids):
            return story_ids[index]
        print(f"Please enter a value between 1 and {len(story_ids) + 1}.")


def _build_engine(
    story_id: str,
    story_repo: StoryRepository,
    config_repo: GameConfigRepository,
    storage: FileStorage,
) -> tuple[NarrativeEngine, GameConfigDef]:
    """Wire one story session with concrete repositories and storage."""
    game_config = config_repo.get(story_id)
    story_def = story_repo.get(story_id)
    engine = NarrativeEngine(
        lambda: GraphStoryInterpreter(story_def),
        story_id=story_id,
        systems=GameSystemsService.from_config(game_config),
        saves=SaveService(storage, story_id, max_saves=game_config.max_saves),
        achievements=AchievementService(story_id, game_config.achievements, storage),
    )
    return engine, game_config


def _story_menu_loop(engine: NarrativeEngine, game_config: GameConfigDef, text_mode: str) -> None:
    while True:
        action = _story_menu(engine, game_config)
        if action == "back":
            return
        if action == "achievements":
            _show_achievements(engine)
            continue
        if action == "delete":
            _delete_save(engine)
            continue
        try:
            if action == "new_game":
                engine.new_game()
            elif action == "continue":
                if engine.continue_game() is None:
                    print("Nothing to continue.")
                    continue
            elif not _load_save(engine):
                continue
        except SaveLoadError as exc:
            print(f"Unable to load save: {exc}")
            engine.back_to_start()
            continue
        _run_story_loop(engine, text_mode)


def _story_menu(engine: NarrativeEngine, game_config: GameConfigDef) -> MenuAction:
    saves = engine.saves
    options: List[tuple[MenuAction, str]] = [("new_game", "New Game")]
    if saves is not None and saves.has_continue:
        options.append(("continue", "Continue"))
    if saves is not None and saves.saves():
        options.append(("load", "Load"))
        options.append(("delete", "Delete save"))
    options.append(("achievements", "Achievements"))
    options.append(("back", "Back"))
    while True:
        render.render_menu(game_config.title, [label for _, label in options])
        raw = input("Select an option: ").strip()
        try:
            index = int(raw) - 1
        except ValueError:
            print("Please enter a number.")
            continue
        if 0 <= index < len(options):
            return options[index][0]
        print(f"Please enter a value between 1 and {len(options)}.")


def _prompt_save_choice(engine: NarrativeEngine, title: str) -> str | None:
    records = engine.saves.saves() if engine.saves is not None else []
    if not records:
        print("No saves found.")
        return None
    render.render_menu(title, [render.format_save(record) for record in records] + ["Cancel"])
    while True:
        raw = input("Select a save: ").strip()
        try:
            index = int(raw) - 1
        except ValueError:
            print("Please enter a number.")
            continue
        if index == len(records):
            return None
        if 0 <= index < len(records):
            return records[index].id
        print("Invalid selection.")


def _load_save(engine: NarrativeEngine) -> bool:
    save_id = _prompt_save_choice(engine, "Load")
    if save_id is None:
        return False
    if engine.load_save(save_id) is None:
        print("That save could not be found.")
        return False
    return True


def _delete_save(engine: NarrativeEngine) -> None:
    save_id = _prompt_save_choice(engine, "Delete save")
    if save_id is None or engine.saves is None:
        return
    try:
        engine.saves.delete(save_id)
    except SaveLoadError as exc:
        print(f"Unable to delete save: {exc}")
        return
    print("Save deleted.")


def _show_achievements(engine: NarrativeEngine) -> None:
    achievements = engine.achievements
    if achievements is None:
        return
    render.render_achievements(achievements.achievements(), achievements.progress())
    if achievements.has_completed_game:
        print("New Game+ unlocked.")


def _run_story_loop(engine: NarrativeEngine, text_mode: str) -> LoopOutcome:
    """Render output and collect input until the story ends or the player quits."""
    rendered = 0
    while True:
        state = engine.state
        if len(state.history) < rendered:
            rendered = 0
        fresh = state.history[rendered:]
        for entry in fresh:
            if entry.kind == "text":
                print()
                render.render_story_text(entry.text, text_mode)
        rendered = len(state.history)
        _flush_feedback(engine, show_status=bool(fresh))

        if state.pending_input is not None:
            value = input(f"{state.pending_input.placeholder} ").strip()
            engine.submit_input(value)
            continue

        if engine.minigames.is_pending:
            _play_minigame(engine)
            continue

        for trigger in engine.zero_triggers():
            if trigger.action == "end":
                print(f"\n{trigger.message or 'Your journey ends here.'}")
                engine.back_to_start()
                return "ended"

        if state.is_ended:
            print("\n=== THE END ===")
            engine.finish_game()
            return "ended"

        render.render_choices(state.choices)
        prompt = "Choose" if state.choices else "Enter to continue"
        raw = input(f"{prompt} (s=save, q=menu): ").strip().lower()
        if raw == "q":
            engine.back_to_start()
            return "menu"
        if raw == "s":
            _manual_save(engine)
            continue
        if state.choices:
            try:
                index = int(raw) - 1
                engine.make_choice(index)
            except (ValueError, IndexError):
                print(f"Please enter a value between 1 and {len(state.choices)}.")
            continue
        engine.continue_story()


def _flush_feedback(engine: NarrativeEngine, *, show_status: bool) -> None:
    if isinstance(engine.effects, RecordingEffects):
        render.render_effects(tag for tag in engine.effects.drain() if not is_pagination_marker(tag))
    achievements = engine.achievements
    if achievements is not None and achievements.pending_toast is not None:
        render.render_toast(achievements.pending_toast.title)
        achievements.clear_toast()
    systems = engine.systems
    if show_status and (systems.stats.enabled or systems.inventory.slots):
        render.render_status(systems.stats.all_info(), systems.inventory)


def _play_minigame(engine: NarrativeEngine) -> None:
    game = engine.minigames.config
    if game is None:
        return
    if game.type not in MINIGAMES:
        print(f"(The '{game.type}' challenge has no console version; skipping.)")
        engine.cancel_minigame()
        engine.continue_story()
        return
    if not game.auto_start:
        answer = input(f"A {game.type} challenge awaits. Attempt it? [Y/n] ").strip().lower()
        if answer == "n":
            engine.cancel_minigame()
            engine.continue_story()
            return
    engine.start_minigame()
    result = run_minigame(game)
    print("Success!" if result else "Failed.")
    engine.finish_minigame(bool(result))


def _manual_save(engine: NarrativeEngine) -> None:
    name = input("Save name (blank for default): ").strip()
    if not name:
        count = len(engine.saves.saves()) if engine.saves is not None else 0
        name = f"Save {count + 1}"
    try:
        save_id = engine.manual_save(name)
    except SaveLoadError as exc:
        print(f"Unable to save: {exc}")
        return
    if save_id is None:
        print("Nothing to save yet.")
        return
    print(f"Saved as '{name}'.")
