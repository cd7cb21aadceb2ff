from __future__ import annotations

import json

import pytest

from bardo.data.storage import InMemoryStorage
from bardo.domain.defs import AchievementDef, GameConfigDef, ItemDef, StatDef, ZeroStatAction
from bardo.domain.inventory import InventorySlot
from bardo.domain.saves import SaveData, SystemsSnapshot
from bardo.services.achievement_service import AchievementService
from bardo.services.effects import RecordingEffects
from bardo.services.errors import StorySessionError
from bardo.services.game_systems_service import GameSystemsService
from bardo.services.narrative_engine import NarrativeEngine
from bardo.services.save_service import SaveService
from tests.helpers.scripted_story import FailingStorage, ScriptedInterpreter


def _make_config() -> GameConfigDef:
    return GameConfigDef(
        story_id="crypt",
        stats_enabled=True,
        stats=[StatDef(id="hp", label="HP", initial=100, min=0, max=100, display_kind="bar")],
        on_zero={"hp": ZeroStatAction(action="end", message="You fall.")},
        items={
            "potion": ItemDef(id="potion", name="Potion", stackable=True),
            "key": ItemDef(id="key", name="Key"),
        },
        achievements=[AchievementDef(id="nimble", title="Nimble")],
    )


def _make_engine(
    lines,
    *,
    choices=(),
    after_choice=(),
    saves: SaveService | None = None,
    achievements: AchievementService | None = None,
) -> NarrativeEngine:
    config = _make_config()
    return NarrativeEngine(
        lambda: ScriptedInterpreter(lines, choices=choices, after_choice=after_choice),
        story_id="crypt",
        systems=GameSystemsService.from_config(config),
        saves=saves,
        achievements=achievements,
        effects=RecordingEffects(),
    )


def test_continue_stops_after_pagination_marker() -> None:
    engine = _make_engine([("First.", []), ("Second.", ["next"]), ("Third.", [])])

    engine.new_game()

    assert engine.state.text == "First.\n\nSecond."
    assert engine.state.can_continue
    assert not engine.state.is_ended

    engine.continue_story()

    assert engine.state.text == "Third."
    assert engine.state.is_ended
    assert [entry.text for entry in engine.state.history] == ["First.\n\nSecond.", "Third."]


def test_empty_batches_are_skipped_but_their_tags_dispatch() -> None:
    engine = _make_engine([("   ", ["sfx:wind"]), ("Words.", [])])

    engine.new_game()

    assert engine.state.text == "Words."
    assert engine.effects.tags == ["sfx:wind"]


def test_minigame_tag_halts_continuation_and_gates_progress() -> None:
    engine = _make_engine(
        [("Pick the lock.", ["minigame: type=lockpick, onFail=stat:hp:-10"]), ("The door opens.", [])]
    )
    engine.new_game()
    interpreter = engine.interpreter

    assert engine.state.text == "Pick the lock."
    assert engine.minigames.is_pending
    assert interpreter.advance_calls == 1

    assert engine.start_minigame()
    assert interpreter.variables["minigame_result"] == -1

    engine.continue_story()
    assert interpreter.advance_calls == 1

    engine.finish_minigame(False)

    assert interpreter.variables["minigame_result"] == 0
    assert engine.systems.stats.get("hp") == 90
    assert engine.state.text == "The door opens."
    assert engine.minigames.status == "idle"


def test_minigame_success_dispatches_success_consequence() -> None:
    achievements = AchievementService("crypt", _make_config().achievements, InMemoryStorage())
    engine = _make_engine(
        [("Catch it!", ["minigame: type=qte, onSuccess=achievement:unlock:nimble"]), ("Caught.", [])],
        achievements=achievements,
    )
    engine.new_game()
    engine.start_minigame()

    engine.finish_minigame(True)

    assert engine.interpreter.variables["minigame_result"] == 1
    assert achievements.is_unlocked("nimble")
    assert engine.state.text == "Caught."


def test_choices_are_ignored_while_minigame_plays() -> None:
    engine = _make_engine([("Decide.", ["minigame:qte"])], choices=["Wait"])
    engine.new_game()
    engine.start_minigame()

    engine.make_choice(0)

    assert engine.interpreter.chosen == []


def test_start_minigame_consumes_item() -> None:
    engine = _make_engine([("Hold your breath.", ["minigame: type=apnea, autostart=false, consume=potion"])])
    engine.new_game()
    engine.systems.inventory.add("potion", 2)

    assert engine.minigames.config.auto_start is False
    assert engine.start_minigame()
    assert engine.systems.inventory.count("potion") == 1


def test_start_minigame_without_pending_game_is_refused(caplog) -> None:
    engine = _make_engine([("Quiet.", [])])
    engine.new_game()

    assert engine.start_minigame() is False
    assert "no pending game" in caplog.text


def test_make_choice_records_history_and_continues() -> None:
    engine = _make_engine(
        [("A fork.", ["shake"])],
        choices=["Left", "Right"],
        after_choice=[[("Went left.", [])], [("Went right.", [])]],
    )
    engine.new_game()

    assert [choice.text for choice in engine.state.choices] == ["Left", "Right"]
    assert engine.effects.tags == ["shake"]

    engine.make_choice(1)

    assert engine.interpreter.chosen == [1]
    assert engine.state.text == "Went right."
    assert engine.effects.tags == []
    history = engine.state.history
    assert [entry.kind for entry in history] == ["text", "choice", "text"]
    assert history[1].text == "> Right"


def test_make_choice_rejects_bad_index_and_missing_story() -> None:
    engine = _make_engine([("A fork.", [])], choices=["Only"])

    with pytest.raises(StorySessionError):
        engine.make_choice(0)

    engine.new_game()
    with pytest.raises(IndexError):
        engine.make_choice(3)


def test_autosave_runs_after_tags_are_dispatched() -> None:
    saves = SaveService(InMemoryStorage(), "crypt")
    engine = _make_engine([("A blade grazes you.", ["stat:hp:-25", "inv:add:key"])], saves=saves)

    engine.new_game()

    saved = saves.load_most_recent()
    assert saved is not None
    assert saved.text == "A blade grazes you."
    assert saved.systems_snapshot.stats["hp"] == 75
    assert saved.systems_snapshot.inventory == [InventorySlot(item_id="key", qty=1)]
    assert saves.saves()[0].is_autosave


def test_failing_autosave_is_logged_not_raised(caplog) -> None:
    engine = _make_engine([("Onward.", [])], saves=SaveService(FailingStorage(), "crypt"))

    engine.new_game()

    assert engine.state.text == "Onward."
    assert "Autosave failed" in caplog.text


def test_init_story_with_saved_text_does_not_advance() -> None:
    engine = _make_engine([("Opening.", []), ("Later.", [])])
    saved = SaveData(
        interpreter_blob=json.dumps({"position": 1, "variables": {"gold": 3}, "chosen": []}),
        text="Opening.",
        systems_snapshot=SystemsSnapshot(stats={"hp": 40}, inventory=[InventorySlot(item_id="potion", qty=2)]),
    )

    engine.init_story(saved)

    assert engine.interpreter.advance_calls == 0
    assert engine.interpreter.variables["gold"] == 3
    assert engine.state.text == "Opening."
    assert engine.state.can_continue
    assert [entry.text for entry in engine.state.history] == ["Opening."]
    assert engine.systems.stats.get("hp") == 40
    assert engine.systems.inventory.count("potion") == 2


def test_manual_save_then_load_restores_session() -> None:
    saves = SaveService(InMemoryStorage(), "crypt")
    engine = _make_engine([("One.", ["next", "stat:hp:-30"]), ("Two.", [])], saves=saves)
    engine.new_game()

    save_id = engine.manual_save("Checkpoint")
    engine.continue_story()
    engine.systems.stats.set("hp", 5)

    assert save_id is not None
    assert engine.load_save(save_id) is not None
    assert engine.state.text == "One."
    assert engine.systems.stats.get("hp") == 70
    assert engine.state.can_continue


def test_manual_save_without_session_returns_none() -> None:
    engine = _make_engine([("One.", [])], saves=SaveService(InMemoryStorage(), "crypt"))

    assert engine.manual_save("Nothing") is None


def test_continue_game_uses_most_recent_save() -> None:
    saves = SaveService(InMemoryStorage(), "crypt")
    engine = _make_engine([("One.", ["page"]), ("Two.", [])], saves=saves)
    engine.new_game()
    engine.continue_story()
    engine.back_to_start()

    assert engine.continue_game() is not None
    assert engine.state.text == "Two."
    assert engine.state.is_ended


def test_new_game_plus_flag_reflects_completion() -> None:
    achievements = AchievementService("crypt", [], InMemoryStorage())
    engine = _make_engine([("The end.", [])], achievements=achievements)
    engine.new_game()
    assert engine.interpreter.variables["new_game_plus"] is False

    engine.finish_game()

    assert engine.interpreter is None
    assert achievements.has_completed_game
    engine.new_game()
    assert engine.interpreter.variables["new_game_plus"] is True


def test_input_request_waits_for_submission() -> None:
    engine = _make_engine([("Who goes there?", ["input:player_name:Your name"])])
    engine.new_game()

    assert engine.state.pending_input is not None
    assert engine.state.pending_input.placeholder == "Your name"

    assert engine.submit_input("Ana")
    assert engine.interpreter.variables["player_name"] == "Ana"
    assert engine.state.pending_input is None
    assert engine.submit_input("again") is False


def test_zero_triggers_report_configured_action() -> None:
    engine = _make_engine([("A fatal fall.", ["stat:hp:0"])])

    engine.new_game()

    triggers = engine.zero_triggers()
    assert [(trigger.stat_id, trigger.action, trigger.message) for trigger in triggers] == [
        ("hp", "end", "You fall.")
    ]


def test_back_to_start_resets_session() -> None:
    engine = _make_engine([("Hurt.", ["stat:hp:-50", "minigame:qte"])])
    engine.new_game()

    engine.back_to_start()

    assert not engine.has_story
    assert engine.state.text == ""
    assert engine.state.history == []
    assert engine.systems.stats.get("hp") == 100
    assert engine.minigames.status == "idle"


def test_cancel_minigame_commits_nothing_and_does_not_resume() -> None:
    engine = _make_engine(
        [("Pick the lock.", ["minigame: type=lockpick, onSuccess=inv:add:key, onFail=stat:hp:-10"]), ("Beyond.", [])]
    )
    engine.new_game()
    interpreter = engine.interpreter
    interpreter.variables["minigame_result"] = 7
    engine.start_minigame()

    engine.cancel_minigame()

    assert engine.minigames.status == "idle"
    assert engine.minigames.last_result is None
    assert interpreter.variables["minigame_result"] == -1
    assert engine.systems.stats.get("hp") == 100
    assert not engine.systems.inventory.has("key")
    assert interpreter.advance_calls == 1
    assert engine.state.text == "Pick the lock."


def test_cancel_pending_minigame_leaves_result_variable_untouched() -> None:
    engine = _make_engine([("A challenge.", ["minigame:qte"]), ("Later.", [])])
    engine.new_game()

    engine.cancel_minigame()

    assert "minigame_result" not in engine.interpreter.variables
    assert engine.interpreter.advance_calls == 1


def test_winning_minigame_applies_on_success_only() -> None:
    engine = _make_engine(
        [("Pick the lock.", ["minigame: type=lockpick, onSuccess=inv:add:key, onFail=stat:hp:-10"]), ("Beyond.", [])]
    )
    engine.new_game()
    engine.start_minigame()

    assert engine.finish_minigame(True)

    assert engine.interpreter.variables["minigame_result"] == 1
    assert engine.systems.inventory.has("key")
    assert engine.systems.stats.get("hp") == 100
    assert engine.state.text == "Beyond."


def test_interpreter_factory_failure_propagates() -> None:
    def _broken_factory():
        raise RuntimeError("story failed to compile")

    engine = NarrativeEngine(_broken_factory, story_id="crypt")

    with pytest.raises(RuntimeError, match="failed to compile"):
        engine.new_game()
    assert not engine.has_story


def test_restore_failure_propagates_from_init_story() -> None:
    engine = _make_engine([("One.", [])])
    saved = SaveData(interpreter_blob="not json", text="", systems_snapshot=SystemsSnapshot())

    with pytest.raises(ValueError):
        engine.init_story(saved)
    assert not engine.has_story
