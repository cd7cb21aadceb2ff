import pytest

from bardo.domain.tags import (
    DEFAULT_INPUT_PLACEHOLDER,
    AchievementUnlockTag,
    EffectTag,
    InputRequestTag,
    InventoryTag,
    MalformedMinigameTag,
    MinigameTag,
    StatTag,
    interpolate_variables,
    is_minigame_marker,
    is_pagination_marker,
    parse_float_prefix,
    parse_minigame_tag,
    parse_tag,
)


def test_legacy_qte_tag_parses_key_and_timeout() -> None:
    config = parse_minigame_tag("minigame:qte:E:1.5")

    assert config is not None
    assert config.type == "qte"
    assert config.params == {"key": "E", "timeout": 1.5}
    assert config.auto_start is True


def test_legacy_qte_defaults_when_args_missing_or_zero() -> None:
    bare = parse_minigame_tag("minigame:qte")
    zero = parse_minigame_tag("minigame:qte:E:0")

    assert bare is not None and bare.params == {"key": "SPACE", "timeout": 2.0}
    assert zero is not None and zero.params["timeout"] == 2.0


def test_legacy_lockpick_and_other_types() -> None:
    lockpick = parse_minigame_tag("minigame:lockpick:0.2:3")
    defaults = parse_minigame_tag("minigame:lockpick")
    arkanoid = parse_minigame_tag("minigame:arkanoid")

    assert lockpick is not None and lockpick.params == {"zoneSize": 0.2, "speed": 3.0}
    assert defaults is not None and defaults.params == {"zoneSize": 0.15, "speed": 1.5}
    assert arkanoid is not None and arkanoid.params == {}


def test_minigame_prefix_is_case_insensitive() -> None:
    config = parse_minigame_tag("MiniGame:QTE:x")

    assert config is not None
    assert config.type == "qte"
    assert config.params["key"] == "x"


def test_key_value_tag_parses_reserved_and_numeric_keys() -> None:
    config = parse_minigame_tag(
        "minigame: type=Lockpick, speed=8, zoneSize=0.1, onFail=stat:hp:-20, onSuccess=inv:add:llave"
    )

    assert config is not None
    assert config.type == "lockpick"
    assert config.params["speed"] == 8
    assert config.params["zoneSize"] == 0.1
    assert config.on_fail == "stat:hp:-20"
    assert config.on_success == "inv:add:llave"
    assert config.auto_start is True


def test_key_value_autostart_and_consume() -> None:
    manual = parse_minigame_tag("minigame: type=apnea, autostart=false, consume=potion")
    shouting = parse_minigame_tag("minigame: type=apnea, autostart=TRUE")

    assert manual is not None and manual.auto_start is False
    assert manual.consume_item == "potion"
    assert "consume" not in manual.params
    assert shouting is not None and shouting.auto_start is True


def test_key_value_non_numeric_values_stay_strings() -> None:
    config = parse_minigame_tag("minigame: type=keymash, key=v, delay=1.5s, note=a=b")

    assert config is not None
    assert config.params["key"] == "v"
    assert config.params["delay"] == 1.5
    assert config.params["note"] == "a=b"


def test_key_value_pairs_without_equals_are_skipped(caplog) -> None:
    config = parse_minigame_tag("minigame: type=qte, junk, key=E")

    assert config is not None
    assert config.params == {"key": "E"}
    assert "junk" in caplog.text


def test_key_value_interpolates_variables() -> None:
    variables = {"hits": 12, "name": "Ana", "hard": True}
    config = parse_minigame_tag(
        "minigame: type=keymash, count={hits}, label={name}, mode={hard}, other={missing}", variables
    )

    assert config is not None
    assert config.params["count"] == 12
    assert config.params["label"] == "Ana"
    assert config.params["mode"] == "true"
    assert config.params["other"] == "{missing}"


def test_key_value_without_type_is_malformed() -> None:
    assert parse_minigame_tag("minigame: speed=3") is None

    parsed = parse_tag("minigame: speed=3")
    assert isinstance(parsed, MalformedMinigameTag)


def test_interpolate_variables_formats_integral_floats() -> None:
    assert interpolate_variables("x{n}y", {"n": 3.0}) == "x3y"
    assert interpolate_variables("{a} and {b}", {"a": 1.5}) == "1.5 and {b}"
    assert interpolate_variables("{a}", None) == "{a}"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("1.5s", 1.5), ("  -2", -2.0), (".5", 0.5), ("abc", None), ("", None), ("3e2x", 300.0)],
)
def test_parse_float_prefix(raw: str, expected: float | None) -> None:
    assert parse_float_prefix(raw) == expected


def test_parse_tag_blank_returns_none() -> None:
    assert parse_tag("   ") is None


def test_parse_tag_trims_and_detects_minigame_first() -> None:
    parsed = parse_tag("  minigame:qte:F:3  ")

    assert isinstance(parsed, MinigameTag)
    assert parsed.raw == "minigame:qte:F:3"
    assert parsed.config.params["key"] == "F"


def test_parse_tag_achievement_is_case_insensitive() -> None:
    parsed = parse_tag("Achievement:Unlock:first_blood")

    assert parsed == AchievementUnlockTag(raw="Achievement:Unlock:first_blood", achievement_id="first_blood")


def test_parse_tag_stat_delta_and_absolute() -> None:
    assert parse_tag("stat:hp:-10") == StatTag(raw="stat:hp:-10", stat_id="hp", value=-10, is_delta=True)
    assert parse_tag("stat:hp:+5") == StatTag(raw="stat:hp:+5", stat_id="hp", value=5, is_delta=True)
    assert parse_tag("stat:hp:50") == StatTag(raw="stat:hp:50", stat_id="hp", value=50, is_delta=False)
    assert parse_tag("stat:hp:12abc") == StatTag(raw="stat:hp:12abc", stat_id="hp", value=12, is_delta=False)


@pytest.mark.parametrize("raw", ["stat:hp:abc", "stat:hp", "STAT:hp:5"])
def test_parse_tag_unparsable_stat_falls_through_to_effect(raw: str) -> None:
    assert parse_tag(raw) == EffectTag(raw=raw)


def test_parse_tag_inventory_grammar() -> None:
    assert parse_tag("inv:add:key") == InventoryTag(raw="inv:add:key", action="add", item_id="key", qty=1)
    assert parse_tag("inv:add:potion:3") == InventoryTag(
        raw="inv:add:potion:3", action="add", item_id="potion", qty=3
    )
    assert parse_tag("inv:add:potion:x") == InventoryTag(
        raw="inv:add:potion:x", action="add", item_id="potion", qty=1
    )
    assert parse_tag("inv:remove:key") == InventoryTag(raw="inv:remove:key", action="remove", item_id="key", qty=1)
    assert parse_tag("inv:remove:key:all") == InventoryTag(
        raw="inv:remove:key:all", action="remove", item_id="key", qty=None
    )
    assert parse_tag("inv:clear") == InventoryTag(raw="inv:clear", action="clear")


@pytest.mark.parametrize("raw", ["inv:drop:key", "inv:add"])
def test_parse_tag_bad_inventory_falls_through_to_effect(raw: str) -> None:
    assert parse_tag(raw) == EffectTag(raw=raw)


def test_parse_tag_input_request() -> None:
    plain = parse_tag("input:player_name")
    custom = parse_tag("INPUT:name:Who are you?")

    assert plain == InputRequestTag(raw="input:player_name", variable="player_name", placeholder=DEFAULT_INPUT_PLACEHOLDER)
    assert isinstance(custom, InputRequestTag)
    assert custom.variable == "name"
    assert custom.placeholder == "Who are you?"
    assert parse_tag("input:") == EffectTag(raw="input:")


def test_parse_tag_unknown_namespace_is_effect() -> None:
    assert parse_tag("shake") == EffectTag(raw="shake")
    assert parse_tag("sfx:thunder") == EffectTag(raw="sfx:thunder")


def test_pagination_and_minigame_markers() -> None:
    assert is_pagination_marker(" Next ")
    assert is_pagination_marker("PAGE")
    assert not is_pagination_marker("nextpage")
    assert is_minigame_marker(" Minigame:qte")
    assert not is_minigame_marker("stat:hp:1")
