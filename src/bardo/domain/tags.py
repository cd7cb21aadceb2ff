"""Tag grammar: one parsing step that turns a raw tag into a tag kind.

Narrative content is authored against this grammar, so the delimiters and
defaults here are a compatibility surface:

* ``minigame:<type>:<arg1>:<arg2>`` (legacy positional form)
* ``minigame: type=<t>, key=value, ...`` (key/value form, ``{var}`` interpolation)
* ``achievement:unlock:<id>``
* ``stat:<id>:<value>`` where a leading ``+``/``-`` marks a delta
* ``inv:add:<id>[:qty]``, ``inv:remove:<id>[:qty]``, ``inv:clear``
* ``input:<variable>[:<placeholder>]``

Anything else is an effect tag for the visual/audio layer.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Literal, Mapping, Union

from bardo.domain.minigame import MinigameConfig, ParamValue

logger = logging.getLogger(__name__)

MINIGAME_PREFIX = "minigame:"
ACHIEVEMENT_UNLOCK_PREFIX = "achievement:unlock:"
STAT_PREFIX = "stat:"
INVENTORY_PREFIX = "inv:"
INPUT_PREFIX = "input:"
PAGINATION_MARKERS = frozenset({"next", "page"})
DEFAULT_INPUT_PLACEHOLDER = "Enter a name..."

_VARIABLE_PATTERN = re.compile(r"\{([^}]+)\}")
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

InventoryAction = Literal["add", "remove", "clear"]


@dataclass(frozen=True, slots=True)
class MinigameTag:
    raw: str
    config: MinigameConfig


@dataclass(frozen=True, slots=True)
class MalformedMinigameTag:
    raw: str
    reason: str


@dataclass(frozen=True, slots=True)
class AchievementUnlockTag:
    raw: str
    achievement_id: str


@dataclass(frozen=True, slots=True)
class StatTag:
    raw: str
    stat_id: str
    value: int
    is_delta: bool


@dataclass(frozen=True, slots=True)
class InventoryTag:
    raw: str
    action: InventoryAction
    item_id: str | None = None
    qty: int | None = None


@dataclass(frozen=True, slots=True)
class InputRequestTag:
    raw: str
    variable: str
    placeholder: str = DEFAULT_INPUT_PLACEHOLDER


@dataclass(frozen=True, slots=True)
class EffectTag:
    raw: str


ParsedTag = Union[
    MinigameTag,
    MalformedMinigameTag,
    AchievementUnlockTag,
    StatTag,
    InventoryTag,
    InputRequestTag,
    EffectTag,
]


def parse_tag(tag: str, variables: Mapping[str, object] | None = None) -> ParsedTag | None:
    """Classify a raw tag. Returns None for blank tags."""
    trimmed = tag.strip()
    if not trimmed:
        return None
    lowered = trimmed.lower()

    if lowered.startswith(MINIGAME_PREFIX):
        config = parse_minigame_tag(trimmed, variables)
        if config is None:
            return MalformedMinigameTag(raw=trimmed, reason="minigame tag has no type")
        return MinigameTag(raw=trimmed, config=config)

    if lowered.startswith(ACHIEVEMENT_UNLOCK_PREFIX):
        return AchievementUnlockTag(raw=trimmed, achievement_id=trimmed.split(":")[2])

    if trimmed.startswith(STAT_PREFIX):
        stat_tag = _parse_stat_tag(trimmed)
        if stat_tag is not None:
            return stat_tag

    if trimmed.startswith(INVENTORY_PREFIX):
        inventory_tag = _parse_inventory_tag(trimmed)
        if inventory_tag is not None:
            return inventory_tag

    if lowered.startswith(INPUT_PREFIX):
        parts = trimmed.split(":")
        variable = parts[1].strip()
        if variable:
            placeholder = parts[2] if len(parts) > 2 and parts[2] else DEFAULT_INPUT_PLACEHOLDER
            return InputRequestTag(raw=trimmed, variable=variable, placeholder=placeholder)
        logger.warning("Input tag '%s' names no variable.", trimmed)

    return EffectTag(raw=trimmed)


def is_pagination_marker(tag: str) -> bool:
    return tag.strip().lower() in PAGINATION_MARKERS


def is_minigame_marker(tag: str) -> bool:
    return tag.strip().lower().startswith(MINIGAME_PREFIX)


def parse_minigame_tag(tag: str, variables: Mapping[str, object] | None = None) -> MinigameConfig | None:
    """Parse either minigame grammar. Pure for a given tag and variable snapshot."""
    if not tag or not tag.lower().startswith(MINIGAME_PREFIX):
        return None
    content = tag[len(MINIGAME_PREFIX):].strip()
    if "=" in content:
        return _parse_key_value_format(content, variables)
    return _parse_legacy_format(content)


def interpolate_variables(value: str, variables: Mapping[str, object] | None) -> str:
    """Replace ``{name}`` with the variable's value. Unknown names stay literal."""
    if variables is None:
        return value

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1).strip()
        resolved = variables.get(name)
        if resolved is None:
            return match.group(0)
        return format_variable(resolved)

    return _VARIABLE_PATTERN.sub(_replace, value)


def format_variable(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_float_prefix(value: str) -> float | None:
    """Parse the leading number of ``value`` the way JavaScript's parseFloat does."""
    match = _FLOAT_PREFIX.match(value)
    if not match:
        return None
    return float(match.group(1))


def parse_int_prefix(value: str) -> int | None:
    match = _INT_PREFIX.match(value)
    if not match:
        return None
    return int(match.group(1))


def _parse_key_value_format(content: str, variables: Mapping[str, object] | None) -> MinigameConfig | None:
    game_type: str | None = None
    params: Dict[str, ParamValue] = {}
    auto_start = True
    for pair in (piece.strip() for piece in content.split(",")):
        if not pair:
            continue
        key, separator, raw_value = pair.partition("=")
        if not separator:
            logger.warning("Skipping minigame parameter without '=': '%s'.", pair)
            continue
        key = key.strip()
        value = interpolate_variables(raw_value.strip(), variables)
        if key == "type":
            game_type = value.lower()
        elif key == "autostart":
            auto_start = value.lower() == "true"
        elif key in ("onFail", "onSuccess"):
            params[key] = value
        elif key == "consume":
            params["consumeItem"] = value
        else:
            number = parse_float_prefix(value)
            params[key] = value if number is None else number
    if not game_type:
        return None
    return MinigameConfig(type=game_type, params=params, auto_start=auto_start)


def _parse_legacy_format(content: str) -> MinigameConfig | None:
    parts = [part.strip() for part in content.split(":")]
    game_type = parts[0].lower()
    if not game_type:
        return None
    params: Dict[str, ParamValue] = {}
    if game_type == "qte":
        params["key"] = _part(parts, 1) or "SPACE"
        params["timeout"] = parse_float_prefix(_part(parts, 2)) or 2.0
    elif game_type == "lockpick":
        params["zoneSize"] = parse_float_prefix(_part(parts, 1)) or 0.15
        params["speed"] = parse_float_prefix(_part(parts, 2)) or 1.5
    return MinigameConfig(type=game_type, params=params, auto_start=True)


def _parse_stat_tag(tag: str) -> StatTag | None:
    parts = tag.split(":")
    if len(parts) < 3:
        return None
    value_text = parts[2]
    value = parse_int_prefix(value_text)
    if value is None:
        return None
    return StatTag(raw=tag, stat_id=parts[1], value=value, is_delta=value_text.startswith(("+", "-")))


def _parse_inventory_tag(tag: str) -> InventoryTag | None:
    parts = tag.split(":")
    action = parts[1]
    if action == "clear":
        return InventoryTag(raw=tag, action="clear")
    if len(parts) < 3:
        return None
    item_id = parts[2]
    qty = parse_int_prefix(parts[3]) if _part(parts, 3) else 1
    if action == "add":
        return InventoryTag(raw=tag, action="add", item_id=item_id, qty=1 if qty is None else qty)
    if action == "remove":
        return InventoryTag(raw=tag, action="remove", item_id=item_id, qty=qty)
    logger.warning("Unknown inventory action '%s' in tag '%s'.", action, tag)
    return None


def _part(parts: list[str], index: int) -> str:
    return parts[index] if index < len(parts) else ""
