"""Bounded numeric stats with clamping."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence

from bardo.domain.defs import GameConfigDef, StatDef, ZeroStatAction

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StatInfo:
    """Display-ready view of a single stat."""

    definition: StatDef
    current: float
    percentage: int | None


@dataclass(slots=True)
class ZeroStatTrigger:
    """A bar stat that reached zero together with its configured action."""

    stat_id: str
    action: str
    message: str


class StatStore:
    """Current stat values, mutated only through clamp-respecting operations."""

    def __init__(
        self,
        definitions: Sequence[StatDef] = (),
        *,
        on_zero: Mapping[str, ZeroStatAction] | None = None,
    ) -> None:
        self._definitions: Dict[str, StatDef] = {definition.id: definition for definition in definitions}
        self._on_zero: Dict[str, ZeroStatAction] = dict(on_zero or {})
        self._values: Dict[str, float] = {}
        self.reset()

    @classmethod
    def from_config(cls, config: GameConfigDef) -> "StatStore":
        if not config.stats_enabled:
            return cls()
        return cls(config.stats, on_zero=config.on_zero)

    @property
    def enabled(self) -> bool:
        return bool(self._definitions)

    @property
    def definitions(self) -> List[StatDef]:
        return list(self._definitions.values())

    @property
    def values(self) -> Dict[str, float]:
        return dict(self._values)

    def get(self, stat_id: str) -> float | None:
        """Return the current value, falling back to the definition's initial value."""
        definition = self._definitions.get(stat_id)
        if definition is None:
            return self._values.get(stat_id)
        return self._values.get(stat_id, definition.initial)

    def modify(self, stat_id: str, delta: float) -> bool:
        """Add ``delta`` to the stat and clamp it. Returns False for unknown stats."""
        definition = self._definitions.get(stat_id)
        if definition is None:
            logger.warning("Stat '%s' not found in config; modify ignored.", stat_id)
            return False
        current = self._values.get(stat_id, definition.initial)
        self._values[stat_id] = definition.clamp(current + delta)
        return True

    def set(self, stat_id: str, value: float) -> bool:
        """Assign an absolute value and clamp it. Returns False for unknown stats."""
        definition = self._definitions.get(stat_id)
        if definition is None:
            logger.warning("Stat '%s' not found in config; set ignored.", stat_id)
            return False
        self._values[stat_id] = definition.clamp(value)
        return True

    def info(self, stat_id: str) -> StatInfo | None:
        definition = self._definitions.get(stat_id)
        if definition is None:
            return None
        current = self._values.get(stat_id, definition.initial)
        percentage = round(current / definition.max * 100) if definition.max else None
        return StatInfo(definition=definition, current=current, percentage=percentage)

    def all_info(self) -> List[StatInfo]:
        return [info for info in (self.info(stat_id) for stat_id in self._definitions) if info]

    def zero_triggers(self) -> List[ZeroStatTrigger]:
        """Return configured actions for bar stats that have hit zero."""
        triggers: List[ZeroStatTrigger] = []
        for definition in self._definitions.values():
            if definition.display_kind != "bar":
                continue
            if self._values.get(definition.id, definition.initial) > 0:
                continue
            action = self._on_zero.get(definition.id)
            if action is not None:
                triggers.append(
                    ZeroStatTrigger(stat_id=definition.id, action=action.action, message=action.message)
                )
        return triggers

    def reset(self) -> None:
        self._values = {stat_id: definition.initial for stat_id, definition in self._definitions.items()}

    def export(self) -> Dict[str, float]:
        return dict(self._values)

    def load(self, saved: Mapping[str, float]) -> None:
        if not isinstance(saved, Mapping):
            logger.warning("Ignoring stat snapshot of type %s.", type(saved).__name__)
            return
        self._values = {
            str(stat_id): value
            for stat_id, value in saved.items()
            if isinstance(value, (int, float)) and not isinstance(value, bool)
        }
