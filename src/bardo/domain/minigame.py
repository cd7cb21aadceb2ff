"""Minigame configuration produced from narrative tags."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

ParamValue = str | float


@dataclass(slots=True)
class MinigameConfig:
    """A queued challenge: its type, parameters and whether it starts by itself."""

    type: str
    params: Dict[str, ParamValue] = field(default_factory=dict)
    auto_start: bool = True

    @property
    def on_success(self) -> str | None:
        value = self.params.get("onSuccess")
        return value if isinstance(value, str) and value else None

    @property
    def on_fail(self) -> str | None:
        value = self.params.get("onFail")
        return value if isinstance(value, str) and value else None

    @property
    def consume_item(self) -> str | None:
        value = self.params.get("consumeItem")
        return value if isinstance(value, str) and value else None

    def consequence_for(self, result: int) -> str | None:
        """Return the tag to dispatch for a committed result, if any."""
        return self.on_success if result == 1 else self.on_fail

    def number(self, key: str, default: float) -> float:
        value = self.params.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value:
            return float(value)
        return default

    def text(self, key: str, default: str) -> str:
        value = self.params.get(key)
        if value is None or value == "":
            return default
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)
