"""Save record models and their persisted JSON shape."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from bardo.domain.inventory import InventorySlot


@dataclass(slots=True)
class SystemsSnapshot:
    """Stat values and inventory slots captured together with the narrative."""

    stats: Dict[str, float] = field(default_factory=dict)
    inventory: List[InventorySlot] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "stats": dict(self.stats),
            "inventory": [{"id": slot.item_id, "qty": slot.qty} for slot in self.inventory],
        }

    @classmethod
    def from_payload(cls, payload: object) -> "SystemsSnapshot":
        if not isinstance(payload, Mapping):
            return cls()
        raw_stats = payload.get("stats")
        stats = {
            str(key): value
            for key, value in (raw_stats.items() if isinstance(raw_stats, Mapping) else ())
            if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)
        }
        inventory: List[InventorySlot] = []
        raw_inventory = payload.get("inventory")
        for entry in raw_inventory if isinstance(raw_inventory, list) else ():
            if not isinstance(entry, Mapping):
                continue
            item_id = entry.get("id")
            qty = entry.get("qty", 1)
            if isinstance(item_id, str) and isinstance(qty, int) and not isinstance(qty, bool):
                inventory.append(InventorySlot(item_id=item_id, qty=qty))
        return cls(stats=stats, inventory=inventory)


@dataclass(slots=True)
class SaveData:
    """The three facets of a save, always read and written together."""

    interpreter_blob: str
    text: str
    systems_snapshot: SystemsSnapshot


@dataclass(slots=True)
class SaveRecord:
    """A persisted save slot (manual or autosave)."""

    id: str
    story_id: str
    name: str
    timestamp: int
    interpreter_blob: str
    text: str
    systems_snapshot: SystemsSnapshot
    is_autosave: bool = False

    @property
    def data(self) -> SaveData:
        return SaveData(
            interpreter_blob=self.interpreter_blob,
            text=self.text,
            systems_snapshot=self.systems_snapshot,
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "storyId": self.story_id,
            "name": self.name,
            "timestamp": self.timestamp,
            "state": self.interpreter_blob,
            "text": self.text,
            "gameSystems": self.systems_snapshot.to_payload(),
            "isAutosave": self.is_autosave,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "SaveRecord | None":
        record_id = payload.get("id")
        story_id = payload.get("storyId")
        if not isinstance(record_id, str) or not isinstance(story_id, str):
            return None
        timestamp = payload.get("timestamp")
        if not isinstance(timestamp, (int, float)) or isinstance(timestamp, bool) or not math.isfinite(timestamp):
            timestamp = 0
        name = payload.get("name")
        text = payload.get("text")
        state = payload.get("state")
        return cls(
            id=record_id,
            story_id=story_id,
            name=name if isinstance(name, str) else record_id,
            timestamp=int(timestamp),
            interpreter_blob=state if isinstance(state, str) else "",
            text=text if isinstance(text, str) else "",
            systems_snapshot=SystemsSnapshot.from_payload(payload.get("gameSystems")),
            is_autosave=bool(payload.get("isAutosave", False)),
        )
