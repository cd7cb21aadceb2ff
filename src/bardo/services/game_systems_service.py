"""Stat and inventory tag handling plus the systems snapshot."""
from __future__ import annotations

import logging

from bardo.domain.defs import GameConfigDef
from bardo.domain.inventory import InventoryStore
from bardo.domain.saves import SystemsSnapshot
from bardo.domain.stats import StatStore
from bardo.domain.tags import InventoryTag, StatTag, parse_tag

logger = logging.getLogger(__name__)


class GameSystemsService:
    """Owns the stat and inventory stores for one story session."""

    def __init__(self, stats: StatStore | None = None, inventory: InventoryStore | None = None) -> None:
        self.stats = stats or StatStore()
        self.inventory = inventory or InventoryStore()

    @classmethod
    def from_config(cls, config: GameConfigDef) -> "GameSystemsService":
        return cls(StatStore.from_config(config), InventoryStore.from_config(config))

    def process_tag(self, tag: str | StatTag | InventoryTag) -> bool:
        """Apply a ``stat:`` or ``inv:`` tag.

        Returns True whenever the tag matched the stat or inventory grammar, even
        if the store rejected the change (the store logs why). Returns False for
        anything else so the caller can fall through.
        """
        parsed = parse_tag(tag) if isinstance(tag, str) else tag
        if isinstance(parsed, StatTag):
            self._apply_stat(parsed)
            return True
        if isinstance(parsed, InventoryTag):
            self._apply_inventory(parsed)
            return True
        return False

    def _apply_stat(self, tag: StatTag) -> bool:
        if tag.is_delta:
            return self.stats.modify(tag.stat_id, tag.value)
        return self.stats.set(tag.stat_id, tag.value)

    def _apply_inventory(self, tag: InventoryTag) -> bool:
        if tag.action == "clear":
            self.inventory.clear()
            return True
        if tag.item_id is None:
            return False
        if tag.action == "add":
            return self.inventory.add(tag.item_id, tag.qty if tag.qty is not None else 1)
        return self.inventory.remove(tag.item_id, tag.qty)

    def export_snapshot(self) -> SystemsSnapshot:
        return SystemsSnapshot(stats=self.stats.export(), inventory=self.inventory.export())

    def load_snapshot(self, snapshot: SystemsSnapshot | None) -> None:
        """Restore both stores. ``None`` leaves them untouched."""
        if snapshot is None:
            return
        self.stats.load(snapshot.stats)
        self.inventory.load(snapshot.inventory)
        logger.debug(
            "Restored %s stat values and %s inventory slots.", len(snapshot.stats), len(snapshot.inventory)
        )

    def reset(self) -> None:
        self.stats.reset()
        self.inventory.clear()
