"""Slot-based inventory with stackable items and a capacity limit."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence

from bardo.domain.defs import DEFAULT_MAX_SLOTS, GameConfigDef, ItemDef

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class InventorySlot:
    """One occupied inventory slot."""

    item_id: str
    qty: int = 1


class InventoryStore:
    """Ordered inventory slots bounded by ``max_slots``."""

    def __init__(self, items: Mapping[str, ItemDef] | None = None, max_slots: int = DEFAULT_MAX_SLOTS) -> None:
        self._items: Dict[str, ItemDef] = dict(items or {})
        self._max_slots = max_slots
        self._slots: List[InventorySlot] = []

    @classmethod
    def from_config(cls, config: GameConfigDef) -> "InventoryStore":
        return cls(config.items, max_slots=config.max_slots)

    @property
    def max_slots(self) -> int:
        return self._max_slots

    @property
    def slots(self) -> List[InventorySlot]:
        return [InventorySlot(item_id=slot.item_id, qty=slot.qty) for slot in self._slots]

    def item_def(self, item_id: str) -> ItemDef | None:
        return self._items.get(item_id)

    def add(self, item_id: str, qty: int = 1) -> bool:
        """Add ``qty`` of an item. Returns False when the item could not be stored."""
        item_def = self._items.get(item_id)
        if item_def is None:
            logger.warning("Unknown item '%s'; add ignored.", item_id)
            return False
        if qty <= 0:
            logger.warning("Refusing to add non-positive quantity %s of '%s'.", qty, item_id)
            return False
        if item_def.stackable:
            existing = self._find(item_id)
            if existing is not None:
                existing.qty += qty
                return True
        if len(self._slots) >= self._max_slots:
            logger.warning("Inventory full (%s slots); '%s' was dropped.", self._max_slots, item_id)
            return False
        self._slots.append(InventorySlot(item_id=item_id, qty=qty))
        return True

    def remove(self, item_id: str, qty: int | None = None) -> bool:
        """Remove a whole slot (``qty=None``) or decrement it."""
        existing = self._find(item_id)
        if existing is None:
            logger.warning("Item '%s' is not in the inventory; remove ignored.", item_id)
            return False
        if qty is None or existing.qty <= qty:
            self._slots.remove(existing)
        else:
            existing.qty -= qty
        return True

    def clear(self) -> None:
        self._slots = []

    def has(self, item_id: str) -> bool:
        return any(slot.item_id == item_id and slot.qty > 0 for slot in self._slots)

    def count(self, item_id: str) -> int:
        return sum(slot.qty for slot in self._slots if slot.item_id == item_id)

    def items_by_category(self, category: str) -> List[InventorySlot]:
        matches: List[InventorySlot] = []
        for slot in self._slots:
            item_def = self._items.get(slot.item_id)
            if item_def is not None and item_def.category == category:
                matches.append(InventorySlot(item_id=slot.item_id, qty=slot.qty))
        return matches

    def export(self) -> List[InventorySlot]:
        return self.slots

    def load(self, saved: Sequence[InventorySlot]) -> None:
        if not isinstance(saved, (list, tuple)):
            logger.warning("Ignoring inventory snapshot of type %s.", type(saved).__name__)
            return
        self._slots = [InventorySlot(item_id=slot.item_id, qty=slot.qty) for slot in saved]

    def _find(self, item_id: str) -> InventorySlot | None:
        for slot in self._slots:
            if slot.item_id == item_id:
                return slot
        return None
