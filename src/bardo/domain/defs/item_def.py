"""Item definition structures."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class ItemDef:
    """Inventory item definition."""

    id: str
    name: str
    description: str = ""
    category: str = "items"
    stackable: bool = False
    icon: str = ""
