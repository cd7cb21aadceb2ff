"""Shared type aliases for the core and domain layers."""
from typing import Literal

MinigameStatus = Literal["idle", "pending", "playing"]
DisplayKind = Literal["bar", "value"]
HistoryKind = Literal["text", "choice"]

__all__ = ["DisplayKind", "HistoryKind", "MinigameStatus"]
