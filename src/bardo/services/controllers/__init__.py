"""UI-agnostic controllers for game flow orchestration."""
from __future__ import annotations

from .minigame_controller import CommitCallback, MinigameController

__all__ = [
    "CommitCallback",
    "MinigameController",
]
