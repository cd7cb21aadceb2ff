"""Observable narrative state published after every continuation step."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from bardo.core.types import HistoryKind
from bardo.domain.interpreter import Choice
from bardo.domain.tags import InputRequestTag


@dataclass(slots=True)
class HistoryEntry:
    """One line of the narrative log."""

    text: str
    timestamp: int
    tags: List[str] = field(default_factory=list)
    kind: HistoryKind = "text"


@dataclass
class NarrativeState:
    """What the front-end renders: text, choices and end-of-story flags."""

    text: str = ""
    choices: List[Choice] = field(default_factory=list)
    can_continue: bool = False
    is_ended: bool = False
    history: List[HistoryEntry] = field(default_factory=list)
    pending_input: InputRequestTag | None = None

    def clear(self) -> None:
        self.text = ""
        self.choices = []
        self.can_continue = False
        self.is_ended = False
        self.history = []
        self.pending_input = None
