"""Boundary contract for the narrative interpreter."""
from __future__ import annotations

from dataclasses import dataclass
from typing import MutableMapping, Protocol, Sequence


@dataclass(frozen=True, slots=True)
class Choice:
    """A selectable option offered by the interpreter."""

    index: int
    text: str


class StoryInterpreter(Protocol):
    """Story-advancement engine consumed by the narrative engine as a black box."""

    @property
    def can_advance(self) -> bool:
        ...

    def advance(self) -> str:
        ...

    @property
    def current_tags(self) -> Sequence[str]:
        ...

    @property
    def current_choices(self) -> Sequence[Choice]:
        ...

    def choose_choice(self, index: int) -> None:
        ...

    @property
    def variables(self) -> MutableMapping[str, object]:
        ...

    def serialize_state(self) -> str:
        ...

    def restore_state(self, blob: str) -> None:
        ...
