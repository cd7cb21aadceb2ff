"""Story graph definition structures used by the graph interpreter."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(slots=True)
class StoryLineDef:
    """One unit of output: a paragraph plus the tags emitted with it."""

    text: str
    tags: List[str] = field(default_factory=list)
    assignments: Dict[str, object] = field(default_factory=dict)


@dataclass(slots=True)
class StoryChoiceDef:
    """Represents a selectable choice on a story node."""

    label: str
    next_node_id: str


@dataclass(slots=True)
class StoryBranchDef:
    """Variable-driven divert evaluated when a node runs out of lines."""

    variable: str
    cases: Dict[str, str] = field(default_factory=dict)
    default_node_id: str | None = None


@dataclass(slots=True)
class StoryNodeDef:
    """Fully parsed story node."""

    id: str
    lines: List[StoryLineDef] = field(default_factory=list)
    choices: List[StoryChoiceDef] = field(default_factory=list)
    next_node_id: str | None = None
    branch: StoryBranchDef | None = None


@dataclass(slots=True)
class StoryDef:
    """A complete story graph."""

    id: str
    start_node_id: str
    nodes: Dict[str, StoryNodeDef] = field(default_factory=dict)
    variables: Dict[str, object] = field(default_factory=dict)
