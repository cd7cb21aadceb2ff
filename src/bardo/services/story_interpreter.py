"""Story interpreter over JSON story graphs."""
from __future__ import annotations

import json
import logging
from typing import Dict, List, MutableMapping, Sequence, Tuple

from bardo.domain.defs import StoryDef, StoryNodeDef
from bardo.domain.interpreter import Choice
from bardo.domain.tags import format_variable, interpolate_variables
from bardo.services.errors import SaveLoadError

logger = logging.getLogger(__name__)

_Position = Tuple[str, int]


class GraphStoryInterpreter:
    """
    Walks a ``StoryDef`` one line at a time.

    When a node runs out of lines and offers no choices, its ``branch`` is
    evaluated and then its ``next`` link. Diverts are resolved only when the
    story is asked to move, so variables written between steps (for example a
    minigame result) decide which path is taken.
    """

    def __init__(self, story: StoryDef) -> None:
        self._story = story
        self._variables: Dict[str, object] = dict(story.variables)
        self._node_id = story.start_node_id
        self._line_index = 0
        self._current_tags: List[str] = []

    @property
    def story_id(self) -> str:
        return self._story.id

    @property
    def current_node_id(self) -> str:
        return self._node_id

    @property
    def can_advance(self) -> bool:
        node_id, line_index = self._resolve()
        return line_index < len(self._story.nodes[node_id].lines)

    def advance(self) -> str:
        """Emit the next line, applying its ``set`` assignments first."""
        node_id, line_index = self._resolve()
        node = self._story.nodes[node_id]
        if line_index >= len(node.lines):
            logger.warning("advance called with nothing left to emit at node '%s'.", node_id)
            self._current_tags = []
            return ""
        line = node.lines[line_index]
        self._node_id = node_id
        self._line_index = line_index + 1
        self._variables.update(line.assignments)
        self._current_tags = list(line.tags)
        return interpolate_variables(line.text, self._variables) + "\n"

    @property
    def current_tags(self) -> Sequence[str]:
        return list(self._current_tags)

    @property
    def current_choices(self) -> Sequence[Choice]:
        node_id, line_index = self._resolve()
        node = self._story.nodes[node_id]
        if line_index < len(node.lines):
            return []
        return [
            Choice(index=index, text=interpolate_variables(choice.label, self._variables))
            for index, choice in enumerate(node.choices)
        ]

    def choose_choice(self, index: int) -> None:
        node_id, line_index = self._resolve()
        node = self._story.nodes[node_id]
        if line_index < len(node.lines) or not node.choices:
            raise ValueError(f"Story node '{node_id}' has no choices to select.")
        try:
            selected = node.choices[index]
        except IndexError as exc:
            raise IndexError(f"Choice index {index} is invalid for node '{node_id}'.") from exc
        self._node_id = selected.next_node_id
        self._line_index = 0
        self._current_tags = []

    @property
    def variables(self) -> MutableMapping[str, object]:
        return self._variables

    def serialize_state(self) -> str:
        return json.dumps(
            {
                "story": self._story.id,
                "node": self._node_id,
                "line": self._line_index,
                "variables": self._variables,
                "tags": self._current_tags,
            },
            ensure_ascii=False,
        )

    def restore_state(self, blob: str) -> None:
        try:
            payload = json.loads(blob)
        except (TypeError, json.JSONDecodeError) as exc:
            raise SaveLoadError("Interpreter state is not valid JSON.") from exc
        if not isinstance(payload, dict):
            raise SaveLoadError("Interpreter state must be a JSON object.")
        node_id = payload.get("node")
        line_index = payload.get("line")
        variables = payload.get("variables")
        tags = payload.get("tags", [])
        if not isinstance(node_id, str) or node_id not in self._story.nodes:
            raise SaveLoadError(f"Interpreter state references unknown node '{node_id}'.")
        if not isinstance(line_index, int) or isinstance(line_index, bool) or line_index < 0:
            raise SaveLoadError("Interpreter state has an invalid line index.")
        if not isinstance(variables, dict):
            raise SaveLoadError("Interpreter state variables must be an object.")
        if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
            raise SaveLoadError("Interpreter state tags must be a list of strings.")
        self._node_id = node_id
        self._line_index = min(line_index, len(self._story.nodes[node_id].lines))
        self._variables = dict(variables)
        self._current_tags = list(tags)

    def _resolve(self) -> _Position:
        """Follow diverts from the current position without committing them."""
        node_id, line_index = self._node_id, self._line_index
        visited: set[str] = set()
        while True:
            node = self._story.nodes[node_id]
            if line_index < len(node.lines) or node.choices:
                return node_id, line_index
            target = self._divert_target(node)
            if target is None:
                return node_id, line_index
            if target in visited:
                logger.warning("Divert loop without output at node '%s'; stopping.", target)
                return node_id, line_index
            visited.add(target)
            node_id, line_index = target, 0

    def _divert_target(self, node: StoryNodeDef) -> str | None:
        if node.branch is not None:
            value = self._variables.get(node.branch.variable)
            key = format_variable(value) if value is not None else ""
            target = node.branch.cases.get(key, node.branch.default_node_id)
            if target is not None:
                return target
        return node.next_node_id
