"""Repository for story graph definitions."""
from __future__ import annotations

from typing import Dict, List

from bardo.data.errors import DataReferenceError, DataValidationError
from bardo.data.repositories.base import StoryFileRepository
from bardo.domain.defs import StoryBranchDef, StoryChoiceDef, StoryDef, StoryLineDef, StoryNodeDef

_SCALAR_TYPES = (str, int, float, bool)


class StoryRepository(StoryFileRepository[StoryDef]):
    """Loads ``<story_id>.story.json`` graphs and validates their structure."""

    def __init__(self, base_path=None) -> None:
        super().__init__(".story.json", base_path)

    def _build(self, story_id: str, raw: dict[str, object]) -> StoryDef:
        return self.parse(story_id, raw)

    def parse(self, story_id: str, raw: dict[str, object]) -> StoryDef:
        """Validate an in-memory story payload."""
        start = self._require_str(raw.get("start"), f"story '{story_id}' start")
        variables = self._parse_variables(raw.get("variables"), story_id)
        raw_nodes = self._require_mapping(raw.get("nodes"), f"story '{story_id}' nodes")
        nodes: Dict[str, StoryNodeDef] = {}
        for node_id, node_payload in raw_nodes.items():
            node_data = self._require_mapping(node_payload, f"story node '{node_id}'")
            nodes[node_id] = StoryNodeDef(
                id=node_id,
                lines=self._parse_lines(node_data.get("lines"), node_id),
                choices=self._parse_choices(node_data.get("choices"), node_id),
                next_node_id=self._parse_optional_str(node_data.get("next"), f"story node '{node_id}' next"),
                branch=self._parse_branch(node_data.get("branch"), node_id),
            )
        story = StoryDef(id=story_id, start_node_id=start, nodes=nodes, variables=variables)
        self._validate_references(story)
        return story

    def _parse_variables(self, raw_variables: object, story_id: str) -> Dict[str, object]:
        if raw_variables is None:
            return {}
        variables = self._require_mapping(raw_variables, f"story '{story_id}' variables")
        for name, value in variables.items():
            if not isinstance(value, _SCALAR_TYPES):
                raise DataValidationError(f"story '{story_id}' variable '{name}' must be a scalar.")
        return dict(variables)

    def _parse_lines(self, raw_lines: object, node_id: str) -> List[StoryLineDef]:
        if raw_lines is None:
            return []
        lines: List[StoryLineDef] = []
        for index, entry in enumerate(self._require_list(raw_lines, f"story node '{node_id}' lines")):
            context = f"story node '{node_id}' lines[{index}]"
            if isinstance(entry, str):
                lines.append(StoryLineDef(text=entry))
                continue
            line_data = self._require_mapping(entry, context)
            text = line_data.get("text", "")
            tags = [
                self._require_str(tag, f"{context} tags")
                for tag in self._require_list(line_data.get("tags", []), f"{context} tags")
            ]
            assignments = self._require_mapping(line_data.get("set", {}), f"{context} set")
            lines.append(
                StoryLineDef(
                    text=self._require_str(text, f"{context} text"),
                    tags=tags,
                    assignments=dict(assignments),
                )
            )
        return lines

    def _parse_choices(self, raw_choices: object, node_id: str) -> List[StoryChoiceDef]:
        if raw_choices is None:
            return []
        choices: List[StoryChoiceDef] = []
        for index, entry in enumerate(self._require_list(raw_choices, f"story node '{node_id}' choices")):
            choice_ctx = f"story node '{node_id}' choices[{index}]"
            choice_mapping = self._require_mapping(entry, choice_ctx)
            choices.append(
                StoryChoiceDef(
                    label=self._require_str(choice_mapping.get("label"), f"{choice_ctx} label"),
                    next_node_id=self._require_str(choice_mapping.get("next"), f"{choice_ctx} next"),
                )
            )
        return choices

    def _parse_branch(self, raw_branch: object, node_id: str) -> StoryBranchDef | None:
        if raw_branch is None:
            return None
        context = f"story node '{node_id}' branch"
        branch_data = self._require_mapping(raw_branch, context)
        cases = self._require_mapping(branch_data.get("cases", {}), f"{context} cases")
        return StoryBranchDef(
            variable=self._require_str(branch_data.get("on"), f"{context} on"),
            cases={str(key): self._require_str(target, f"{context} cases") for key, target in cases.items()},
            default_node_id=self._parse_optional_str(branch_data.get("default"), f"{context} default"),
        )

    def _parse_optional_str(self, value: object, context: str) -> str | None:
        if value is None:
            return None
        return self._require_str(value, context)

    @staticmethod
    def _validate_references(story: StoryDef) -> None:
        def _check(target: str | None, context: str) -> None:
            if target is not None and target not in story.nodes:
                raise DataReferenceError(f"{context} references unknown node '{target}'.")

        _check(story.start_node_id, f"story '{story.id}' start")
        for node in story.nodes.values():
            _check(node.next_node_id, f"story node '{node.id}' next")
            for choice in node.choices:
                _check(choice.next_node_id, f"story node '{node.id}' choice '{choice.label}'")
            if node.branch is not None:
                for target in node.branch.cases.values():
                    _check(target, f"story node '{node.id}' branch")
                _check(node.branch.default_node_id, f"story node '{node.id}' branch default")
