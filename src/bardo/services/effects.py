"""Sink for tags that no gameplay subsystem claims (visual/audio effects)."""
from __future__ import annotations

import logging
from typing import List, Protocol

logger = logging.getLogger(__name__)


class EffectsSink(Protocol):
    def trigger(self, tag: str) -> None:
        ...

    def clear(self) -> None:
        ...


class RecordingEffects:
    """Keeps effect tags since the last clear so a front-end can render them."""

    def __init__(self) -> None:
        self._tags: List[str] = []

    @property
    def tags(self) -> List[str]:
        return list(self._tags)

    def trigger(self, tag: str) -> None:
        logger.debug("Effect tag: %s", tag)
        self._tags.append(tag)

    def clear(self) -> None:
        self._tags = []

    def drain(self) -> List[str]:
        """Return the recorded tags and forget them."""
        tags, self._tags = self._tags, []
        return tags
