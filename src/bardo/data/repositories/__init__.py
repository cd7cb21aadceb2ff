"""Repository exports."""

from .game_config_repo import GameConfigRepository
from .story_repo import StoryRepository

__all__ = [
    "GameConfigRepository",
    "StoryRepository",
]
