"""Service layer exports."""

from .achievement_service import AchievementProgress, AchievementService, AchievementView
from .controllers import MinigameController
from .effects import EffectsSink, RecordingEffects
from .errors import SaveLoadError, StorySessionError
from .game_systems_service import GameSystemsService
from .narrative_engine import NarrativeEngine
from .save_service import SaveService
from .story_interpreter import GraphStoryInterpreter
from .tag_dispatcher import TagDispatcher

__all__ = [
    "AchievementProgress",
    "AchievementService",
    "AchievementView",
    "EffectsSink",
    "GameSystemsService",
    "GraphStoryInterpreter",
    "MinigameController",
    "NarrativeEngine",
    "RecordingEffects",
    "SaveLoadError",
    "SaveService",
    "StorySessionError",
    "TagDispatcher",
]
