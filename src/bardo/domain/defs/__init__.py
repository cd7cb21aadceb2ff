"""Domain definition exports."""

from .achievement_def import AchievementDef
from .game_config_def import DEFAULT_MAX_SAVES, DEFAULT_MAX_SLOTS, GameConfigDef
from .item_def import ItemDef
from .stat_def import StatDef, ZeroStatAction
from .story_def import StoryBranchDef, StoryChoiceDef, StoryDef, StoryLineDef, StoryNodeDef

__all__ = [
    "AchievementDef",
    "DEFAULT_MAX_SAVES",
    "DEFAULT_MAX_SLOTS",
    "GameConfigDef",
    "ItemDef",
    "StatDef",
    "StoryBranchDef",
    "StoryChoiceDef",
    "StoryDef",
    "StoryLineDef",
    "StoryNodeDef",
    "ZeroStatAction",
]
