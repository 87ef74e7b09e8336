"""Achievement models for gamification"""
from enum import Enum
from pydantic import BaseModel, ConfigDict
from datetime import datetime


class AchievementCategory(str, Enum):
    """Achievement categories"""
    ANALYSIS = "analysis"
    IMPROVEMENT = "improvement"
    ENGAGEMENT = "engagement"
    ROUTINE = "routine"
    SOCIAL = "social"
    COMMUNITY = "community"
    GOALS = "goals"


class AchievementDefinition(BaseModel):
    """Static catalog entry"""
    model_config = ConfigDict(frozen=True)

    key: str
    name: str
    emoji: str
    category: AchievementCategory
    description: str


class UserAchievement(BaseModel):
    """User's unlocked achievement (one row per user and key)"""
    user_id: str
    achievement_key: str
    unlocked_at: datetime
    reward_claimed: bool = False


class UnlockResult(BaseModel):
    """Outcome of a single unlock attempt"""
    unlocked: bool
    already_unlocked: bool


class UnlockedAchievement(BaseModel):
    """Newly unlocked achievement, shaped for celebration UI"""
    key: str
    name: str
    emoji: str
    description: str

    @classmethod
    def from_definition(cls, definition: AchievementDefinition) -> "UnlockedAchievement":
        return cls(
            key=definition.key,
            name=definition.name,
            emoji=definition.emoji,
            description=definition.description,
        )


class AchievementProgress(BaseModel):
    """An unlocked achievement joined with its catalog entry"""
    key: str
    name: str
    emoji: str
    category: AchievementCategory
    description: str
    unlocked_at: datetime
    reward_claimed: bool = False


class AchievementSummary(BaseModel):
    """A user's unlocked achievements, most recent first"""
    user_id: str
    achievements: list[AchievementProgress]
    total_unlocked: int
    total_available: int
