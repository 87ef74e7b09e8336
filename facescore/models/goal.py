"""Goal and milestone models"""
from datetime import date, datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class GoalType(str, Enum):
    """Goal types; only the first two track analysis scores"""
    SCORE_IMPROVEMENT = "score_improvement"
    CATEGORY_IMPROVEMENT = "category_improvement"
    ROUTINE_CONSISTENCY = "routine_consistency"


SCORE_GOAL_TYPES: tuple[str, ...] = (
    GoalType.SCORE_IMPROVEMENT.value,
    GoalType.CATEGORY_IMPROVEMENT.value,
)


class GoalStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class Goal(BaseModel):
    """User goal tracked against analysis scores"""
    id: str
    user_id: str
    goal_type: GoalType
    category: Optional[str] = None
    target_value: float
    current_value: Optional[float] = None
    deadline: Optional[date] = None
    status: GoalStatus = GoalStatus.ACTIVE
    completed_at: Optional[datetime] = None


class Milestone(BaseModel):
    """Checkpoint within a goal"""
    id: str
    goal_id: str
    milestone_name: Optional[str] = None
    target_value: float
    target_date: Optional[date] = None
    completed: bool = False
    completed_at: Optional[datetime] = None


class UpdatedGoal(BaseModel):
    id: str
    goal_completed: bool


class CompletedMilestone(BaseModel):
    goal_id: str
    milestone_id: str
    milestone_name: str


class GoalUpdateResult(BaseModel):
    """Which goals and milestones changed during one update pass"""
    updated_goals: list[UpdatedGoal] = Field(default_factory=list)
    completed_milestones: list[CompletedMilestone] = Field(default_factory=list)

    def completed_goal_ids(self) -> list[str]:
        return [goal.id for goal in self.updated_goals if goal.goal_completed]
