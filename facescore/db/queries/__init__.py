"""
Database queries grouped by domain

Re-exported here so callers can `from facescore.db import queries`.
"""

from facescore.db.queries.achievements import (
    get_user_achievement,
    insert_user_achievement,
    get_user_achievements,
)
from facescore.db.queries.analyses import (
    insert_analysis,
    count_user_analyses,
    get_first_analysis_score,
)
from facescore.db.queries.goals import (
    get_active_goals,
    get_goal,
    set_goal_current_value,
    complete_goal,
    get_incomplete_milestones,
    complete_milestone,
    has_completed_goal,
)

__all__ = [
    # Achievements
    "get_user_achievement",
    "insert_user_achievement",
    "get_user_achievements",
    # Analyses
    "insert_analysis",
    "count_user_analyses",
    "get_first_analysis_score",
    # Goals
    "get_active_goals",
    "get_goal",
    "set_goal_current_value",
    "complete_goal",
    "get_incomplete_milestones",
    "complete_milestone",
    "has_completed_goal",
]
