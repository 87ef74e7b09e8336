"""
Gamification for face analyses

- Achievement catalog and unlock evaluators
- Score goals and milestones driven by analysis results
"""

from facescore.gamification.achievements import ACHIEVEMENT_DEFINITIONS, get_achievement_definition
from facescore.gamification.achievement_system import (
    unlock_achievement,
    check_analysis_achievements,
    check_improvement_achievements,
    check_leaderboard_achievements,
    check_referral_achievements,
    check_goal_achievements,
    check_streak_achievements,
    check_routine_achievements,
    check_share_achievements,
    check_community_achievements,
    get_user_achievements,
)
from facescore.gamification.goals import update_goals_from_analysis, update_goal_progress

__all__ = [
    "ACHIEVEMENT_DEFINITIONS",
    "get_achievement_definition",
    "unlock_achievement",
    "check_analysis_achievements",
    "check_improvement_achievements",
    "check_leaderboard_achievements",
    "check_referral_achievements",
    "check_goal_achievements",
    "check_streak_achievements",
    "check_routine_achievements",
    "check_share_achievements",
    "check_community_achievements",
    "get_user_achievements",
    "update_goals_from_analysis",
    "update_goal_progress",
]
