"""
Achievement catalog

Static definitions for every achievement a user can unlock. Keys are
persisted in user_achievements.achievement_key and must never be renamed.
"""

from types import MappingProxyType
from typing import Mapping, Optional

from facescore.models.achievement import AchievementCategory, AchievementDefinition


def _define(key: str, name: str, emoji: str, category: AchievementCategory, description: str) -> AchievementDefinition:
    return AchievementDefinition(
        key=key,
        name=name,
        emoji=emoji,
        category=category,
        description=description,
    )


_DEFINITIONS = [
    # Analysis milestones
    _define('first_scan', 'First Steps', '🎯', AchievementCategory.ANALYSIS,
            'Complete your first facial analysis scan'),
    _define('score_7_plus', 'Rising Star', '⭐', AchievementCategory.ANALYSIS,
            'Achieve a score of 7.0 or higher'),
    _define('score_8_plus', 'Top Tier', '💎', AchievementCategory.ANALYSIS,
            'Achieve a score of 8.0 or higher'),
    _define('score_9_plus', 'Elite Status', '👑', AchievementCategory.ANALYSIS,
            'Achieve a score of 9.0 or higher'),
    _define('perfect_10', 'Legendary', '✨', AchievementCategory.ANALYSIS,
            'Achieve a perfect score of 10.0'),

    # Improvement
    _define('improved_05', 'Progress Made', '📈', AchievementCategory.IMPROVEMENT,
            'Improve your score by 0.5 points or more'),
    _define('improved_10', 'Major Transformation', '🦋', AchievementCategory.IMPROVEMENT,
            'Improve your score by 1.0 point or more'),
    _define('improved_20', 'Complete Makeover', '🔥', AchievementCategory.IMPROVEMENT,
            'Improve your score by 2.0 points or more'),

    # Engagement
    _define('week_streak', 'Committed', '🔥', AchievementCategory.ENGAGEMENT,
            'Maintain a 7-day streak'),
    _define('month_streak', 'Dedicated', '💪', AchievementCategory.ENGAGEMENT,
            'Maintain a 30-day streak'),
    _define('quarter_streak', 'Unstoppable', '⚡', AchievementCategory.ENGAGEMENT,
            'Maintain a 90-day streak'),
    _define('year_streak', 'Year Warrior', '👑', AchievementCategory.ENGAGEMENT,
            'Maintain a 365-day streak'),

    # Routine mastery
    _define('completed_routine_7', 'Habit Starter', '✅', AchievementCategory.ROUTINE,
            'Complete 7 routine tasks'),
    _define('completed_routine_30', 'Habit Master', '🎖️', AchievementCategory.ROUTINE,
            'Complete 30 routine tasks'),
    _define('completed_routine_90', 'Lifestyle Legend', '🏆', AchievementCategory.ROUTINE,
            'Complete 90 routine tasks'),
    _define('perfect_week', 'Perfectionist', '💯', AchievementCategory.ROUTINE,
            'Complete all routine tasks for a week'),

    # Social
    _define('first_share', 'Spreading the Word', '📱', AchievementCategory.SOCIAL,
            'Share your first analysis result'),
    _define('viral_share', 'Influencer', '🌟', AchievementCategory.SOCIAL,
            'Get 100+ views on a shared analysis'),
    _define('referral_5', 'Networker', '👥', AchievementCategory.SOCIAL,
            'Refer 5 friends to the app'),
    _define('referral_25', 'Ambassador', '🎯', AchievementCategory.SOCIAL,
            'Refer 25 friends to the app'),
    _define('referral_100', 'Legend', '👑', AchievementCategory.SOCIAL,
            'Refer 100 friends to the app'),

    # Community
    _define('leaderboard_top10', 'Top Performer', '🥇', AchievementCategory.COMMUNITY,
            'Rank in the top 10 on the leaderboard'),
    _define('leaderboard_1st', 'Champion', '👑', AchievementCategory.COMMUNITY,
            'Achieve #1 rank on the leaderboard'),
    _define('helpful_commenter', 'Community Leader', '💬', AchievementCategory.COMMUNITY,
            'Make 10 helpful comments'),

    # Goals
    _define('goal_completed', 'Goal Achiever', '🎯', AchievementCategory.GOALS,
            'Complete your first goal'),
]

ACHIEVEMENT_DEFINITIONS: Mapping[str, AchievementDefinition] = MappingProxyType(
    {definition.key: definition for definition in _DEFINITIONS}
)


def get_achievement_definition(key: str) -> Optional[AchievementDefinition]:
    """Look up a catalog entry; None for unknown keys"""
    return ACHIEVEMENT_DEFINITIONS.get(key)