"""
Achievement System

Unlocks catalog achievements for a user when their activity crosses a
threshold:
- Analysis (first scan, score tiers)
- Improvement over the user's first-ever score
- Engagement streaks, routine completion, sharing, referrals
- Leaderboard rank, community activity, goal completion

Every threshold is checked independently, so one call can unlock several
tiers at once. Unlock rows are unique per (user_id, achievement_key); the
database constraint is what guarantees an achievement unlocks only once.
"""

from decimal import Decimal
from typing import List, Sequence, Tuple
import logging

from facescore.db import queries
from facescore.exceptions import ValidationError, wrap_external_exception
from facescore.gamification.achievements import ACHIEVEMENT_DEFINITIONS, get_achievement_definition
from facescore.models.achievement import (
    AchievementProgress,
    AchievementSummary,
    UnlockedAchievement,
    UnlockResult,
    UserAchievement,
)
from facescore.resilience.metrics import record_achievement_unlock

logger = logging.getLogger(__name__)

SCORE_THRESHOLDS: Tuple[Tuple[float, str], ...] = (
    (7.0, 'score_7_plus'),
    (8.0, 'score_8_plus'),
    (9.0, 'score_9_plus'),
    (10.0, 'perfect_10'),
)

IMPROVEMENT_THRESHOLDS: Tuple[Tuple[float, str], ...] = (
    (0.5, 'improved_05'),
    (1.0, 'improved_10'),
    (2.0, 'improved_20'),
)

REFERRAL_THRESHOLDS: Tuple[Tuple[float, str], ...] = (
    (5, 'referral_5'),
    (25, 'referral_25'),
    (100, 'referral_100'),
)

STREAK_THRESHOLDS: Tuple[Tuple[float, str], ...] = (
    (7, 'week_streak'),
    (30, 'month_streak'),
    (90, 'quarter_streak'),
    (365, 'year_streak'),
)

ROUTINE_THRESHOLDS: Tuple[Tuple[float, str], ...] = (
    (7, 'completed_routine_7'),
    (30, 'completed_routine_30'),
    (90, 'completed_routine_90'),
)

VIRAL_SHARE_VIEWS = 100
HELPFUL_COMMENTS_REQUIRED = 10


async def unlock_achievement(user_id: str, achievement_key: str) -> UnlockResult:
    """
    Unlock an achievement for a user

    Args:
        user_id: User ID
        achievement_key: Catalog key (see ACHIEVEMENT_DEFINITIONS)

    Returns:
        UnlockResult; already_unlocked=True when the row existed or a
        concurrent request inserted it first

    Raises:
        ValidationError: achievement_key is not in the catalog
    """
    if get_achievement_definition(achievement_key) is None:
        raise ValidationError(
            message=f"Unknown achievement key: {achievement_key!r}",
            field="achievement_key",
            value=achievement_key,
            user_id=user_id,
            operation="unlock_achievement",
            user_message=f"Unknown achievement: {achievement_key}",
        )

    logger.info(f"[ACHIEVEMENTS] Attempting to unlock {achievement_key} for user {user_id}")

    try:
        existing = await queries.get_user_achievement(user_id, achievement_key)
        if existing:
            logger.info(f"[ACHIEVEMENTS] {achievement_key} already unlocked for user {user_id}")
            return UnlockResult(unlocked=False, already_unlocked=True)

        inserted = await queries.insert_user_achievement(user_id, achievement_key)
    except Exception as e:
        logger.error(
            f"[ACHIEVEMENTS] Failed to unlock {achievement_key} for user {user_id}: {e}",
            exc_info=True
        )
        return UnlockResult(unlocked=False, already_unlocked=False)

    if not inserted:
        # Lost the race against a concurrent unlock
        return UnlockResult(unlocked=False, already_unlocked=True)

    record_achievement_unlock(achievement_key)
    logger.info(f"[ACHIEVEMENTS] Unlocked {achievement_key} for user {user_id}")
    return UnlockResult(unlocked=True, already_unlocked=False)


async def _unlock_keys(user_id: str, keys: Sequence[str]) -> List[UnlockedAchievement]:
    """Unlock each key independently, returning only the newly unlocked ones"""
    newly_unlocked = []
    for key in keys:
        result = await unlock_achievement(user_id, key)
        if result.unlocked:
            newly_unlocked.append(UnlockedAchievement.from_definition(ACHIEVEMENT_DEFINITIONS[key]))
    return newly_unlocked


def _met_thresholds(value: float, thresholds: Sequence[Tuple[float, str]]) -> List[str]:
    return [key for threshold, key in thresholds if value >= threshold]


async def check_analysis_achievements(
    user_id: str,
    score: float,
    is_first_scan: bool
) -> List[UnlockedAchievement]:
    """
    Check first-scan and score-tier achievements after an analysis

    A first analysis at 9.2 unlocks first_scan, score_7_plus, score_8_plus
    and score_9_plus in one call.
    """
    logger.info(
        f"[ACHIEVEMENTS] Checking analysis achievements for user {user_id}, "
        f"score: {score}, is_first_scan: {is_first_scan}"
    )

    keys = ['first_scan'] if is_first_scan else []
    keys.extend(_met_thresholds(score, SCORE_THRESHOLDS))

    unlocked = await _unlock_keys(user_id, keys)
    logger.info(f"[ACHIEVEMENTS] Analysis check for user {user_id} unlocked {len(unlocked)}")
    return unlocked


async def check_improvement_achievements(user_id: str, new_score: float) -> List[UnlockedAchievement]:
    """Compare new_score with the user's first-ever analysis score"""
    try:
        first_score = await queries.get_first_analysis_score(user_id)
    except Exception as e:
        logger.error(f"[ACHIEVEMENTS] Error loading first score for user {user_id}: {e}", exc_info=True)
        return []

    if first_score is None:
        return []

    # Decimal keeps one-decimal deltas exact (8.2 - 7.7 must reach 0.5)
    improvement = float(Decimal(str(new_score)) - Decimal(str(first_score)))
    return await _unlock_keys(user_id, _met_thresholds(improvement, IMPROVEMENT_THRESHOLDS))


async def check_leaderboard_achievements(user_id: str, rank: int) -> List[UnlockedAchievement]:
    keys = []
    if 0 < rank <= 10:
        keys.append('leaderboard_top10')
    if rank == 1:
        keys.append('leaderboard_1st')
    return await _unlock_keys(user_id, keys)


async def check_referral_achievements(user_id: str, referral_count: int) -> List[UnlockedAchievement]:
    return await _unlock_keys(user_id, _met_thresholds(referral_count, REFERRAL_THRESHOLDS))


async def check_goal_achievements(user_id: str) -> List[UnlockedAchievement]:
    """Unlock goal_completed once the user has any completed goal"""
    try:
        completed = await queries.has_completed_goal(user_id)
    except Exception as e:
        logger.error(f"[ACHIEVEMENTS] Error checking goal achievements for user {user_id}: {e}", exc_info=True)
        return []

    if not completed:
        return []
    return await _unlock_keys(user_id, ['goal_completed'])


async def check_streak_achievements(user_id: str, streak_days: int) -> List[UnlockedAchievement]:
    return await _unlock_keys(user_id, _met_thresholds(streak_days, STREAK_THRESHOLDS))


async def check_routine_achievements(
    user_id: str,
    completed_tasks: int,
    perfect_week: bool = False
) -> List[UnlockedAchievement]:
    """Routine completion counts, plus perfect_week when every task in a week was done"""
    keys = _met_thresholds(completed_tasks, ROUTINE_THRESHOLDS)
    if perfect_week:
        keys.append('perfect_week')
    return await _unlock_keys(user_id, keys)


async def check_share_achievements(
    user_id: str,
    share_count: int,
    best_share_views: int = 0
) -> List[UnlockedAchievement]:
    keys = []
    if share_count >= 1:
        keys.append('first_share')
    if best_share_views >= VIRAL_SHARE_VIEWS:
        keys.append('viral_share')
    return await _unlock_keys(user_id, keys)


async def check_community_achievements(user_id: str, helpful_comments: int) -> List[UnlockedAchievement]:
    keys = ['helpful_commenter'] if helpful_comments >= HELPFUL_COMMENTS_REQUIRED else []
    return await _unlock_keys(user_id, keys)


async def get_user_achievements(user_id: str) -> AchievementSummary:
    """
    Get a user's unlocked achievements joined with the catalog

    Rows whose key is no longer in the catalog are skipped.

    Raises:
        QueryError: the unlock rows could not be loaded
    """
    try:
        rows = await queries.get_user_achievements(user_id)
    except Exception as e:
        raise wrap_external_exception(e, operation="get_user_achievements", user_id=user_id)

    achievements = []
    for row in rows:
        unlock = UserAchievement(**{**row, "user_id": str(row["user_id"])})
        definition = get_achievement_definition(unlock.achievement_key)
        if definition is None:
            logger.warning(f"[ACHIEVEMENTS] Skipping unknown key {unlock.achievement_key} for user {user_id}")
            continue
        achievements.append(AchievementProgress(
            key=definition.key,
            name=definition.name,
            emoji=definition.emoji,
            category=definition.category,
            description=definition.description,
            unlocked_at=unlock.unlocked_at,
            reward_claimed=unlock.reward_claimed,
        ))

    return AchievementSummary(
        user_id=user_id,
        achievements=achievements,
        total_unlocked=len(achievements),
        total_available=len(ACHIEVEMENT_DEFINITIONS),
    )
