"""
Goal and milestone progress

Score goals track the user's latest analysis. Each update overwrites the
goal's current value, completes the goal once the target is reached, and
completes every pending milestone whose target has been reached.
"""

from typing import Dict, List, Optional, Tuple
import logging

from facescore.db import queries
from facescore.exceptions import RecordNotFoundError, wrap_external_exception
from facescore.gamification.achievement_system import check_goal_achievements
from facescore.models.goal import (
    CompletedMilestone,
    Goal,
    GoalStatus,
    GoalType,
    GoalUpdateResult,
    Milestone,
    SCORE_GOAL_TYPES,
    UpdatedGoal,
)
from facescore.resilience.metrics import record_goal_completed

logger = logging.getLogger(__name__)

DEFAULT_MILESTONE_NAME = "Milestone"


def _goal_from_row(row: dict) -> Goal:
    return Goal(**{**row, "id": str(row["id"]), "user_id": str(row["user_id"])})


def _milestone_from_row(row: dict) -> Milestone:
    return Milestone(**{**row, "id": str(row["id"]), "goal_id": str(row["goal_id"])})


def _goal_value(goal: Goal, score: float, breakdown: Optional[Dict[str, float]]) -> float:
    """Category goals follow their category's score when a breakdown is available"""
    if (
        goal.goal_type == GoalType.CATEGORY_IMPROVEMENT
        and goal.category
        and breakdown
        and goal.category in breakdown
    ):
        return breakdown[goal.category]
    return score


async def _apply_progress(
    user_id: str,
    goal: Goal,
    current_value: float
) -> Tuple[UpdatedGoal, List[CompletedMilestone]]:
    """Write current_value, complete the goal if reached, then its milestones"""
    await queries.set_goal_current_value(goal.id, current_value)

    # Only an active -> completed transition made by this call counts as a completion
    transitioned = False
    if current_value >= goal.target_value and goal.status == GoalStatus.ACTIVE:
        transitioned = await queries.complete_goal(goal.id)
        if transitioned:
            record_goal_completed()
            logger.info(f"[GOALS] Goal {goal.id} completed for user {user_id} ({current_value} >= {goal.target_value})")
            try:
                await check_goal_achievements(user_id)
            except Exception as e:
                logger.error(f"[GOALS] Goal achievement check failed for user {user_id}: {e}", exc_info=True)

    completed_milestones = []
    for row in await queries.get_incomplete_milestones(goal.id):
        milestone = _milestone_from_row(row)
        if milestone.target_value <= current_value:
            await queries.complete_milestone(milestone.id)
            completed_milestones.append(CompletedMilestone(
                goal_id=goal.id,
                milestone_id=milestone.id,
                milestone_name=milestone.milestone_name or DEFAULT_MILESTONE_NAME,
            ))

    if completed_milestones:
        logger.info(f"[GOALS] Goal {goal.id}: {len(completed_milestones)} milestone(s) completed")

    return UpdatedGoal(id=goal.id, goal_completed=transitioned), completed_milestones


async def update_goals_from_analysis(
    user_id: str,
    score: float,
    breakdown: Optional[Dict[str, float]] = None
) -> GoalUpdateResult:
    """
    Update the user's active score goals from a new analysis

    Args:
        user_id: User ID
        score: Overall analysis score
        breakdown: Category scores (category -> score), used by category goals

    Returns:
        GoalUpdateResult. Goal updates are non-critical: a goal that fails
        to update is logged and skipped.
    """
    result = GoalUpdateResult()

    try:
        rows = await queries.get_active_goals(user_id, SCORE_GOAL_TYPES)
    except Exception as e:
        logger.error(f"[GOALS] Failed to load active goals for user {user_id}: {e}", exc_info=True)
        return result

    for row in rows:
        try:
            goal = _goal_from_row(row)
            updated, milestones = await _apply_progress(user_id, goal, _goal_value(goal, score, breakdown))
        except Exception as e:
            logger.error(f"[GOALS] Failed to update goal {row.get('id')} for user {user_id}: {e}", exc_info=True)
            continue
        result.updated_goals.append(updated)
        result.completed_milestones.extend(milestones)

    logger.info(
        f"[GOALS] Updated {len(result.updated_goals)} goal(s) for user {user_id}, "
        f"{len(result.completed_milestones)} milestone(s) completed"
    )
    return result


async def update_goal_progress(user_id: str, goal_id: str, current_value: float) -> GoalUpdateResult:
    """
    Manually set progress on a single goal

    Raises:
        RecordNotFoundError: the goal does not exist or belongs to another user
        QueryError: the update could not be written
    """
    try:
        row = await queries.get_goal(user_id, goal_id)
    except Exception as e:
        raise wrap_external_exception(e, operation="update_goal_progress", user_id=user_id)

    if row is None:
        raise RecordNotFoundError(
            message=f"Goal {goal_id} not found for user {user_id}",
            record_type="Goal",
            record_id=goal_id,
            user_id=user_id,
            operation="update_goal_progress",
        )

    try:
        updated, milestones = await _apply_progress(user_id, _goal_from_row(row), current_value)
    except Exception as e:
        raise wrap_external_exception(e, operation="update_goal_progress", user_id=user_id)

    return GoalUpdateResult(updated_goals=[updated], completed_milestones=milestones)
