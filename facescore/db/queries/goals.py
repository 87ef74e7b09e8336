"""Goal and milestone queries"""
import logging
from typing import Optional
from facescore.db.connection import db

logger = logging.getLogger(__name__)

GOAL_COLUMNS = (
    "id, user_id, goal_type, category, target_value, current_value, deadline, status, completed_at"
)
MILESTONE_COLUMNS = (
    "id, goal_id, milestone_name, target_value, target_date, completed, completed_at"
)


async def get_active_goals(user_id: str, goal_types: tuple[str, ...]) -> list[dict]:
    """Active goals of the given types"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                SELECT {GOAL_COLUMNS}
                FROM user_goals
                WHERE user_id = %s AND status = 'active' AND goal_type = ANY(%s)
                ORDER BY created_at ASC
                """,
                (user_id, list(goal_types))
            )
            return await cur.fetchall()


async def get_goal(user_id: str, goal_id: str) -> Optional[dict]:
    """A goal owned by the user"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"SELECT {GOAL_COLUMNS} FROM user_goals WHERE id = %s AND user_id = %s",
                (goal_id, user_id)
            )
            return await cur.fetchone()


async def set_goal_current_value(goal_id: str, current_value: float) -> None:
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                "UPDATE user_goals SET current_value = %s, updated_at = CURRENT_TIMESTAMP WHERE id = %s",
                (current_value, goal_id)
            )
            await conn.commit()


async def complete_goal(goal_id: str) -> bool:
    """
    Transition a goal from active to completed

    Returns:
        False if the goal was already completed (the transition happens once)
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                UPDATE user_goals
                SET status = 'completed', completed_at = CURRENT_TIMESTAMP, updated_at = CURRENT_TIMESTAMP
                WHERE id = %s AND status = 'active'
                """,
                (goal_id,)
            )
            await conn.commit()
            return cur.rowcount == 1


async def get_incomplete_milestones(goal_id: str) -> list[dict]:
    """Incomplete milestones, earliest target date first"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                SELECT {MILESTONE_COLUMNS}
                FROM goal_milestones
                WHERE goal_id = %s AND completed = FALSE
                ORDER BY target_date ASC
                """,
                (goal_id,)
            )
            return await cur.fetchall()


async def complete_milestone(milestone_id: str) -> None:
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                UPDATE goal_milestones
                SET completed = TRUE, completed_at = CURRENT_TIMESTAMP
                WHERE id = %s AND completed = FALSE
                """,
                (milestone_id,)
            )
            await conn.commit()


async def has_completed_goal(user_id: str) -> bool:
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                "SELECT 1 FROM user_goals WHERE user_id = %s AND status = 'completed' LIMIT 1",
                (user_id,)
            )
            return await cur.fetchone() is not None
