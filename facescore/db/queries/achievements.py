"""Achievement database queries"""
import logging
from typing import Optional
from psycopg import errors
from facescore.db.connection import db

logger = logging.getLogger(__name__)


async def get_user_achievement(user_id: str, achievement_key: str) -> Optional[dict]:
    """Return the unlock row for (user, key), if any"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT id, user_id, achievement_key, unlocked_at, reward_claimed
                FROM user_achievements
                WHERE user_id = %s AND achievement_key = %s
                """,
                (user_id, achievement_key)
            )
            return await cur.fetchone()


async def insert_user_achievement(user_id: str, achievement_key: str) -> bool:
    """
    Insert an unlock row

    The UNIQUE (user_id, achievement_key) constraint makes this the
    authoritative check: a concurrent insert that lost the race gets
    UniqueViolation.

    Returns:
        True if the row was inserted, False if it already existed
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            try:
                await cur.execute(
                    """
                    INSERT INTO user_achievements (user_id, achievement_key, unlocked_at, reward_claimed)
                    VALUES (%s, %s, CURRENT_TIMESTAMP, FALSE)
                    """,
                    (user_id, achievement_key)
                )
            except errors.UniqueViolation:
                await conn.rollback()
                logger.info(f"Achievement {achievement_key} already present for user {user_id}")
                return False
            await conn.commit()
            return True


async def get_user_achievements(user_id: str) -> list[dict]:
    """All unlock rows for a user, most recent first"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT user_id, achievement_key, unlocked_at, reward_claimed
                FROM user_achievements
                WHERE user_id = %s
                ORDER BY unlocked_at DESC
                """,
                (user_id,)
            )
            return await cur.fetchall()
