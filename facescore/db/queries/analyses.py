"""Analysis persistence queries"""
import logging
from typing import Optional
from psycopg.types.json import Jsonb
from facescore.db.connection import db
from facescore.models.analysis import AnalysisOutcome

logger = logging.getLogger(__name__)


async def insert_analysis(user_id: str, image_url: str, outcome: AnalysisOutcome) -> dict:
    """
    Persist a scored analysis

    Returns:
        The inserted row (id, user_id, score, degraded, created_at)
    """
    result = outcome.result
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                INSERT INTO analyses (user_id, image_url, score, breakdown, tips, source, degraded, model)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING id, user_id, score, degraded, created_at
                """,
                (
                    user_id,
                    image_url,
                    result.score,
                    Jsonb({key: value.model_dump() for key, value in result.breakdown.items()}),
                    Jsonb([tip.model_dump() for tip in result.tips]),
                    outcome.source.value,
                    outcome.degraded,
                    outcome.model,
                )
            )
            row = await cur.fetchone()
            await conn.commit()
            logger.info(f"Saved analysis {row['id']} for user {user_id} (degraded={outcome.degraded})")
            return row


async def count_user_analyses(user_id: str) -> int:
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                "SELECT COUNT(*) AS total FROM analyses WHERE user_id = %s",
                (user_id,)
            )
            row = await cur.fetchone()
            return int(row['total']) if row else 0


async def get_first_analysis_score(user_id: str) -> Optional[float]:
    """Score of the user's earliest analysis, or None if they have none"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT score
                FROM analyses
                WHERE user_id = %s
                ORDER BY created_at ASC
                LIMIT 1
                """,
                (user_id,)
            )
            row = await cur.fetchone()
            return float(row['score']) if row else None
