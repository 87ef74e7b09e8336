"""Unit tests for database queries (mocked connection pool)"""
import pytest
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

from psycopg import errors

from facescore.db import queries
from facescore.db.connection import Database, db
from facescore.models.analysis import AnalysisOutcome, AnalysisResult, AnalysisSource
from facescore.scoring.fallback import calculate_fallback_score

MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "migrations"


@contextmanager
def mocked_db(cursor):
    """Route db.connection() to a mock connection whose cursor is `cursor`"""
    conn = MagicMock()
    conn.cursor.return_value.__aenter__.return_value = cursor
    conn.commit = AsyncMock()
    conn.rollback = AsyncMock()

    with patch.object(db, "connection") as mock_connection:
        mock_connection.return_value.__aenter__.return_value = conn
        yield conn


@pytest.fixture
def cursor():
    cur = AsyncMock()
    cur.fetchone = AsyncMock(return_value=None)
    cur.fetchall = AsyncMock(return_value=[])
    return cur


# ============================================================================
# Achievement Queries
# ============================================================================

@pytest.mark.asyncio
async def test_insert_user_achievement(cursor, test_user_id):
    """Test inserting a new unlock row"""
    with mocked_db(cursor) as conn:
        inserted = await queries.insert_user_achievement(test_user_id, "first_scan")

    assert inserted is True
    sql, params = cursor.execute.call_args[0]
    assert "INSERT INTO user_achievements" in sql
    assert params == (test_user_id, "first_scan")
    conn.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_insert_user_achievement_unique_violation(cursor, test_user_id):
    """Test that the unique constraint turns a duplicate insert into False"""
    cursor.execute = AsyncMock(side_effect=errors.UniqueViolation("duplicate key value"))

    with mocked_db(cursor) as conn:
        inserted = await queries.insert_user_achievement(test_user_id, "first_scan")

    assert inserted is False
    conn.rollback.assert_awaited_once()
    conn.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_insert_user_achievement_other_errors_propagate(cursor, test_user_id):
    cursor.execute = AsyncMock(side_effect=errors.UndefinedTable("relation does not exist"))

    with mocked_db(cursor):
        with pytest.raises(errors.UndefinedTable):
            await queries.insert_user_achievement(test_user_id, "first_scan")


@pytest.mark.asyncio
async def test_get_user_achievement_none(cursor, test_user_id):
    with mocked_db(cursor):
        assert await queries.get_user_achievement(test_user_id, "first_scan") is None


# ============================================================================
# Analysis Queries
# ============================================================================

@pytest.mark.asyncio
async def test_insert_analysis_marks_degraded(cursor, test_user_id, test_image_url):
    """Test that fallback results are saved with degraded = TRUE"""
    cursor.fetchone = AsyncMock(return_value={
        "id": "analysis-1",
        "user_id": test_user_id,
        "score": 7.1,
        "degraded": True,
        "created_at": datetime.now(timezone.utc),
    })
    outcome = AnalysisOutcome(result=calculate_fallback_score(), source=AnalysisSource.FALLBACK)

    with mocked_db(cursor) as conn:
        row = await queries.insert_analysis(test_user_id, test_image_url, outcome)

    assert row["id"] == "analysis-1"
    params = cursor.execute.call_args[0][1]
    assert params[0] == test_user_id
    assert params[2] == 7.1
    assert params[5] == "fallback"
    assert params[6] is True
    conn.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_insert_analysis_keeps_full_precision(cursor, test_user_id, test_image_url, analysis_factory):
    """Test that a two-decimal score is sent as-is so the stored and returned scores match"""
    cursor.fetchone = AsyncMock(return_value={
        "id": "analysis-1",
        "user_id": test_user_id,
        "score": 6.95,
        "degraded": False,
        "created_at": datetime.now(timezone.utc),
    })
    outcome = AnalysisOutcome(result=AnalysisResult(**analysis_factory(score=6.95)), source=AnalysisSource.VISION)

    with mocked_db(cursor):
        await queries.insert_analysis(test_user_id, test_image_url, outcome)

    assert cursor.execute.call_args[0][1][2] == 6.95


def test_schema_score_columns_unscaled():
    """Test that no score column has a scale that would round stored values"""
    schema = (MIGRATIONS_DIR / "001_face_analysis_schema.sql").read_text()

    assert "NUMERIC(" not in schema
    assert "score NUMERIC NOT NULL" in schema
    assert "target_value NUMERIC NOT NULL" in schema


@pytest.mark.asyncio
async def test_count_user_analyses(cursor, test_user_id):
    cursor.fetchone = AsyncMock(return_value={"total": 3})

    with mocked_db(cursor):
        assert await queries.count_user_analyses(test_user_id) == 3


@pytest.mark.asyncio
async def test_first_analysis_score(cursor, test_user_id):
    cursor.fetchone = AsyncMock(return_value={"score": 6.4})

    with mocked_db(cursor):
        assert await queries.get_first_analysis_score(test_user_id) == 6.4

    sql = cursor.execute.call_args[0][0]
    assert "ORDER BY created_at ASC" in sql


# ============================================================================
# Goal Queries
# ============================================================================

@pytest.mark.asyncio
async def test_get_active_goals_filters_types(cursor, test_user_id):
    with mocked_db(cursor):
        await queries.get_active_goals(test_user_id, ("score_improvement", "category_improvement"))

    sql, params = cursor.execute.call_args[0]
    assert "status = 'active'" in sql
    assert params == (test_user_id, ["score_improvement", "category_improvement"])


@pytest.mark.asyncio
async def test_complete_goal_only_once(cursor):
    """Test that the active -> completed transition reports whether it happened"""
    cursor.rowcount = 0

    with mocked_db(cursor):
        assert await queries.complete_goal("goal-1") is False

    cursor.rowcount = 1
    with mocked_db(cursor):
        assert await queries.complete_goal("goal-1") is True


@pytest.mark.asyncio
async def test_incomplete_milestones_ordered(cursor):
    with mocked_db(cursor):
        await queries.get_incomplete_milestones("goal-1")

    sql = cursor.execute.call_args[0][0]
    assert "completed = FALSE" in sql
    assert "ORDER BY target_date ASC" in sql


# ============================================================================
# Connection Pool
# ============================================================================

@pytest.mark.asyncio
async def test_connection_requires_pool():
    database = Database("postgresql://localhost/test")

    with pytest.raises(RuntimeError):
        async with database.connection():
            pass


@pytest.mark.asyncio
async def test_ping(cursor):
    cursor.fetchone = AsyncMock(return_value={"?column?": 1})

    with mocked_db(cursor):
        assert await db.ping() is True

    assert cursor.execute.call_args[0][0] == "SELECT 1"


@pytest.mark.asyncio
async def test_ping_without_pool():
    database = Database("postgresql://localhost/test")

    assert await database.ping() is False
