"""Global test fixtures and utilities for facescore tests"""
import json
import pytest
from unittest.mock import AsyncMock, Mock
from datetime import datetime, date, timezone

from facescore.models.analysis import FEATURE_CATEGORIES


# ============================================================================
# User & Auth Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "user-123"


@pytest.fixture
def test_api_key():
    """Standard test API key"""
    return "test_api_key_12345"


@pytest.fixture
def test_image_url():
    """Already-hosted photo reference"""
    return "https://cdn.example.com/uploads/user-123/face.jpg"


# ============================================================================
# Analysis Fixtures
# ============================================================================

def _feature(score):
    return {
        "score": score,
        "description": "Well balanced proportions with soft natural contours.",
        "improvement": "Use a gentle exfoliant twice a week and moisturize every night.",
    }


def _tip(index):
    return {
        "title": f"Daily habit {index}",
        "description": "Drink water consistently through the day and keep a steady sleep schedule.",
        "timeframe": "2-4 weeks",
    }


@pytest.fixture
def valid_analysis_dict():
    """A model response that satisfies every validation rule"""
    return {
        "score": 6.8,
        "breakdown": {category: _feature(6.8) for category in FEATURE_CATEGORIES},
        "tips": [_tip(i) for i in range(5)],
    }


@pytest.fixture
def analysis_factory():
    """Factory for analysis dicts with custom overall/category scores"""
    def _create(score=6.8, category_scores=None, tip_count=5):
        category_scores = category_scores or {}
        return {
            "score": score,
            "breakdown": {
                category: _feature(category_scores.get(category, score))
                for category in FEATURE_CATEGORIES
            },
            "tips": [_tip(i) for i in range(tip_count)],
        }

    return _create


# ============================================================================
# AI Client Fixtures
# ============================================================================

@pytest.fixture
def mock_openai_client(valid_analysis_dict):
    """Mock OpenAI client returning a valid analysis"""
    client = Mock()
    client.chat = Mock()
    client.chat.completions = Mock()
    client.chat.completions.create = AsyncMock()

    # Default response
    response = Mock()
    response.choices = [Mock()]
    response.choices[0].message = Mock()
    response.choices[0].message.content = json.dumps(valid_analysis_dict)
    client.chat.completions.create.return_value = response

    return client


@pytest.fixture
def mock_anthropic_client(valid_analysis_dict):
    """Mock Anthropic client returning a fenced JSON analysis"""
    client = Mock()
    client.messages = Mock()
    client.messages.create = AsyncMock()

    # Default response
    response = Mock()
    response.content = [Mock()]
    response.content[0].text = f"```json\n{json.dumps(valid_analysis_dict)}\n```"
    client.messages.create.return_value = response

    return client


# ============================================================================
# Goal Fixtures
# ============================================================================

@pytest.fixture
def goal_row(test_user_id):
    """Active score goal as returned by the goals queries"""
    return {
        "id": "goal-1",
        "user_id": test_user_id,
        "goal_type": "score_improvement",
        "category": None,
        "target_value": 7.5,
        "current_value": 7.0,
        "deadline": date(2026, 12, 31),
        "status": "active",
        "completed_at": None,
    }


@pytest.fixture
def milestone_rows():
    """Incomplete milestones, earliest target date first"""
    return [
        {
            "id": "ms-1",
            "goal_id": "goal-1",
            "milestone_name": "Halfway there",
            "target_value": 7.2,
            "target_date": date(2026, 11, 1),
            "completed": False,
            "completed_at": None,
        },
        {
            "id": "ms-2",
            "goal_id": "goal-1",
            "milestone_name": None,
            "target_value": 7.5,
            "target_date": date(2026, 12, 1),
            "completed": False,
            "completed_at": None,
        },
        {
            "id": "ms-3",
            "goal_id": "goal-1",
            "milestone_name": "Stretch",
            "target_value": 8.0,
            "target_date": date(2026, 12, 31),
            "completed": False,
            "completed_at": None,
        },
    ]


@pytest.fixture
def achievement_row(test_user_id):
    return {
        "user_id": test_user_id,
        "achievement_key": "first_scan",
        "unlocked_at": datetime(2026, 10, 1, 12, 0, 0, tzinfo=timezone.utc),
        "reward_claimed": False,
    }
