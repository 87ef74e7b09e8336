"""Tests for the HTTP API (service layer mocked, no server or database required)"""
import pytest
from unittest.mock import AsyncMock, patch

from starlette.requests import Request
from starlette.testclient import TestClient

from facescore.api.middleware import limiter, rate_limit_key
from facescore.api.server import app
from facescore.exceptions import (
    ANALYSIS_UNAVAILABLE_MESSAGE,
    ContentPolicyError,
    OpenAIAPIError,
    QueryError,
    RecordNotFoundError,
    ValidationError,
)
from facescore.models.achievement import AchievementSummary, UnlockResult
from facescore.models.analysis import AnalysisResponse
from facescore.models.goal import GoalUpdateResult, UpdatedGoal
from facescore.safety.moderation import ModerationResult


@pytest.fixture
def client(monkeypatch, test_api_key):
    monkeypatch.setenv("API_KEYS", test_api_key)
    limiter.enabled = False
    yield TestClient(app)
    limiter.enabled = True


@pytest.fixture
def headers(test_api_key):
    return {"Authorization": f"Bearer {test_api_key}"}


@pytest.fixture
def analyze_body(test_user_id, test_image_url):
    return {"user_id": test_user_id, "image_url": test_image_url}


class TestAuthentication:

    def test_invalid_key(self, client, analyze_body):
        response = client.post(
            "/api/v1/analyze",
            json=analyze_body,
            headers={"Authorization": "Bearer wrong_key"}
        )

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["error"] == "AuthenticationError"

    def test_no_keys_configured(self, client, monkeypatch, analyze_body, headers):
        monkeypatch.delenv("API_KEYS")

        response = client.post("/api/v1/analyze", json=analyze_body, headers=headers)

        assert response.status_code == 503


class TestAnalyzeEndpoint:

    def test_degraded_response(self, client, headers, analyze_body, valid_analysis_dict):
        response_model = AnalysisResponse(
            analysis_id="analysis-1",
            score=7.1,
            breakdown=valid_analysis_dict["breakdown"],
            tips=valid_analysis_dict["tips"],
            degraded=True,
        )
        with patch(
            "facescore.api.routes.analysis_service.process_analysis",
            AsyncMock(return_value=response_model)
        ) as process:
            response = client.post("/api/v1/analyze", json=analyze_body, headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["degraded"] is True
        assert data["score"] == 7.1
        assert data["unlocked_achievements"] == []
        process.assert_awaited_once()

    @pytest.mark.parametrize("error", [
        ValidationError("tips must contain 5 to 7 items, got 2", field="tips", value=2),
        ContentPolicyError("banned terminology", matched_terms=["looksmax"]),
    ])
    def test_bad_model_output_returns_generic_503(self, client, headers, analyze_body, error):
        """Test that internal validation details are not leaked"""
        with patch(
            "facescore.api.routes.analysis_service.process_analysis",
            AsyncMock(side_effect=error)
        ):
            response = client.post("/api/v1/analyze", json=analyze_body, headers=headers)

        assert response.status_code == 503
        assert response.json()["detail"] == ANALYSIS_UNAVAILABLE_MESSAGE

    def test_provider_error(self, client, headers, analyze_body):
        with patch(
            "facescore.api.routes.analysis_service.process_analysis",
            AsyncMock(side_effect=OpenAIAPIError("Incorrect API key provided"))
        ):
            response = client.post("/api/v1/analyze", json=analyze_body, headers=headers)

        assert response.status_code == 503

    def test_save_failure(self, client, headers, analyze_body):
        with patch(
            "facescore.api.routes.analysis_service.process_analysis",
            AsyncMock(side_effect=QueryError("Database query failed"))
        ):
            response = client.post("/api/v1/analyze", json=analyze_body, headers=headers)

        assert response.status_code == 500

    def test_request_validation(self, client, headers, test_user_id):
        response = client.post("/api/v1/analyze", json={"user_id": test_user_id}, headers=headers)

        assert response.status_code == 422


class TestAchievementEndpoints:

    def test_unlock(self, client, headers, test_user_id):
        with patch(
            "facescore.api.routes.unlock_achievement",
            AsyncMock(return_value=UnlockResult(unlocked=True, already_unlocked=False))
        ):
            response = client.post(
                "/api/v1/achievements/unlock",
                json={"user_id": test_user_id, "achievement_key": "first_share"},
                headers=headers
            )

        assert response.status_code == 200
        assert response.json() == {"success": True, "unlocked": True, "already_unlocked": False}

    def test_unlock_already_unlocked(self, client, headers, test_user_id):
        with patch(
            "facescore.api.routes.unlock_achievement",
            AsyncMock(return_value=UnlockResult(unlocked=False, already_unlocked=True))
        ):
            response = client.post(
                "/api/v1/achievements/unlock",
                json={"user_id": test_user_id, "achievement_key": "first_share"},
                headers=headers
            )

        assert response.status_code == 200
        assert response.json()["already_unlocked"] is True

    def test_unlock_unknown_key(self, client, headers, test_user_id):
        with patch(
            "facescore.api.routes.unlock_achievement",
            AsyncMock(side_effect=ValidationError("Unknown achievement key: nope", field="achievement_key"))
        ):
            response = client.post(
                "/api/v1/achievements/unlock",
                json={"user_id": test_user_id, "achievement_key": "nope"},
                headers=headers
            )

        assert response.status_code == 400

    def test_unlock_persistence_failure(self, client, headers, test_user_id):
        with patch(
            "facescore.api.routes.unlock_achievement",
            AsyncMock(return_value=UnlockResult(unlocked=False, already_unlocked=False))
        ):
            response = client.post(
                "/api/v1/achievements/unlock",
                json={"user_id": test_user_id, "achievement_key": "first_share"},
                headers=headers
            )

        assert response.status_code == 500

    def test_list_achievements(self, client, headers, test_user_id):
        summary = AchievementSummary(user_id=test_user_id, achievements=[], total_unlocked=0, total_available=25)
        with patch("facescore.api.routes.get_user_achievements", AsyncMock(return_value=summary)):
            response = client.get(f"/api/v1/users/{test_user_id}/achievements", headers=headers)

        assert response.status_code == 200
        assert response.json()["total_available"] == 25


class TestGoalEndpoint:

    def test_update_progress(self, client, headers, test_user_id):
        result = GoalUpdateResult(updated_goals=[UpdatedGoal(id="goal-1", goal_completed=True)])
        with patch("facescore.api.routes.update_goal_progress", AsyncMock(return_value=result)):
            response = client.post(
                "/api/v1/goals/update-progress",
                json={"user_id": test_user_id, "goal_id": "goal-1", "current_value": 7.6},
                headers=headers
            )

        assert response.status_code == 200
        assert response.json()["updated_goals"] == [{"id": "goal-1", "goal_completed": True}]

    def test_unknown_goal(self, client, headers, test_user_id):
        with patch(
            "facescore.api.routes.update_goal_progress",
            AsyncMock(side_effect=RecordNotFoundError("Goal goal-9 not found", record_type="Goal", record_id="goal-9"))
        ):
            response = client.post(
                "/api/v1/goals/update-progress",
                json={"user_id": test_user_id, "goal_id": "goal-9", "current_value": 7.6},
                headers=headers
            )

        assert response.status_code == 404
        assert response.json()["detail"] == "Goal not found."

    def test_negative_value_rejected(self, client, headers, test_user_id):
        response = client.post(
            "/api/v1/goals/update-progress",
            json={"user_id": test_user_id, "goal_id": "goal-1", "current_value": -1},
            headers=headers
        )

        assert response.status_code == 422


class TestModerationEndpoint:

    def test_flagged(self, client, headers):
        result = ModerationResult(flagged=True, categories=["blocked terminology"], external_checked=False)
        with patch("facescore.api.routes.moderate_content", AsyncMock(return_value=result)):
            response = client.post("/api/v1/moderation/check", json={"text": "pure mogging"}, headers=headers)

        assert response.status_code == 200
        assert response.json()["flagged"] is True
        assert response.json()["external_checked"] is False


class TestRateLimitKey:

    def test_keyed_by_api_key(self, test_api_key):
        scope = {"type": "http", "headers": [(b"authorization", f"Bearer {test_api_key}".encode())], "client": ("10.0.0.1", 1234)}
        other = {"type": "http", "headers": [(b"authorization", b"Bearer other_key")], "client": ("10.0.0.1", 1234)}

        key = rate_limit_key(Request(scope))

        assert key.startswith("key:")
        assert test_api_key not in key
        assert key != rate_limit_key(Request(other))

    def test_falls_back_to_client_address(self):
        scope = {"type": "http", "headers": [], "client": ("10.0.0.1", 1234)}

        assert rate_limit_key(Request(scope)) == "10.0.0.1"


class TestHealthEndpoint:

    def test_degraded_without_database(self, client):
        """Test that an uninitialized pool reports degraded rather than failing"""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["database"] == "disconnected"
