"""API routes for face analysis, achievements, goals and moderation"""
import logging
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Request, status

from facescore.api.auth import verify_api_key
from facescore.api.middleware import limiter
from facescore.api.models import (
    AnalyzeRequest,
    UnlockAchievementRequest, UnlockAchievementResponse,
    GoalProgressRequest,
    ModerationRequest,
    HealthCheckResponse,
)
from facescore.config import (
    ANALYZE_RATE_LIMIT,
    HEALTH_RATE_LIMIT,
    READ_RATE_LIMIT,
    WRITE_RATE_LIMIT,
)
from facescore.db.connection import db
from facescore.exceptions import (
    ANALYSIS_UNAVAILABLE_MESSAGE,
    ContentPolicyError,
    ExternalAPIError,
    FaceScoreError,
    RecordNotFoundError,
    ValidationError,
    VisionAnalysisError,
)
from facescore.gamification.achievement_system import get_user_achievements, unlock_achievement
from facescore.gamification.goals import update_goal_progress
from facescore.models.achievement import AchievementSummary
from facescore.models.analysis import AnalysisResponse
from facescore.models.goal import GoalUpdateResult
from facescore.safety.moderation import ModerationResult, moderate_content
from facescore.services.analysis_service import AnalysisService

logger = logging.getLogger(__name__)

router = APIRouter()

analysis_service = AnalysisService()


@router.post("/api/v1/analyze", response_model=AnalysisResponse)
@limiter.limit(ANALYZE_RATE_LIMIT)
async def analyze(
    request: Request,
    body: AnalyzeRequest,
    api_key: str = Depends(verify_api_key)
):
    """
    Score a face photo

    Falls back to the rule-based scorer when the vision model is
    unreachable; the response is then marked degraded.
    Rate limited by ANALYZE_RATE_LIMIT (vision calls are expensive)
    """
    try:
        return await analysis_service.process_analysis(body.user_id, body.image_url, body.face_metrics)
    except (ValidationError, ContentPolicyError, VisionAnalysisError) as e:
        logger.warning(f"Analysis rejected for user {body.user_id}: {type(e).__name__} [{e.request_id}]")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=ANALYSIS_UNAVAILABLE_MESSAGE
        )
    except ExternalAPIError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=e.user_message
        )
    except FaceScoreError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.user_message
        )


@router.post("/api/v1/achievements/unlock", response_model=UnlockAchievementResponse)
@limiter.limit(WRITE_RATE_LIMIT)
async def unlock_achievement_endpoint(
    request: Request,
    body: UnlockAchievementRequest,
    api_key: str = Depends(verify_api_key)
):
    """Unlock an achievement (typically called by other services)"""
    try:
        result = await unlock_achievement(body.user_id, body.achievement_key)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message
        )

    if not (result.unlocked or result.already_unlocked):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to unlock achievement"
        )

    return UnlockAchievementResponse(
        success=True,
        unlocked=result.unlocked,
        already_unlocked=result.already_unlocked
    )


@router.get("/api/v1/users/{user_id}/achievements", response_model=AchievementSummary)
@limiter.limit(READ_RATE_LIMIT)
async def get_achievements(
    request: Request,
    user_id: str,
    api_key: str = Depends(verify_api_key)
):
    """Get a user's unlocked achievements"""
    try:
        return await get_user_achievements(user_id)
    except FaceScoreError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.user_message
        )


@router.post("/api/v1/goals/update-progress", response_model=GoalUpdateResult)
@limiter.limit(WRITE_RATE_LIMIT)
async def update_goal_progress_endpoint(
    request: Request,
    body: GoalProgressRequest,
    api_key: str = Depends(verify_api_key)
):
    """Set progress on a goal and complete any milestones it reaches"""
    try:
        return await update_goal_progress(body.user_id, body.goal_id, body.current_value)
    except RecordNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.user_message
        )
    except FaceScoreError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.user_message
        )


@router.post("/api/v1/moderation/check", response_model=ModerationResult)
@limiter.limit(WRITE_RATE_LIMIT)
async def check_moderation(
    request: Request,
    body: ModerationRequest,
    api_key: str = Depends(verify_api_key)
):
    """Moderate free text (comments, captions) before it is published"""
    return await moderate_content(body.text)


@router.get("/health", response_model=HealthCheckResponse)
@limiter.limit(HEALTH_RATE_LIMIT)
async def health_check(request: Request):
    """Liveness plus database reachability; degraded when the pool cannot answer"""
    db_status = "connected" if await db.ping() else "disconnected"

    return HealthCheckResponse(
        status="healthy" if db_status == "connected" else "degraded",
        database=db_status,
        timestamp=datetime.now()
    )
