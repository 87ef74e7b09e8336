"""
AnalysisService - Face Analysis Orchestration

Scores a photo with the vision model, falls back to the rule-based scorer
when the model is unreachable, persists the result and runs the
achievement and goal side effects.
"""

import asyncio
import logging
from typing import List, Optional

from facescore.config import VISION_MODEL, VISION_TIMEOUT_SECONDS
from facescore.db import queries
from facescore.exceptions import TransientInfraError, wrap_external_exception
from facescore.gamification.achievement_system import (
    check_analysis_achievements,
    check_improvement_achievements,
)
from facescore.gamification.goals import update_goals_from_analysis
from facescore.models.achievement import UnlockedAchievement
from facescore.models.analysis import (
    AnalysisOutcome,
    AnalysisResponse,
    AnalysisResult,
    AnalysisSource,
    FaceMetrics,
)
from facescore.resilience.fallback import FallbackStrategy, execute_with_fallbacks
from facescore.resilience.metrics import record_analysis
from facescore.scoring.fallback import calculate_fallback_score
from facescore.vision.analyzer import analyze_face

logger = logging.getLogger(__name__)

VISION_STRATEGY = "vision"
FALLBACK_STRATEGY = "rule_based"


class AnalysisService:
    """
    Service for face analyses.

    Responsibilities:
    - Vision scoring under a timeout, with the rule-based fallback
    - Persisting results (fallback output is marked degraded)
    - Achievement and goal updates after each scan
    """

    def __init__(self, vision_timeout: float = VISION_TIMEOUT_SECONDS):
        self.vision_timeout = vision_timeout
        logger.debug("AnalysisService initialized")

    async def _score_with_vision(
        self,
        image_ref: str,
        face_metrics: Optional[FaceMetrics] = None
    ) -> AnalysisResult:
        try:
            return await asyncio.wait_for(
                analyze_face(image_ref, face_metrics),
                timeout=self.vision_timeout
            )
        except asyncio.TimeoutError as e:
            raise TransientInfraError(
                f"Vision analysis timed out after {self.vision_timeout}s",
                service="vision",
                operation="analyze_face",
                cause=e
            ) from e

    async def _score_with_fallback(
        self,
        image_ref: str,
        face_metrics: Optional[FaceMetrics] = None
    ) -> AnalysisResult:
        return calculate_fallback_score(face_metrics)

    async def score_image(
        self,
        image_ref: str,
        face_metrics: Optional[FaceMetrics] = None
    ) -> AnalysisOutcome:
        """
        Score a photo, falling back only on transient infrastructure failures

        Raises:
            ValidationError, ContentPolicyError, VisionAnalysisError: the model
            answered but its answer is unusable
        """
        strategies = [
            FallbackStrategy(VISION_STRATEGY, self._score_with_vision, priority=1),
            FallbackStrategy(FALLBACK_STRATEGY, self._score_with_fallback, priority=2),
        ]
        name, result = await execute_with_fallbacks(
            strategies,
            image_ref,
            face_metrics,
            recoverable=(TransientInfraError,)
        )

        if name == VISION_STRATEGY:
            outcome = AnalysisOutcome(result=result, source=AnalysisSource.VISION, model=VISION_MODEL)
        else:
            logger.warning(f"[FALLBACK] Using rule-based score {result.score} for {image_ref[:80]}")
            outcome = AnalysisOutcome(result=result, source=AnalysisSource.FALLBACK)

        record_analysis(outcome.source.value)
        return outcome

    async def _check_achievements(self, user_id: str, score: float, is_first_scan: bool) -> List[UnlockedAchievement]:
        unlocked: List[UnlockedAchievement] = []
        try:
            unlocked.extend(await check_analysis_achievements(user_id, score, is_first_scan))
        except Exception as e:
            logger.error(f"[ACHIEVEMENTS] Analysis achievement check failed for user {user_id}: {e}", exc_info=True)
        try:
            unlocked.extend(await check_improvement_achievements(user_id, score))
        except Exception as e:
            logger.error(f"[ACHIEVEMENTS] Improvement achievement check failed for user {user_id}: {e}", exc_info=True)
        return unlocked

    async def process_analysis(
        self,
        user_id: str,
        image_ref: str,
        face_metrics: Optional[FaceMetrics] = None
    ) -> AnalysisResponse:
        """
        Run a complete scan for a user.

        Args:
            user_id: User ID
            image_ref: http(s) URL or data: URI of an already-hosted photo
            face_metrics: Optional on-device face metrics for the fallback scorer

        Returns:
            AnalysisResponse with the result, its degraded flag and any
            achievements, goals and milestones completed by this scan

        Raises:
            ValidationError, ContentPolicyError, VisionAnalysisError: unusable model output
            QueryError: the analysis could not be saved
        """
        outcome = await self.score_image(image_ref, face_metrics)
        result = outcome.result

        try:
            row = await queries.insert_analysis(user_id, image_ref, outcome)
            is_first_scan = await queries.count_user_analyses(user_id) == 1
        except Exception as e:
            raise wrap_external_exception(e, operation="save_analysis", user_id=user_id)

        unlocked = await self._check_achievements(user_id, result.score, is_first_scan)

        goal_result = await update_goals_from_analysis(user_id, result.score, result.category_scores())

        return AnalysisResponse(
            analysis_id=str(row['id']),
            score=result.score,
            breakdown=result.breakdown,
            tips=result.tips,
            degraded=outcome.degraded,
            unlocked_achievements=unlocked,
            goals_updated=len(goal_result.updated_goals),
            completed_goal_ids=goal_result.completed_goal_ids(),
            completed_milestones=goal_result.completed_milestones,
        )
