"""Pydantic models for API request/response validation"""
from typing import Optional
from pydantic import BaseModel, Field
from datetime import datetime

from facescore.models.analysis import FaceMetrics


class AnalyzeRequest(BaseModel):
    """Request model for the analyze endpoint"""
    user_id: str = Field(..., min_length=1, description="User identifier")
    image_url: str = Field(..., min_length=1, description="http(s) URL or data: URI of an uploaded photo")
    face_metrics: Optional[FaceMetrics] = Field(
        default=None,
        description="Optional on-device face metrics, used by the fallback scorer"
    )


class UnlockAchievementRequest(BaseModel):
    """Request to unlock a single achievement"""
    user_id: str = Field(..., min_length=1)
    achievement_key: str = Field(..., min_length=1)


class UnlockAchievementResponse(BaseModel):
    success: bool
    unlocked: bool
    already_unlocked: bool


class GoalProgressRequest(BaseModel):
    """Request to set progress on one goal"""
    user_id: str = Field(..., min_length=1)
    goal_id: str = Field(..., min_length=1)
    current_value: float = Field(..., ge=0)


class ModerationRequest(BaseModel):
    text: str = Field(..., description="Text to check")


class HealthCheckResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Service status")
    database: str = Field(..., description="Database connection status")
    timestamp: datetime = Field(..., description="Check timestamp")
