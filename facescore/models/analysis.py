"""Facial analysis result models"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from facescore.models.achievement import UnlockedAchievement
from facescore.models.goal import CompletedMilestone


class FeatureCategory(str, Enum):
    """The eight fixed facial-attribute categories"""
    FEMININITY = "femininity"
    SKIN = "skin"
    JAWLINE = "jawline"
    CHEEKBONES = "cheekbones"
    EYES = "eyes"
    SYMMETRY = "symmetry"
    LIPS = "lips"
    HAIR = "hair"


FEATURE_CATEGORIES: tuple[str, ...] = tuple(category.value for category in FeatureCategory)

MIN_SCORE = 1.0
MAX_SCORE = 10.0
MIN_TIPS = 5


class FeatureAnalysis(BaseModel):
    """Score and commentary for one category"""
    model_config = ConfigDict(frozen=True)

    score: float = Field(..., ge=MIN_SCORE, le=MAX_SCORE)
    description: str = Field(..., min_length=10)
    improvement: str = Field(..., min_length=20)


class Tip(BaseModel):
    """Actionable improvement recommendation"""
    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=5)
    description: str = Field(..., min_length=30)
    timeframe: str = Field(..., min_length=5)


class AnalysisResult(BaseModel):
    """Validated output of one facial-analysis request"""
    model_config = ConfigDict(frozen=True)

    score: float = Field(..., ge=MIN_SCORE, le=MAX_SCORE)
    breakdown: dict[str, FeatureAnalysis]
    tips: list[Tip] = Field(..., min_length=MIN_TIPS)

    @field_validator("breakdown")
    @classmethod
    def all_categories_present(cls, v: dict[str, FeatureAnalysis]) -> dict[str, FeatureAnalysis]:
        missing = [category for category in FEATURE_CATEGORIES if category not in v]
        if missing:
            raise ValueError(f"breakdown is missing categories: {', '.join(missing)}")
        return v

    def category_scores(self) -> dict[str, float]:
        """Map each category to its score"""
        return {category: self.breakdown[category].score for category in FEATURE_CATEGORIES}


class Likelihood(str, Enum):
    """Image-quality likelihood buckets reported by face detectors"""
    UNKNOWN = "UNKNOWN"
    VERY_UNLIKELY = "VERY_UNLIKELY"
    UNLIKELY = "UNLIKELY"
    POSSIBLE = "POSSIBLE"
    LIKELY = "LIKELY"
    VERY_LIKELY = "VERY_LIKELY"


class LandmarkPoint(BaseModel):
    x: float
    y: float
    z: Optional[float] = None


class HeadAngles(BaseModel):
    roll: Optional[float] = None
    pan: Optional[float] = None
    tilt: Optional[float] = None


class ImageLikelihood(BaseModel):
    blurred: Optional[Likelihood] = None
    under_exposed: Optional[Likelihood] = None


class FaceMetrics(BaseModel):
    """
    Optional side-channel measurements from on-device face detection

    Not sent to the vision model; only the fallback scorer reads them.
    """
    landmarks: Optional[dict[str, LandmarkPoint]] = None
    head_angles: Optional[HeadAngles] = None
    likelihood: Optional[ImageLikelihood] = None
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)


class AnalysisSource(str, Enum):
    VISION = "vision"
    FALLBACK = "fallback"


class AnalysisOutcome(BaseModel):
    """A scored result plus where it came from"""
    result: AnalysisResult
    source: AnalysisSource
    model: Optional[str] = None

    @property
    def degraded(self) -> bool:
        """Fallback results are lower fidelity and flagged as such when persisted"""
        return self.source == AnalysisSource.FALLBACK


class AnalysisResponse(BaseModel):
    """Everything the client needs after a scan: result plus side effects"""
    analysis_id: str
    score: float
    breakdown: dict[str, FeatureAnalysis]
    tips: list[Tip]
    degraded: bool = False
    unlocked_achievements: list[UnlockedAchievement] = Field(default_factory=list)
    goals_updated: int = 0
    completed_goal_ids: list[str] = Field(default_factory=list)
    completed_milestones: list[CompletedMilestone] = Field(default_factory=list)
