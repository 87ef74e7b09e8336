"""
Rule-based fallback scoring

Used only when the vision model is unreachable. Produces a result that
satisfies every analysis validation rule without any network call, from
nothing more than the optional face metrics.

Scores:
- skin is derived from image-quality likelihoods when present
- symmetry is a fixed baseline; landmark geometry is not evaluated
- every other category gets a fixed baseline
- overall = mean of the 8 category scores, rounded half-up to 1 decimal
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from facescore.models.analysis import (
    FEATURE_CATEGORIES,
    AnalysisResult,
    FaceMetrics,
    FeatureAnalysis,
    ImageLikelihood,
    Likelihood,
    Tip,
)

logger = logging.getLogger(__name__)

BASELINE_SCORE = 7.0
SYMMETRY_BASELINE = 7.5

BASELINE_DESCRIPTION = (
    "Unable to perform detailed analysis - using baseline score. "
    "Try again when service is available."
)

# (score, improvement) for the categories that never depend on metrics
BASELINE_FEATURES: dict[str, tuple[float, str]] = {
    "femininity": (
        BASELINE_SCORE,
        "Focus on facial exercises and skincare to enhance your natural feminine features and soft contours.",
    ),
    "jawline": (
        BASELINE_SCORE,
        "Try facial yoga exercises and contouring makeup techniques to enhance your V-line and soft jawline.",
    ),
    "cheekbones": (
        BASELINE_SCORE,
        "Try highlighting techniques and facial massage to enhance your cheekbone definition and glow.",
    ),
    "eyes": (
        7.5,
        "Ensure adequate sleep and hydration to reduce under-eye circles and improve eye area appearance.",
    ),
    "lips": (
        BASELINE_SCORE,
        "Stay hydrated and use lip balm with SPF to maintain healthy, well-defined lips.",
    ),
    "hair": (
        BASELINE_SCORE,
        "Get a professional haircut that complements your face shape and maintain regular grooming.",
    ),
}

SKIN_IMPROVEMENT = (
    "Establish a daily skincare routine with cleanser, moisturizer, and SPF 30+ sunscreen. Stay hydrated."
)
SYMMETRY_DESCRIPTION = "Basic symmetry analysis performed. Full analysis unavailable."
SYMMETRY_IMPROVEMENT = (
    "Practice good posture and consider professional consultation for any significant asymmetries."
)

GENERIC_TIPS: tuple[Tip, ...] = (
    Tip(
        title="Improve Skin Health",
        description=(
            "Establish a daily skincare routine with cleanser, moisturizer, and SPF 30+ sunscreen. "
            "Stay hydrated by drinking 8 glasses of water daily."
        ),
        timeframe="2-4 weeks for visible results",
    ),
    Tip(
        title="Enhance Facial Structure",
        description=(
            "Incorporate facial exercises and maintain a healthy body composition "
            "through regular cardio and strength training."
        ),
        timeframe="1-3 months for noticeable definition",
    ),
    Tip(
        title="Optimize Grooming",
        description=(
            "Get a professional haircut that complements your face shape and keep brows "
            "and skin well maintained between appointments."
        ),
        timeframe="Immediate impact, maintain weekly",
    ),
    Tip(
        title="Improve Posture",
        description=(
            "Practice good posture: shoulders back, chin up, spine aligned. "
            "This instantly improves your overall appearance and confidence."
        ),
        timeframe="Immediate impact, build habit over 2-3 weeks",
    ),
    Tip(
        title="Prioritize Sleep and Hydration",
        description=(
            "Aim for 7-9 hours of sleep and steady water intake through the day to reduce "
            "puffiness and dark circles around the eyes."
        ),
        timeframe="1-2 weeks for visible results",
    ),
)

RETAKE_PHOTO_TIP = Tip(
    title="Retake in Better Lighting",
    description=(
        "Your photo looked blurred or under-exposed. Face a window in daylight, hold the camera "
        "steady at eye level and scan again for a more detailed analysis."
    ),
    timeframe="Immediate, on your next scan",
)

POOR_QUALITY = {Likelihood.POSSIBLE, Likelihood.LIKELY, Likelihood.VERY_LIKELY}


def round_score(value: float) -> float:
    """Round half-up to one decimal (7.25 -> 7.3)"""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def calculate_skin_score(likelihood: Optional[ImageLikelihood]) -> float:
    """Image sharpness and exposure stand in for skin clarity"""
    if likelihood is None:
        return BASELINE_SCORE
    if likelihood.blurred == Likelihood.VERY_UNLIKELY and likelihood.under_exposed == Likelihood.UNLIKELY:
        return 8.0
    if likelihood.blurred == Likelihood.UNLIKELY:
        return 7.5
    return BASELINE_SCORE


def calculate_symmetry_score(face_metrics: FaceMetrics) -> float:
    # Landmarks are not evaluated; see DESIGN.md open questions
    return SYMMETRY_BASELINE


def _is_poor_quality(likelihood: Optional[ImageLikelihood]) -> bool:
    if likelihood is None:
        return False
    return likelihood.blurred in POOR_QUALITY or likelihood.under_exposed in POOR_QUALITY


def build_fallback_tips(face_metrics: FaceMetrics) -> list[Tip]:
    """Five fixed tips, plus a photo-quality tip when the image looked poor"""
    tips = list(GENERIC_TIPS)
    if _is_poor_quality(face_metrics.likelihood):
        tips.append(RETAKE_PHOTO_TIP)
    return tips


def calculate_fallback_score(face_metrics: Optional[FaceMetrics] = None) -> AnalysisResult:
    """
    Score a face without the vision model

    Args:
        face_metrics: Optional on-device measurements

    Returns:
        AnalysisResult that passes validate_analysis_result unchanged
    """
    logger.warning("[FALLBACK] Using rule-based scoring - vision model unavailable")
    face_metrics = face_metrics or FaceMetrics()

    skin_score = calculate_skin_score(face_metrics.likelihood)
    breakdown: dict[str, FeatureAnalysis] = {
        category: FeatureAnalysis(score=score, description=BASELINE_DESCRIPTION, improvement=improvement)
        for category, (score, improvement) in BASELINE_FEATURES.items()
    }
    breakdown["skin"] = FeatureAnalysis(
        score=skin_score,
        description=(
            "Image quality suggests clear skin with good texture."
            if skin_score >= 7.5
            else "Unable to fully assess skin quality from this image."
        ),
        improvement=SKIN_IMPROVEMENT,
    )
    breakdown["symmetry"] = FeatureAnalysis(
        score=calculate_symmetry_score(face_metrics),
        description=SYMMETRY_DESCRIPTION,
        improvement=SYMMETRY_IMPROVEMENT,
    )

    ordered = {category: breakdown[category] for category in FEATURE_CATEGORIES}
    mean = sum(feature.score for feature in ordered.values()) / len(ordered)

    return AnalysisResult(
        score=round_score(mean),
        breakdown=ordered,
        tips=build_fallback_tips(face_metrics),
    )
