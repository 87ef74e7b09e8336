"""
Analysis result validation

Checks a parsed vision-model response before anything downstream trusts it.
Each failure raises ValidationError naming the exact field (category or tip
index), the value received and its type, so a misbehaving model can be
diagnosed from the log line alone.

Rules:
1. score - numeric after coercion, within [1.0, 10.0]
2. breakdown - all 8 categories, each with score, description (>= 10 chars)
   and improvement (>= 20 chars)
3. tips - list of at least 5, each with title (>= 5), description (>= 30)
   and timeframe (>= 5)
"""

import logging
import math
from collections.abc import Mapping
from typing import Any

from facescore.exceptions import ValidationError
from facescore.models.analysis import (
    FEATURE_CATEGORIES,
    MAX_SCORE,
    MIN_SCORE,
    MIN_TIPS,
    AnalysisResult,
)

logger = logging.getLogger(__name__)

FEATURE_TEXT_MIN_LENGTHS: dict[str, int] = {
    "description": 10,
    "improvement": 20,
}

TIP_TEXT_MIN_LENGTHS: dict[str, int] = {
    "title": 5,
    "description": 30,
    "timeframe": 5,
}


def _type_name(value: Any) -> str:
    return "null" if value is None else type(value).__name__


def coerce_score(value: Any) -> float | None:
    """
    Coerce a score to float

    Accepts ints, floats and numeric strings. Booleans, NaN and anything
    unparseable return None.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _check_score(value: Any, field: str, label: str) -> float:
    if value is None:
        raise ValidationError(
            message=f"Invalid {label} in AI response: score is missing or null",
            field=field,
            value=value
        )

    number = coerce_score(value)
    if number is None or number < MIN_SCORE or number > MAX_SCORE:
        raise ValidationError(
            message=(
                f"Invalid {label} in AI response: score must be between {MIN_SCORE} and {MAX_SCORE}, "
                f"but got {value!r} (type: {_type_name(value)})"
            ),
            field=field,
            value=value
        )
    return number


def _check_text(value: Any, min_length: int, field: str, label: str) -> None:
    if not isinstance(value, str) or len(value) < min_length:
        length = len(value) if isinstance(value, str) else 0
        raise ValidationError(
            message=(
                f"Invalid {label} in AI response: must be a string of at least {min_length} chars, "
                f"got {length} chars (type: {_type_name(value)})"
            ),
            field=field,
            value=value
        )


def validate_analysis_result(candidate: Any) -> None:
    """
    Enforce the analysis result contract on an untrusted candidate

    Args:
        candidate: Parsed JSON object of unknown shape

    Raises:
        ValidationError: on the first rule that fails
    """
    if not isinstance(candidate, Mapping):
        raise ValidationError(
            message=f"Invalid AI response: result is not an object. Received: {_type_name(candidate)}",
            field="result",
            value=candidate
        )

    _check_score(candidate.get("score"), "score", "overall score")

    breakdown = candidate.get("breakdown")
    if not isinstance(breakdown, Mapping):
        raise ValidationError(
            message=(
                "Invalid breakdown in AI response: breakdown is missing or not an object. "
                f"Received: {_type_name(breakdown)}"
            ),
            field="breakdown",
            value=breakdown
        )

    for category in FEATURE_CATEGORIES:
        feature = breakdown.get(category)
        if not isinstance(feature, Mapping):
            raise ValidationError(
                message=(
                    f"Missing {category} in AI response breakdown. "
                    f"Available keys: {', '.join(str(key) for key in breakdown.keys()) or 'none'}"
                ),
                field=f"breakdown.{category}",
                value=feature
            )

        _check_score(feature.get("score"), f"breakdown.{category}.score", f"{category} score")
        for text_field, min_length in FEATURE_TEXT_MIN_LENGTHS.items():
            _check_text(
                feature.get(text_field),
                min_length,
                f"breakdown.{category}.{text_field}",
                f"{category} {text_field}"
            )

    tips = candidate.get("tips")
    if tips is None:
        raise ValidationError(message="Missing tips array in AI response", field="tips", value=None)
    if not isinstance(tips, list):
        raise ValidationError(
            message=f"Invalid tips in AI response: tips must be an array, but got {_type_name(tips)}",
            field="tips",
            value=tips
        )
    if len(tips) < MIN_TIPS:
        raise ValidationError(
            message=f"Insufficient tips in AI response: need at least {MIN_TIPS} tips, but got {len(tips)}",
            field="tips",
            value=len(tips)
        )

    for index, tip in enumerate(tips):
        if not isinstance(tip, Mapping):
            raise ValidationError(
                message=f"Invalid tip at index {index} in AI response: tip is not an object. Received: {_type_name(tip)}",
                field=f"tips[{index}]",
                value=tip
            )
        for text_field, min_length in TIP_TEXT_MIN_LENGTHS.items():
            _check_text(
                tip.get(text_field),
                min_length,
                f"tips[{index}].{text_field}",
                f"tip {text_field} at index {index}"
            )


def parse_analysis_result(candidate: Any) -> AnalysisResult:
    """
    Validate a candidate and build the typed result

    Numeric strings are coerced to floats; extra keys are dropped.
    """
    validate_analysis_result(candidate)

    breakdown = {
        category: {
            "score": coerce_score(candidate["breakdown"][category]["score"]),
            "description": candidate["breakdown"][category]["description"],
            "improvement": candidate["breakdown"][category]["improvement"],
        }
        for category in FEATURE_CATEGORIES
    }
    tips = [
        {field: tip[field] for field in TIP_TEXT_MIN_LENGTHS}
        for tip in candidate["tips"]
    ]

    return AnalysisResult(
        score=coerce_score(candidate["score"]),
        breakdown=breakdown,
        tips=tips,
    )
