"""Resilience patterns for external API calls

Transient-failure classification, priority-ordered fallback execution and
Prometheus metrics for the vision pipeline.
"""

from facescore.resilience.transient import is_transient_error
from facescore.resilience.fallback import execute_with_fallbacks, FallbackStrategy
from facescore.resilience.metrics import (
    record_api_call,
    record_api_failure,
    record_fallback,
    record_analysis,
    record_achievement_unlock,
    record_goal_completed,
)

__all__ = [
    # Classification
    "is_transient_error",
    # Fallback
    "execute_with_fallbacks",
    "FallbackStrategy",
    # Metrics
    "record_api_call",
    "record_api_failure",
    "record_fallback",
    "record_analysis",
    "record_achievement_unlock",
    "record_goal_completed",
]
