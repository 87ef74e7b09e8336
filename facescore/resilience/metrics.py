"""Prometheus metrics for the analysis pipeline

Exposes counters for external API calls, failures, fallback usage and
achievement/goal side effects. Metrics are served on /metrics.
"""

import logging
from typing import Optional
from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)

# Labels: api (openai_vision/anthropic_vision/openai_moderation), status (success/failure)
api_calls_total = Counter(
    'facescore_api_calls_total',
    'Total number of external API calls',
    ['api', 'status']
)

api_call_duration = Histogram(
    'facescore_api_call_duration_seconds',
    'Duration of external API calls in seconds',
    ['api'],
    buckets=(0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, float('inf'))
)

# Labels: api, error_type (exception class name)
api_failures_total = Counter(
    'facescore_api_failures_total',
    'Total number of external API failures',
    ['api', 'error_type']
)

# Labels: primary, fallback_strategy, status (success/failure)
fallback_executions_total = Counter(
    'facescore_fallback_executions_total',
    'Total number of fallback strategy executions',
    ['primary', 'fallback_strategy', 'status']
)

# Labels: source (vision/fallback)
analyses_total = Counter(
    'facescore_analyses_total',
    'Total number of scored analyses',
    ['source']
)

achievements_unlocked_total = Counter(
    'facescore_achievements_unlocked_total',
    'Total number of achievements unlocked',
    ['achievement_key']
)

goals_completed_total = Counter(
    'facescore_goals_completed_total',
    'Total number of goals completed'
)


def record_api_call(api: str, success: bool, duration: Optional[float] = None) -> None:
    """
    Record API call metrics.

    Args:
        api: API name (openai_vision, anthropic_vision, openai_moderation)
        success: Whether the call succeeded
        duration: Call duration in seconds, if measured
    """
    try:
        status = 'success' if success else 'failure'
        api_calls_total.labels(api=api, status=status).inc()
        if duration is not None:
            api_call_duration.labels(api=api).observe(duration)
        logger.debug(f"[METRICS] API call {api}: {status}")
    except Exception as e:
        logger.error(f"Failed to record API call metrics: {e}")


def record_api_failure(api: str, error_type: str) -> None:
    """Record API failure by exception class name."""
    try:
        api_failures_total.labels(api=api, error_type=error_type).inc()
        logger.debug(f"[METRICS] API failure {api}: {error_type}")
    except Exception as e:
        logger.error(f"Failed to record API failure: {e}")


def record_fallback(primary: str, fallback_strategy: str, success: bool) -> None:
    """Record fallback strategy execution."""
    try:
        status = 'success' if success else 'failure'
        fallback_executions_total.labels(
            primary=primary,
            fallback_strategy=fallback_strategy,
            status=status
        ).inc()
        logger.debug(f"[METRICS] Fallback {primary} -> {fallback_strategy}: {status}")
    except Exception as e:
        logger.error(f"Failed to record fallback: {e}")


def record_analysis(source: str) -> None:
    try:
        analyses_total.labels(source=source).inc()
    except Exception as e:
        logger.error(f"Failed to record analysis: {e}")


def record_achievement_unlock(achievement_key: str) -> None:
    try:
        achievements_unlocked_total.labels(achievement_key=achievement_key).inc()
    except Exception as e:
        logger.error(f"Failed to record achievement unlock: {e}")


def record_goal_completed() -> None:
    try:
        goals_completed_total.inc()
    except Exception as e:
        logger.error(f"Failed to record goal completion: {e}")
