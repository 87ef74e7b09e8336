"""Fallback strategies for degraded operation

Tries strategies in priority order, but only moves on when the failure is
one the caller has declared recoverable. Any other exception propagates
immediately, so a contract or content-policy violation is never hidden
behind a lower-fidelity result.
"""

import logging
from typing import Any, Awaitable, Callable, Generic, List, Tuple, Type, TypeVar
from dataclasses import dataclass

from facescore.resilience.metrics import record_fallback

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass
class FallbackStrategy(Generic[T]):
    """
    Defines a fallback strategy with priority ordering.

    Attributes:
        name: Human-readable name for logging and metrics
        handler: Async callable that implements the strategy
        priority: Priority level (lower = higher priority, 1 = primary)
    """
    name: str
    handler: Callable[..., Awaitable[T]]
    priority: int


async def execute_with_fallbacks(
    strategies: List[FallbackStrategy[T]],
    *args: Any,
    recoverable: Tuple[Type[BaseException], ...] = (Exception,),
    **kwargs: Any
) -> Tuple[str, T]:
    """
    Execute strategies in priority order until one succeeds.

    Args:
        strategies: Strategies to try
        recoverable: Exception types that allow moving to the next strategy
        *args, **kwargs: Arguments passed to every handler

    Returns:
        (name of the strategy that succeeded, its result)

    Raises:
        The first non-recoverable exception, or the last recoverable one
        when every strategy failed

    Example:
        strategies = [
            FallbackStrategy("vision", score_with_model, priority=1),
            FallbackStrategy("rule_based", score_without_model, priority=2),
        ]
        name, result = await execute_with_fallbacks(
            strategies, image_ref, recoverable=(TransientInfraError,)
        )
    """
    if not strategies:
        raise ValueError("At least one strategy is required")

    sorted_strategies = sorted(strategies, key=lambda s: s.priority)
    primary = sorted_strategies[0].name
    last_exception: BaseException | None = None

    for strategy in sorted_strategies:
        try:
            logger.info(f"[FALLBACK] Trying strategy: {strategy.name}")
            result = await strategy.handler(*args, **kwargs)
        except recoverable as e:
            logger.warning(
                f"[FALLBACK] Strategy '{strategy.name}' failed: "
                f"{type(e).__name__}: {e}"
            )
            if strategy.priority > 1:
                record_fallback(primary, strategy.name, success=False)
            last_exception = e
            continue

        logger.info(f"[FALLBACK] Strategy '{strategy.name}' succeeded")
        if strategy.priority > 1:
            record_fallback(primary, strategy.name, success=True)
        return strategy.name, result

    logger.error(f"[FALLBACK] All {len(sorted_strategies)} fallback strategies exhausted")
    raise last_exception
