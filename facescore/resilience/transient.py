"""Transient infrastructure failure detection

Decides whether a failed vision call means "the model was unreachable"
(fall back to the deterministic scorer) or "the model answered badly"
(hard failure). Only the first case may be papered over.
"""

import asyncio
import logging

import httpx

from facescore.exceptions import ContentPolicyError, TransientInfraError, ValidationError

logger = logging.getLogger(__name__)

TRANSIENT_MESSAGE_MARKERS: tuple[str, ...] = (
    "timeout",
    "timed out",
    "connection",
    "unavailable",
    "network",
    "econnrefused",
    "etimedout",
)

# SDK exception classes, matched by name so both openai and anthropic qualify
TRANSIENT_EXCEPTION_NAMES: frozenset[str] = frozenset({
    "APITimeoutError",
    "APIConnectionError",
    "InternalServerError",
    "ServiceUnavailableError",
    "OverloadedError",
})


def is_transient_error(exc: BaseException) -> bool:
    """
    Determine whether an error is an infrastructure failure

    Transient:
    - timeouts (asyncio, httpx, SDK)
    - connection/network failures
    - upstream "unavailable" responses

    Never transient:
    - ValidationError and ContentPolicyError, whatever their message says
    - malformed JSON and every other error

    Args:
        exc: The exception raised by (or while reading) the external call

    Returns:
        True if the caller should fall back
    """
    if isinstance(exc, (ValidationError, ContentPolicyError)):
        return False

    if isinstance(exc, TransientInfraError):
        return True

    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return True

    if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError)):
        return True

    if exc.__class__.__name__ in TRANSIENT_EXCEPTION_NAMES:
        return True

    message = str(exc).lower()
    return any(marker in message for marker in TRANSIENT_MESSAGE_MARKERS)
