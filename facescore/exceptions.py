"""
Exception hierarchy for the facial-analysis pipeline

Every error carries a request ID, a timestamp, structured context and a
user-facing message, and logs itself on creation.

The three classes that drive pipeline control flow:
- TransientInfraError: the vision model could not be reached. The caller
  substitutes the fallback scorer; users never see this error.
- ValidationError: the model broke its output contract. Hard failure.
- ContentPolicyError: the model output contains banned terminology.
  Hard failure, never downgraded to a fallback result.
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

import httpx
import psycopg

logger = logging.getLogger(__name__)

ANALYSIS_UNAVAILABLE_MESSAGE = "Analysis temporarily unavailable, please retry."


class FaceScoreError(Exception):
    """
    Base exception for all facescore errors

    Example:
        raise FaceScoreError(
            message="Failed to save analysis",
            user_id="user-123",
            operation="save_analysis",
            context={"analysis_id": "abc-123"}
        )
    """

    log_level: int = logging.ERROR

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,
            "request_id": self.request_id,
            "user_id": self.user_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.log(
                self.log_level,
                f"{self.__class__.__name__}: {self.message}",
                extra=log_data,
                exc_info=self.cause
            )
        else:
            logger.log(self.log_level, f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for API responses"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Analysis contract errors
# ==========================================

class ValidationError(FaceScoreError):
    """
    Raised when a candidate analysis result (or an input value) breaks its contract

    `field` is a path into the candidate such as "breakdown.jawline.score"
    or "tips[3].title"; `value` is what was actually received.

    Example:
        raise ValidationError(
            message="score must be between 1.0 and 10.0, got 10.5 (type: float)",
            field="score",
            value=10.5
        )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        kwargs.setdefault("user_message", ANALYSIS_UNAVAILABLE_MESSAGE)
        super().__init__(
            message=message,
            context={"field": field, "value": repr(value)[:200]},
            **kwargs
        )


class ContentPolicyError(FaceScoreError):
    """Model output contains banned terminology"""

    def __init__(self, message: str, matched_terms: Optional[list[str]] = None, **kwargs):
        self.matched_terms = list(matched_terms or [])
        super().__init__(
            message=message,
            user_message=ANALYSIS_UNAVAILABLE_MESSAGE,
            context={"matched_terms": self.matched_terms},
            **kwargs
        )


class VisionAnalysisError(FaceScoreError):
    """Vision model returned an unusable response (empty body, malformed JSON)"""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            user_message=ANALYSIS_UNAVAILABLE_MESSAGE,
            **kwargs
        )


# ==========================================
# Database Errors
# ==========================================

class DatabaseError(FaceScoreError):
    """
    Base class for database-related errors
    """
    pass


class QueryError(DatabaseError):
    """Database query execution failed"""

    def __init__(
        self,
        message: str,
        query: Optional[str] = None,
        **kwargs
    ):
        self.query = query
        super().__init__(
            message=message,
            user_message="We encountered an issue saving your data. Please try again.",
            context={"query": query},
            **kwargs
        )


class RecordNotFoundError(DatabaseError):
    """Requested database record does not exist"""

    def __init__(
        self,
        message: str,
        record_type: Optional[str] = None,
        record_id: Optional[str] = None,
        **kwargs
    ):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(
            message=message,
            user_message=f"{record_type or 'Record'} not found.",
            context={"record_type": record_type, "record_id": record_id},
            **kwargs
        )


# ==========================================
# External API Errors
# ==========================================

class ExternalAPIError(FaceScoreError):
    """
    Base class for external API failures
    """

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs
    ):
        self.service = service
        self.status_code = status_code
        kwargs.setdefault(
            "user_message",
            f"We're having trouble connecting to {service or 'an external service'}. Please try again later."
        )
        super().__init__(
            message=message,
            context={"service": service, "status_code": status_code},
            **kwargs
        )


class TransientInfraError(ExternalAPIError):
    """
    Vision model unreachable (timeout, connection failure, service unavailable)

    Recovered locally by the fallback scorer, so it is logged as a warning.
    """

    log_level = logging.WARNING


class OpenAIAPIError(ExternalAPIError):
    """OpenAI API error (vision, moderation)"""

    def __init__(self, message: str, **kwargs):
        super().__init__(message=message, service="OpenAI", **kwargs)


class AnthropicAPIError(ExternalAPIError):
    """Anthropic API error (vision)"""

    def __init__(self, message: str, **kwargs):
        super().__init__(message=message, service="Anthropic", **kwargs)


# ==========================================
# Authentication & Configuration
# ==========================================

class AuthenticationError(FaceScoreError):
    """Authentication failed"""

    log_level = logging.WARNING

    def __init__(
        self,
        message: str = "Authentication failed",
        **kwargs
    ):
        super().__init__(
            message=message,
            user_message="Authentication failed. Please check your credentials.",
            **kwargs
        )


class ConfigurationError(FaceScoreError):
    """System configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The system is not properly configured. Please contact support.",
            context={"config_key": config_key},
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_external_exception(
    error: Exception,
    operation: str,
    user_id: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> FaceScoreError:
    """
    Wrap driver/transport exceptions (psycopg, httpx) into our hierarchy

    Example:
        try:
            await cur.execute(query, params)
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="insert_analysis", user_id=user_id)
    """
    if isinstance(error, FaceScoreError):
        return error

    if isinstance(error, psycopg.Error):
        return QueryError(
            message=f"Database query failed: {error}",
            user_id=user_id,
            operation=operation,
            cause=error
        )

    if isinstance(error, (httpx.TimeoutException, httpx.ConnectError)):
        return TransientInfraError(
            message=f"{operation} could not reach the remote service: {error}",
            user_id=user_id,
            operation=operation,
            cause=error
        )

    if isinstance(error, httpx.HTTPStatusError):
        return ExternalAPIError(
            message=f"API returned error: {error.response.status_code}",
            status_code=error.response.status_code,
            user_id=user_id,
            operation=operation,
            cause=error
        )

    return FaceScoreError(
        message=f"{operation} failed: {error}",
        user_id=user_id,
        operation=operation,
        context=context,
        cause=error
    )
