"""
Standardized exception hierarchy for mission-engine
Provides rich context, consistent logging, and user-friendly error messages
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class MissionEngineError(Exception):
    """
    Base exception for all mission-engine errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise MissionEngineError(
            message="Failed to save engine state",
            user_id="123456",
            operation="save_state",
            context={"path": "data/state.json"}
        )
    """

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

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # Avoid conflict with logging's 'message' field
            "request_id": self.request_id,
            "user_id": self.user_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data)


# ==========================================
# Validation Errors
# ==========================================

class ValidationError(MissionEngineError):
    """
    Raised when a value handed to the engine is out of range

    Examples:
    - Negative XP reward
    - Mission without a title

    Example:
        raise ValidationError(
            message="Reward must be non-negative",
            field="reward",
            value=-5
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
        super().__init__(
            message=message,
            user_message=f"Invalid {field}: {message}" if field else message,
            context={"field": field, "value": value},
            **kwargs
        )


# ==========================================
# External API Errors
# ==========================================

class ExternalAPIError(MissionEngineError):
    """
    Base class for external API failures
    """

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        status_code: Optional[int] = None,
        user_message: Optional[str] = None,
        **kwargs
    ):
        self.service = service
        self.status_code = status_code
        super().__init__(
            message=message,
            user_message=user_message or f"We're having trouble connecting to {service or 'an external service'}. Please try again later.",
            context={"service": service, "status_code": status_code},
            **kwargs
        )


class MissionGenerationError(ExternalAPIError):
    """Mission generator returned an error or content we could not parse"""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("service", "Mission generator")
        super().__init__(
            message=message,
            user_message="Failed to generate mission. Please try again later.",
            **kwargs
        )


class GenerationTimeoutError(MissionGenerationError):
    """Mission generation did not finish within the configured timeout"""

    def __init__(self, timeout: float, **kwargs):
        self.timeout = timeout
        super().__init__(
            message=f"Mission generation timed out after {timeout:.1f}s",
            **kwargs
        )


class CircuitBreakerOpenError(ExternalAPIError):
    """Calls to the service are short-circuited while its breaker is open"""

    def __init__(self, breaker_name: str, **kwargs):
        self.breaker_name = breaker_name
        super().__init__(
            message=f"Circuit breaker {breaker_name} is open",
            service=breaker_name,
            **kwargs
        )


# ==========================================
# Storage Errors
# ==========================================

class StorageError(MissionEngineError):
    """Engine state could not be read or written"""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        **kwargs
    ):
        self.path = path
        super().__init__(
            message=message,
            user_message="We couldn't save your progress. Please try again.",
            context={"path": path},
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_external_exception(
    error: Exception,
    operation: str,
    user_id: Optional[str] = None
) -> MissionEngineError:
    """
    Wrap external exceptions (httpx, json, etc.) into our exception hierarchy

    Args:
        error: Original exception
        operation: What operation was being performed
        user_id: User ID if applicable

    Returns:
        Appropriate MissionEngineError subclass

    Example:
        try:
            await client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise wrap_external_exception(e, operation="generate_missions")
    """
    # Import here to avoid circular dependencies
    import httpx
    import pybreaker

    if isinstance(error, MissionEngineError):
        return error

    if isinstance(error, pybreaker.CircuitBreakerError):
        return CircuitBreakerOpenError(
            breaker_name="mission_generator",
            user_id=user_id,
            operation=operation,
            cause=error
        )
    elif isinstance(error, httpx.TimeoutException):
        return MissionGenerationError(
            message=f"API request timed out: {str(error)}",
            user_id=user_id,
            operation=operation,
            cause=error
        )
    elif isinstance(error, httpx.HTTPStatusError):
        return MissionGenerationError(
            message=f"API returned error: {error.response.status_code}",
            status_code=error.response.status_code,
            user_id=user_id,
            operation=operation,
            cause=error
        )
    elif isinstance(error, (ValueError, KeyError, TypeError)):
        return MissionGenerationError(
            message=f"Malformed mission content: {str(error)}",
            user_id=user_id,
            operation=operation,
            cause=error
        )

    # Generic fallback
    return MissionEngineError(
        message=f"{operation} failed: {str(error)}",
        user_id=user_id,
        operation=operation,
        cause=error
    )
