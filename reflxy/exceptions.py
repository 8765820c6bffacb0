"""
Standardized exception hierarchy for reflxy
Provides rich context, consistent logging, and user-friendly error messages

The pattern engine itself never raises: these exceptions cover the layers
around it (sample validation, the insight store, the text rewriter).
"""

import asyncio
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

import openai

logger = logging.getLogger(__name__)


class ReflxyError(Exception):
    """
    Base exception for all reflxy errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise ReflxyError(
            message="Failed to store pattern insight",
            user_id="user-123",
            operation="upsert_insight",
            context={"fingerprint": "temporal:delayed:10"}
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
# Validation Errors (caller input)
# ==========================================

class ValidationError(ReflxyError):
    """
    Raised when caller input fails validation

    Example:
        raise ValidationError(
            message="User ID cannot be empty",
            field="user_id",
            value=""
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
# Store Errors
# ==========================================

class StoreError(ReflxyError):
    """
    Base class for insight store errors
    """

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            user_message="We couldn't load your insight history. Please try again.",
            **kwargs
        )


# ==========================================
# External API Errors
# ==========================================

class ExternalAPIError(ReflxyError):
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
        super().__init__(
            message=message,
            user_message=f"We're having trouble connecting to {service or 'an external service'}. Please try again later.",
            context={"service": service, "status_code": status_code},
            **kwargs
        )


class InsightRewriteError(ExternalAPIError):
    """Text generation rewrite of a pattern insight failed or was rejected"""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            service="OpenAI",
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_external_exception(
    error: Exception,
    operation: str,
    user_id: Optional[str] = None
) -> ReflxyError:
    """
    Wrap external exceptions (openai, asyncio timeouts) into our exception hierarchy

    Args:
        error: Original exception
        operation: What operation was being performed
        user_id: User ID if applicable

    Returns:
        Appropriate ReflxyError subclass

    Example:
        try:
            await client.chat.completions.create(...)
        except openai.OpenAIError as e:
            raise wrap_external_exception(e, operation="rewrite_insight")
    """
    if isinstance(error, (asyncio.TimeoutError, openai.APITimeoutError)):
        return InsightRewriteError(
            message=f"Insight rewrite timed out: {str(error) or type(error).__name__}",
            user_id=user_id,
            operation=operation,
            cause=error
        )
    elif isinstance(error, openai.APIStatusError):
        return InsightRewriteError(
            message=f"OpenAI returned error: {error.status_code}",
            status_code=error.status_code,
            user_id=user_id,
            operation=operation,
            cause=error
        )
    elif isinstance(error, openai.OpenAIError):
        return InsightRewriteError(
            message=f"OpenAI request failed: {str(error)}",
            user_id=user_id,
            operation=operation,
            cause=error
        )

    # Generic fallback
    return ReflxyError(
        message=f"{operation} failed: {str(error)}",
        user_id=user_id,
        operation=operation,
        cause=error
    )
