import traceback
import functools
from enum import Enum
from typing import Dict, Optional, Any, Type, Union
from datetime import datetime

from telegram import Update

from nearby_weather.const import APP_TZ
from nearby_weather.event_system import EventBus, EventType
from nearby_weather.logger import error_logger


class ErrorSeverity(Enum):
    """Error severity levels for categorizing errors"""

    LOW = "low"  # Degraded presentation, screen still usable
    MEDIUM = "medium"  # A feature of the screen is unavailable
    HIGH = "high"  # The screen cannot render
    CRITICAL = "critical"  # The application cannot continue


class ErrorCategory(Enum):
    """Categories for classifying different types of errors"""

    NETWORK = "network"
    API = "api"
    DATA = "data"  # Missing or inconsistent weather data
    PARSING = "parsing"
    INPUT = "input"
    PERMISSION = "permission"
    GENERAL = "general"


class StandardError(Exception):
    """
    Standard error class for consistent handling across the application.

    Attributes:
        message: Primary error message
        severity: Error severity level
        category: Error category
        context: Additional contextual information
        original_exception: The original exception that was caught
    """

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.GENERAL,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
    ):
        self.message = message
        self.severity = severity
        self.category = category
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(APP_TZ)

        formatted_message = f"{message}"
        if original_exception:
            formatted_message += f" | Original error: {str(original_exception)[:50]}"

        super().__init__(formatted_message)

    def __str__(self):
        base = f"[{self.severity.value.upper()}] {self.category.value}: {self.message}"
        if self.original_exception:
            exc_name = type(self.original_exception).__name__
            base += f" (Caused by: {exc_name}: {self.original_exception})"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging or serialization"""
        result = {
            "message": self.message,
            "severity": self.severity.value,
            "category": self.category.value,
            "timestamp": self.timestamp.isoformat(),
            "context": self.context,
        }

        if self.original_exception:
            result["original_exception"] = {
                "type": type(self.original_exception).__name__,
                "message": str(self.original_exception),
            }

        return result


class ErrorHandler:
    """
    Central error handler: standardizes exceptions, logs them and tells
    observers about them.
    """

    DEFAULT_EXCEPTION_MAPPING: Dict[Type[Exception], ErrorCategory] = {
        ConnectionError: ErrorCategory.NETWORK,
        TimeoutError: ErrorCategory.NETWORK,
        PermissionError: ErrorCategory.PERMISSION,
        KeyError: ErrorCategory.PARSING,
        ValueError: ErrorCategory.INPUT,
        TypeError: ErrorCategory.PARSING,
        LookupError: ErrorCategory.DATA,
    }

    @staticmethod
    def standardize(
        error: Exception,
        context_data: Optional[Dict[str, Any]] = None,
    ) -> StandardError:
        """Wrap any exception into a StandardError."""
        if isinstance(error, StandardError):
            if context_data:
                error.context.update(context_data)
            return error

        category = ErrorCategory.GENERAL
        for exc_type in type(error).__mro__:
            if exc_type in ErrorHandler.DEFAULT_EXCEPTION_MAPPING:
                category = ErrorHandler.DEFAULT_EXCEPTION_MAPPING[exc_type]
                break

        return StandardError(
            message=str(error) or type(error).__name__,
            category=category,
            context=dict(context_data or {}),
            original_exception=error,
        )

    @staticmethod
    def format_error_message(error: Union[StandardError, Exception], prefix: Optional[str] = None) -> str:
        """Format an error message with consistent structure and emoji for logging."""
        emoji = "⚠️"
        if isinstance(error, StandardError):
            if error.severity == ErrorSeverity.HIGH:
                emoji = "🚨"
            elif error.severity == ErrorSeverity.CRITICAL:
                emoji = "💥"
            elif error.severity == ErrorSeverity.LOW:
                emoji = "ℹ️"
        if prefix:
            emoji = prefix

        parts = [f"{emoji} Error"]
        if isinstance(error, StandardError):
            parts.append(f"Type: {error.category.value}")
            parts.append(f"Severity: {error.severity.value}")
            parts.append(f"Message: {error.message}")
            for key, value in error.context.items():
                parts.append(f"{key}: {value}")
        else:
            parts.append(f"Type: {type(error).__name__}")
            parts.append(f"Message: {error}")

        tb = traceback.format_exc()
        if tb and tb != "NoneType: None\n":
            parts.append(f"Traceback: {tb}")

        return "\n".join(parts)

    @staticmethod
    async def handle_error(
        error: Exception,
        update: Optional[Update] = None,
        feedback_message: Optional[str] = None,
        context_data: Optional[Dict[str, Any]] = None,
        event_bus: Optional[EventBus] = None,
        source: str = "error_handler",
        propagate: bool = False,
    ) -> StandardError:
        """Handle an exception with consistent logging and optional user feedback.

        Args:
            error: The exception to handle
            update: Optional Telegram update used for user feedback
            feedback_message: Message to reply with when an update is given
            context_data: Additional context data to include with the error
            event_bus: Bus that receives an ERROR_OCCURRED event
            source: Name of the component reporting the error
            propagate: Whether to re-raise the exception after handling

        Returns:
            StandardError: The standardized error object
        """
        std_error = ErrorHandler.standardize(error, context_data)

        error_logger.error(ErrorHandler.format_error_message(std_error))

        if event_bus is not None:
            await event_bus.publish_event(EventType.ERROR_OCCURRED, source, std_error.to_dict())

        if feedback_message and update is not None and update.effective_message:
            try:
                await update.effective_message.reply_text(feedback_message)
            except Exception as e:
                error_logger.error(f"Error sending feedback message: {e}")

        if propagate:
            raise error

        return std_error


def handle_errors(feedback_message: Optional[str] = None):
    """
    Decorator for handling errors in async Telegram handlers.

    Args:
        feedback_message: Optional message to send to the user on error
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                update = next((arg for arg in args if isinstance(arg, Update)), None)
                await ErrorHandler.handle_error(
                    error=e,
                    update=update,
                    feedback_message=feedback_message,
                    source=func.__name__,
                )
                return None
        return wrapper
    return decorator
