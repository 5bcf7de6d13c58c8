"""
Error Handling System
=====================

Nothing on the start page is fatal. Every failure path ends in a fallback
value (default palette, fallback coordinates, empty list); this module only
decides what gets written to the log and what reaches the toast.

- StartPageError and friends carry a technical message for the log and a
  short user message for the toast
- ErrorHandler records recent errors and forwards them to the UI hooks
- with_error_handling wraps session entry points so a failed write becomes
  a handled error plus a default return value
"""

# ============================================================================
# IMPORTS
# ============================================================================

import functools
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, List, Optional, TypeVar


# ============================================================================
# ERROR SEVERITY LEVELS
# ============================================================================

class ErrorSeverity(Enum):
    """Error severity levels"""
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# ============================================================================
# CUSTOM EXCEPTION HIERARCHY
# ============================================================================

class StartPageError(Exception):
    """Base exception for all start page errors"""

    default_severity: ClassVar[ErrorSeverity] = ErrorSeverity.ERROR
    default_user_message: ClassVar[Optional[str]] = None

    def __init__(
        self,
        message: str,
        severity: Optional[ErrorSeverity] = None,
        user_message: Optional[str] = None,
        context: Optional[dict] = None
    ):
        """
        Args:
            message: Technical error message (for logs)
            severity: Overrides the class default
            user_message: Toast text; falls back to the class default, then *message*
            context: Extra key/values for the log line
        """
        super().__init__(message)
        self.message = message
        self.severity = severity or self.default_severity
        self.user_message = user_message or self.default_user_message or message
        self.context = context or {}
        self.timestamp = time.time()

    def to_dict(self) -> dict:
        return {
            "type": type(self).__name__,
            "message": self.message,
            "user_message": self.user_message,
            "severity": self.severity.value,
            "context": self.context,
            "timestamp": self.timestamp,
        }


class ConfigurationError(StartPageError):
    """Unreadable or unsupported config file"""
    default_severity = ErrorSeverity.CRITICAL
    default_user_message = "Configuration error. Please check your settings."


class StorageError(StartPageError):
    """Preference write failed"""
    default_user_message = "Could not save your preferences."


class NetworkError(StartPageError):
    """Weather provider or IP lookup unreachable, or returned junk"""
    default_severity = ErrorSeverity.WARNING
    default_user_message = "Network error. Some features may be unavailable."


class GeolocationError(StartPageError):
    """Location lookup denied, failed or unsupported"""
    default_severity = ErrorSeverity.WARNING
    default_user_message = "Location access denied. Using default."


# ============================================================================
# ERROR CONTEXT
# ============================================================================

@dataclass
class ErrorContext:
    """Where an error happened"""
    operation: str
    component: str
    details: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "operation": self.operation,
            "component": self.component,
            "details": self.details,
        }


# ============================================================================
# ERROR HANDLER
# ============================================================================

class ErrorHandler:
    """Centralized error handling

    ``on_error`` receives every non-critical error the user should hear
    about (the session points it at the toast). ``on_critical_error`` takes
    CRITICAL errors instead, when set.
    """

    def __init__(self, logger, max_history: int = 100):
        """
        Args:
            logger: Anything with info() and error() (see ILogger)
            max_history: Number of recent errors kept for inspection
        """
        self.logger = logger
        self.max_history = max_history
        self.error_history: List[StartPageError] = []

        self.on_error: Optional[Callable[[StartPageError], None]] = None
        self.on_critical_error: Optional[Callable[[StartPageError], None]] = None

    def handle_error(
        self,
        error: Exception,
        context: Optional[ErrorContext] = None,
        notify_user: bool = True
    ):
        """
        Log *error*, remember it and pass it to the UI hooks.

        Exceptions from outside the hierarchy are wrapped as ERROR.
        """
        if not isinstance(error, StartPageError):
            error = StartPageError(
                f"{type(error).__name__}: {error}",
                context=context.to_dict() if context else None,
            )

        self._remember(error)
        self._log_error(error, context)

        if error.severity is ErrorSeverity.CRITICAL and self.on_critical_error:
            self.on_critical_error(error)
        elif notify_user and self.on_error:
            self.on_error(error)

    def _log_error(self, error: StartPageError, context: Optional[ErrorContext]):
        parts = [f"{error.severity.value}: {error.message}"]
        if context:
            parts.append(f"[{context.component}.{context.operation}]")
        if error.context:
            parts.append(f"[{error.context}]")
        line = " ".join(parts)

        if error.severity in (ErrorSeverity.CRITICAL, ErrorSeverity.ERROR):
            self.logger.error(line)
        else:
            self.logger.info(line)

    def _remember(self, error: StartPageError):
        self.error_history.append(error)
        del self.error_history[:-self.max_history]

    def get_recent_errors(self, count: int = 10) -> List[StartPageError]:
        return self.error_history[-count:]


# ============================================================================
# DECORATORS
# ============================================================================

T = TypeVar('T')


def with_error_handling(
    component: str,
    operation: str,
    default_return: Any = None,
    raise_on_error: bool = False
):
    """
    Route exceptions from a method through ``self.error_handler``.

    Usage:
        @with_error_handling("Session", "add_shortcut", default_return=False)
        def add_shortcut(self, name, url):
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            try:
                return func(self, *args, **kwargs)
            except Exception as e:
                error_handler = getattr(self, "error_handler", None)
                if error_handler is not None:
                    error_handler.handle_error(
                        e, ErrorContext(operation, component, {"function": func.__name__})
                    )
                if raise_on_error:
                    raise
                return default_return

        return wrapper
    return decorator
