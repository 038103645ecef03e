"""
Unified error handling for cloudherd workflows and CLI commands.

Every workflow failure surfaces as one of the errors below. CLI commands
wrap their entry points with ``main_with_error_handling`` to turn them into
exit codes.

Exit Codes:
- 0: Success
- 10: Configuration error
- 11: Provider error (AWS call failed)
- 12: Invalid input
- 13: Convergence timeout
- 14: Precondition violation
- 127: Unknown/internal error
"""

from __future__ import annotations

import functools
import sys
import traceback
from enum import IntEnum
from typing import Any, Callable, TypeVar

import structlog
from botocore.exceptions import BotoCoreError, ClientError

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Standardized exit codes for CLI commands."""

    SUCCESS = 0
    CONFIG_ERROR = 10
    PROVIDER_ERROR = 11
    INVALID_INPUT = 12
    TIMEOUT = 13
    PRECONDITION_FAILED = 14
    UNKNOWN_ERROR = 127


class CloudHerdError(Exception):
    """Base exception for cloudherd errors with exit code support."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR
    show_traceback: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(CloudHerdError):
    """Raised for configuration-related errors."""

    exit_code = ExitCode.CONFIG_ERROR


class ProviderError(CloudHerdError):
    """Raised when the cloud provider fails a request."""

    exit_code = ExitCode.PROVIDER_ERROR


class TransientProviderError(ProviderError):
    """Raised when a retried provider call keeps failing."""


class InvalidInput(CloudHerdError):
    """Raised for blank identifiers, names or DNS keys/values."""

    exit_code = ExitCode.INVALID_INPUT


class ConvergenceTimeout(CloudHerdError):
    """Raised when a poll's deadline passes before its condition holds."""

    exit_code = ExitCode.TIMEOUT

    def __init__(
        self,
        message: str,
        *,
        timeout: float | None,
        label: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        merged = {"timeout": timeout}
        if label:
            merged["label"] = label
        merged.update(details or {})
        super().__init__(message, merged)
        self.timeout = timeout
        self.label = label


class PreconditionViolation(CloudHerdError):
    """Raised when an expected-exactly-one lookup finds zero or many matches."""

    exit_code = ExitCode.PRECONDITION_FAILED


def require(value: str | None, what: str) -> str:
    """Return ``value`` stripped, raising InvalidInput when it is blank."""
    normalized = (value or "").strip()
    if not normalized:
        raise InvalidInput(f"{what} must not be blank", {"field": what})
    return normalized


# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., int])


def main_with_error_handling(
    *,
    show_traceback: bool = False,
    log_errors: bool = True,
) -> Callable[[F], F]:
    """
    Decorator for CLI command functions that provides unified error handling.

    Args:
        show_traceback: If True, show full traceback for unexpected errors
        log_errors: If True, log errors to structlog

    Exit codes:
        - CloudHerdError subclasses: Uses the error's exit_code
        - botocore errors: PROVIDER_ERROR
        - KeyboardInterrupt: Returns 130 (standard for SIGINT)
        - Other exceptions: Returns 127 (unknown error)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except CloudHerdError as e:
                if log_errors:
                    logger.error(
                        "command_error",
                        error_type=type(e).__name__,
                        message=e.message,
                        exit_code=e.exit_code,
                        **e.details,
                    )
                if e.show_traceback or show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return e.exit_code
            except (ClientError, BotoCoreError) as e:
                if log_errors:
                    logger.error(
                        "provider_error",
                        error_type=type(e).__name__,
                        message=str(e),
                        exit_code=ExitCode.PROVIDER_ERROR,
                    )
                if show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return ExitCode.PROVIDER_ERROR
            except KeyboardInterrupt:
                if log_errors:
                    logger.info("command_interrupted")
                return 130  # Standard exit code for SIGINT
            except Exception as e:
                if log_errors:
                    logger.error(
                        "unexpected_error",
                        error_type=type(e).__name__,
                        message=str(e),
                        exit_code=ExitCode.UNKNOWN_ERROR,
                    )
                if show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator


def format_error_message(error: CloudHerdError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    return msg
