"""Core modules for cloudherd - centralized error definitions."""

from cloudherd.core.errors import (
    CloudHerdError,
    ConfigurationError,
    ConvergenceTimeout,
    ExitCode,
    InvalidInput,
    PreconditionViolation,
    ProviderError,
    TransientProviderError,
    format_error_message,
    main_with_error_handling,
    require,
)

__all__ = [
    "ExitCode",
    "CloudHerdError",
    "ConfigurationError",
    "ProviderError",
    "TransientProviderError",
    "InvalidInput",
    "ConvergenceTimeout",
    "PreconditionViolation",
    "main_with_error_handling",
    "format_error_message",
    "require",
]
