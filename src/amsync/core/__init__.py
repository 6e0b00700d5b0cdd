"""Core modules for amsync - error taxonomy and exit codes."""

from amsync.core.errors import (
    AmsyncError,
    ConfigurationError,
    EncodeError,
    ExitCode,
    MalformedConfigError,
    SecretNotFoundError,
    StoreError,
    StoreUnavailableError,
    format_error_message,
    print_error,
    main_with_error_handling,
)

__all__ = [
    "ExitCode",
    "AmsyncError",
    "ConfigurationError",
    "MalformedConfigError",
    "EncodeError",
    "StoreError",
    "SecretNotFoundError",
    "StoreUnavailableError",
    "main_with_error_handling",
    "format_error_message",
    "print_error",
]
