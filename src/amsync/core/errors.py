"""
Unified error handling for amsync.

Every failure a reconciliation pass can surface is an ``AmsyncError``
subclass. The CLI converts them into exit codes; the watch loop logs them
and requeues the triggering event.

Exit Codes:
- 0: Success
- 10: Configuration error (local settings or malformed Alertmanager config)
- 11: Store error (secret store unreachable or secret missing)
- 127: Unknown/internal error
"""

from __future__ import annotations

import functools
import sys
import traceback
from enum import IntEnum
from typing import Any, Callable, TypeVar

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Standardized exit codes for CLI commands."""

    SUCCESS = 0
    CONFIG_ERROR = 10
    STORE_ERROR = 11
    UNKNOWN_ERROR = 127


class AmsyncError(Exception):
    """Base exception for amsync errors with exit code support."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR
    show_traceback: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(AmsyncError):
    """Raised for invalid local settings or CLI inputs."""

    exit_code = ExitCode.CONFIG_ERROR


class MalformedConfigError(AmsyncError):
    """Raised when the Alertmanager configuration document cannot be decoded."""

    exit_code = ExitCode.CONFIG_ERROR


class EncodeError(AmsyncError):
    """Raised when an in-memory configuration cannot be serialized."""

    exit_code = ExitCode.UNKNOWN_ERROR
    show_traceback = True


class StoreError(AmsyncError):
    """Base class for secret store failures."""

    exit_code = ExitCode.STORE_ERROR


class SecretNotFoundError(StoreError):
    """Raised when a secret does not exist in the store."""

    def __init__(self, namespace: str, name: str):
        super().__init__(
            f"Secret {namespace}/{name} not found",
            {"namespace": namespace, "name": name},
        )
        self.namespace = namespace
        self.name = name


class StoreUnavailableError(StoreError):
    """Raised for transient failures talking to the secret store."""


F = TypeVar("F", bound=Callable[..., int])


def main_with_error_handling(
    *,
    show_traceback: bool = False,
    log_errors: bool = True,
) -> Callable[[F], F]:
    """
    Decorator for CLI command functions that maps exceptions to exit codes.

    Args:
        show_traceback: If True, show full traceback for unexpected errors
        log_errors: If True, log errors to structlog

    Exit codes:
        - AmsyncError subclasses: Uses the error's exit_code
        - KeyboardInterrupt: Returns 130 (standard for SIGINT)
        - Other exceptions: Returns 127 (unknown error)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except AmsyncError as e:
                if log_errors:
                    logger.error(
                        "command_error",
                        error_type=type(e).__name__,
                        message=e.message,
                        exit_code=e.exit_code,
                        **e.details,
                    )
                print_error(e)
                if e.show_traceback or show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return e.exit_code
            except KeyboardInterrupt:
                if log_errors:
                    logger.info("command_interrupted")
                return 130
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


def format_error_message(error: AmsyncError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    return msg


def print_error(error: AmsyncError) -> None:
    """Print an error for the user on the console."""
    from amsync.cli.ux import error as print_ux_error

    print_ux_error(format_error_message(error))
