"""Custom exceptions and error handling utilities."""

import logging
from typing import Optional

import sentry_sdk

from dig_runner.core.config import get_settings

logger = logging.getLogger(__name__)


class DigRunnerError(Exception):
    """Base exception for dig runner errors."""


class InvalidArgument(DigRunnerError):
    """A query argument failed validation."""


class Unavailable(DigRunnerError):
    """The lookup tool is missing or could not be spawned."""


class ExecutionFailed(DigRunnerError):
    """The lookup tool ran but did not complete successfully."""

    def __init__(
        self,
        message: str,
        stderr: str = "",
        returncode: Optional[int] = None,
    ):
        super().__init__(message)
        self.stderr = stderr
        self.returncode = returncode


class QueryTimeout(ExecutionFailed):
    """The lookup tool was killed after exceeding its timeout."""


def capture_exception(
    exception: Exception,
    context: Optional[dict] = None,
    level: str = "error",
) -> None:
    """
    Capture exception to Sentry if configured, otherwise log it.

    Args:
        exception: The exception to capture
        context: Additional context to include
        level: Log level ('error', 'warning', 'info')
    """
    settings = get_settings()

    # Log locally
    log_func = getattr(logger, level, logger.error)
    log_func("%s: %s", type(exception).__name__, exception, exc_info=exception)

    # Send to Sentry if configured
    if settings.sentry_dsn:
        if context:
            with sentry_sdk.push_scope() as scope:
                for key, value in context.items():
                    scope.set_extra(key, value)
                sentry_sdk.capture_exception(exception)
        else:
            sentry_sdk.capture_exception(exception)


def is_expected_query_error(exception: Exception) -> bool:
    """Check if exception is an expected query error (bad input, timeout)."""
    return isinstance(exception, (InvalidArgument, QueryTimeout))
