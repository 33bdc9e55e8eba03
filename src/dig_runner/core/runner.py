"""Runs dig and turns its answer section into structured records."""

import logging
import shutil
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol, Sequence

from dig_runner.core.config import Settings, get_settings
from dig_runner.core.models import QueryResult, format_elapsed_ms
from dig_runner.core.outcome import Err, Ok, Outcome
from dig_runner.core.process import (
    CompletedCommand,
    TimeoutStrategy,
    run_command,
    select_timeout_strategy,
)
from dig_runner.dns.parser import parse_answer
from dig_runner.dns.validation import QueryRequest, validate_request
from dig_runner.utils.exceptions import (
    DigRunnerError,
    ExecutionFailed,
    QueryTimeout,
    Unavailable,
)

logger = logging.getLogger(__name__)

DEFAULT_SERVER = "8.8.8.8"
DEFAULT_TIMEOUT = 10

DIG_OPTIONS = ("+noall", "+answer")


class CommandExecutor(Protocol):
    """Protocol for running an external command."""

    def __call__(self, argv: Sequence[str], deadline: float) -> CompletedCommand: ...


def build_dig_argv(binary: str, request: QueryRequest) -> List[str]:
    """Build the dig argument vector, one element per value."""
    return [
        binary,
        f"@{request.server}",
        request.domain,
        request.record_type,
        *DIG_OPTIONS,
    ]


@dataclass
class QueryRunner:
    """Validates a query, runs dig once and parses the answer."""

    settings: Settings = field(default_factory=get_settings)
    strategy: Optional[TimeoutStrategy] = None
    executor: CommandExecutor = run_command
    which: Callable[[str], Optional[str]] = shutil.which

    def __post_init__(self):
        if self.strategy is None:
            self.strategy = select_timeout_strategy(self.settings)

    def query(
        self,
        domain: str,
        record_type: str,
        server: str = DEFAULT_SERVER,
        timeout_seconds: int = DEFAULT_TIMEOUT,
    ) -> Outcome[QueryResult]:
        """Run a lookup and return Ok(QueryResult) or Err(error)."""
        try:
            return Ok(self._run(domain, record_type, server, timeout_seconds))
        except DigRunnerError as e:
            return Err(e)

    def run(
        self,
        domain: str,
        record_type: str,
        server: str = DEFAULT_SERVER,
        timeout_seconds: int = DEFAULT_TIMEOUT,
    ) -> QueryResult:
        """
        Run a lookup and return its result.

        Raises:
            InvalidArgument: an argument failed validation
            Unavailable: dig is missing or could not be spawned
            ExecutionFailed: dig exited non-zero or timed out
        """
        return self.query(domain, record_type, server, timeout_seconds).unwrap()

    def _run(
        self,
        domain: str,
        record_type: str,
        server: str,
        timeout_seconds: int,
    ) -> QueryResult:
        request = validate_request(
            domain,
            record_type,
            server,
            timeout_seconds,
            ceiling=self.settings.timeout_ceiling,
        )

        binary = self.which(self.settings.dig_binary)

        if binary is None:
            raise Unavailable("The 'dig' command is not available on this system.")

        argv = self.strategy.build(
            build_dig_argv(binary, request), request.timeout_seconds
        )
        logger.debug(f"Running {argv}")

        start = time.perf_counter()
        completed = self.executor(argv, self.strategy.deadline(request.timeout_seconds))
        end = time.perf_counter()

        if self.strategy.timed_out(completed.returncode):
            raise QueryTimeout(
                f"DNS lookup timed out after {request.timeout_seconds} seconds",
                stderr=completed.stderr,
                returncode=completed.returncode,
            )

        if completed.returncode != 0:
            logger.warning(
                f"dig exited with status {completed.returncode} for "
                f"{request.domain} {request.record_type} @{request.server}"
            )
            raise ExecutionFailed(
                f"Error occurred during DNS lookup: {completed.stderr}",
                stderr=completed.stderr,
                returncode=completed.returncode,
            )

        return QueryResult(
            raw_output=completed.stdout,
            records=parse_answer(completed.stdout),
            execution_time_ms=format_elapsed_ms(start, end),
        )


def run(
    domain: str,
    record_type: str,
    server: str = DEFAULT_SERVER,
    timeout_seconds: int = DEFAULT_TIMEOUT,
) -> QueryResult:
    """Run a single dig lookup with the default runner."""
    return QueryRunner().run(domain, record_type, server, timeout_seconds)


def query(
    domain: str,
    record_type: str,
    server: str = DEFAULT_SERVER,
    timeout_seconds: int = DEFAULT_TIMEOUT,
) -> Outcome[QueryResult]:
    """Run a single dig lookup with the default runner, returning an outcome."""
    return QueryRunner().query(domain, record_type, server, timeout_seconds)
