"""External process execution with enforced timeouts."""

import logging
import os
import shutil
import signal
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from dig_runner.core.config import Settings, get_settings
from dig_runner.utils.exceptions import ExecutionFailed, QueryTimeout, Unavailable

logger = logging.getLogger(__name__)

# Exit status used by coreutils timeout when the command timed out
TIMEOUT_EXIT_STATUS = 124

_POSIX = os.name == "posix"


@dataclass(frozen=True)
class CompletedCommand:
    """Captured result of a finished process."""

    returncode: int
    stdout: str
    stderr: str


class TimeoutStrategy(Protocol):
    """Builds a timeout-enforcing command line."""

    name: str

    def build(self, argv: Sequence[str], timeout_seconds: int) -> List[str]: ...

    def deadline(self, timeout_seconds: int) -> float: ...

    def timed_out(self, returncode: int) -> bool: ...


@dataclass(frozen=True)
class NativeTimeoutWrapper:
    """Prefix the command with the platform's timeout program."""

    binary: str = "timeout"
    grace_seconds: float = 2.0
    name: str = "native"

    def build(self, argv: Sequence[str], timeout_seconds: int) -> List[str]:
        return [self.binary, str(timeout_seconds), *argv]

    def deadline(self, timeout_seconds: int) -> float:
        # Backstop in case the wrapper itself hangs
        return timeout_seconds + self.grace_seconds

    def timed_out(self, returncode: int) -> bool:
        return returncode == TIMEOUT_EXIT_STATUS


@dataclass(frozen=True)
class SupervisedTimeout:
    """Run the command as-is and rely on the supervisory timer."""

    name: str = "supervised"

    def build(self, argv: Sequence[str], timeout_seconds: int) -> List[str]:
        return list(argv)

    def deadline(self, timeout_seconds: int) -> float:
        return float(timeout_seconds)

    def timed_out(self, returncode: int) -> bool:
        return False


def select_timeout_strategy(settings: Optional[Settings] = None) -> TimeoutStrategy:
    """Pick the native wrapper when the platform has one, else supervision."""
    if settings is None:
        settings = get_settings()

    if settings.use_native_timeout and _POSIX:
        binary = shutil.which(settings.timeout_binary)

        if binary:
            return NativeTimeoutWrapper(
                binary=binary, grace_seconds=settings.kill_grace_seconds
            )

    return SupervisedTimeout()


def _kill_process_group(proc: subprocess.Popen) -> None:
    """Kill the process and, on POSIX, everything in its process group."""
    if _POSIX:
        try:
            os.killpg(proc.pid, signal.SIGKILL)
            return
        except ProcessLookupError:
            return
        except PermissionError:
            pass

    proc.kill()


def run_command(argv: Sequence[str], deadline: float) -> CompletedCommand:
    """
    Spawn argv without a shell and collect stdout and stderr separately.

    The child runs in its own session on POSIX so that expiry of the
    deadline kills the whole process group. Pipes are closed and the
    process is reaped on every exit path.

    Raises:
        Unavailable: the process could not be spawned
        QueryTimeout: the deadline expired and the process was killed
        ExecutionFailed: reading the output streams failed
    """
    try:
        proc = subprocess.Popen(
            list(argv),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            start_new_session=_POSIX,
        )
    except OSError as e:
        raise Unavailable(f"Failed to execute the dig command: {e}") from e

    with proc:
        try:
            stdout, stderr = proc.communicate(timeout=deadline)
        except subprocess.TimeoutExpired as e:
            _kill_process_group(proc)
            _, stderr = proc.communicate()
            raise QueryTimeout(
                f"DNS lookup timed out after {deadline:g} seconds",
                stderr=_decode(stderr),
                returncode=proc.returncode,
            ) from e
        except OSError as e:
            _kill_process_group(proc)
            proc.wait()
            raise ExecutionFailed(f"Failed to read dig output: {e}") from e

    return CompletedCommand(
        returncode=proc.returncode,
        stdout=_decode(stdout),
        stderr=_decode(stderr),
    )


def _decode(data: Optional[bytes]) -> str:
    if not data:
        return ""

    return data.decode("utf-8", errors="replace")
