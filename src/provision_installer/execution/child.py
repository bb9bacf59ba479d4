"""Child process attached to a pseudo-terminal."""

from __future__ import annotations

import errno
import logging
import os
import pty
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)


class ReapState(Enum):
    """What a wait on the child told us."""
    KNOWN = "known"          # exit status collected
    PENDING = "pending"      # still running
    CONSUMED = "consumed"    # already reaped elsewhere, nothing learned


@dataclass(frozen=True)
class ReapResult:
    state: ReapState
    exit_code: Optional[int] = None


def exit_code_from_status(status: int) -> int:
    """Exit code for a raw wait status. Signals map to 128 + signal number."""
    if os.WIFSIGNALED(status):
        return 128 + os.WTERMSIG(status)
    return os.WEXITSTATUS(status)


class ChildProcess:
    """Handle on a spawned child.

    Output is read with :meth:`lines`, which can be iterated only once.
    Termination is observed separately with :meth:`poll` and :meth:`wait`.
    """

    def __init__(self, pid: int, fd: int):
        self.pid = pid
        self.fd = fd
        self.returncode: Optional[int] = None
        self._lines_started = False
        self._closed = False

    @classmethod
    def spawn(cls, argv: Sequence[str], env: Optional[Mapping[str, str]] = None) -> ChildProcess:
        """Fork ``argv`` with its stdio on a new pseudo-terminal."""
        argv = list(argv)
        if not argv:
            raise ValueError("Cannot spawn an empty command")

        pid, fd = pty.fork()
        if pid == 0:
            try:
                os.execvpe(argv[0], argv, dict(env) if env is not None else os.environ)
            except OSError as e:
                os.write(2, f"Error: cannot execute {argv[0]}: {e}\n".encode())
            finally:
                os._exit(127)

        logger.debug(f"Spawned {argv[0]} with pid {pid}")
        return cls(pid, fd)

    def lines(self) -> Iterator[str]:
        """Yield decoded output lines until the terminal reports end of input."""
        if self._lines_started:
            raise RuntimeError("Child output can only be read once")
        self._lines_started = True

        pending = b""
        while True:
            try:
                chunk = os.read(self.fd, 4096)
            except OSError as e:
                # Linux reports EIO once the child side of the pty is closed
                if e.errno != errno.EIO:
                    raise
                chunk = b""
            if not chunk:
                logger.debug(f"End of output from pid {self.pid}")
                break

            pending += chunk
            while b"\n" in pending:
                raw, pending = pending.split(b"\n", 1)
                yield (raw + b"\n").decode("utf-8", errors="replace")

        if pending:
            yield pending.decode("utf-8", errors="replace")

    def _reap(self, flags: int) -> ReapResult:
        if self.returncode is not None:
            return ReapResult(ReapState.KNOWN, self.returncode)

        try:
            pid, status = os.waitpid(self.pid, flags)
        except ChildProcessError:
            logger.debug(f"Child {self.pid} was already reaped")
            return ReapResult(ReapState.CONSUMED, self.returncode)

        if pid == 0:
            return ReapResult(ReapState.PENDING)

        self.returncode = exit_code_from_status(status)
        return ReapResult(ReapState.KNOWN, self.returncode)

    def poll(self) -> ReapResult:
        """Collect the exit status without blocking."""
        return self._reap(os.WNOHANG)

    def wait(self) -> ReapResult:
        """Block until the child terminates."""
        return self._reap(0)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            os.close(self.fd)
