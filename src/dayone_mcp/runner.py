"""Run Day One CLI invocations as isolated child processes."""

from __future__ import annotations

import atexit
import logging
import os
import signal
import threading
import time
import weakref
from subprocess import DEVNULL, PIPE, Popen, TimeoutExpired

from dayone_mcp.commands import Invocation
from dayone_mcp.errors import ExecutionError
from dayone_mcp.telemetry import set_attributes, trace_span

logger = logging.getLogger("dayone_mcp.runner")

DEFAULT_TIMEOUT = 60
MAX_OUTPUT_BYTES = 10 * 1024 * 1024
_STDERR_TAIL_CHARS = 2_000

_active_processes: set[weakref.ref[Popen[str]]] = set()


def _terminate_process(proc: Popen[str]) -> None:
    try:
        os.killpg(proc.pid, signal.SIGTERM)
    except ProcessLookupError:
        return
    try:
        proc.wait(timeout=5)
    except TimeoutExpired:
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except ProcessLookupError:
            proc.poll()
            return
        try:
            proc.wait(timeout=5)
        except TimeoutExpired:
            logger.warning("Day One CLI process %s did not exit after SIGKILL", proc.pid)


def _cleanup_processes() -> None:
    for ref in list(_active_processes):
        proc = ref()
        if proc and proc.poll() is None:
            logger.debug("Terminating Day One CLI process %s at exit", proc.pid)
            _terminate_process(proc)
    _active_processes.clear()


atexit.register(_cleanup_processes)


def _track_process(proc: Popen[str]) -> None:
    _active_processes.add(weakref.ref(proc, lambda ref: _active_processes.discard(ref)))


def _untrack_process(proc: Popen[str]) -> None:
    for ref in list(_active_processes):
        if ref() is proc:
            _active_processes.discard(ref)
            break


def _failure_detail(stdout: str, stderr: str, returncode: int) -> str:
    detail = stderr.strip() or stdout.strip() or f"exit code {returncode}"
    if len(detail) > _STDERR_TAIL_CHARS:
        detail = "... " + detail[-_STDERR_TAIL_CHARS:]
    return detail


class CommandRunner:
    """Execute invocations one at a time with a hard timeout.

    Calls are serialized so concurrent writes never interleave against the
    Day One store. Each call starts its own process group so a timed-out CLI
    can be killed together with any helpers it spawned.
    """

    def __init__(self, timeout_seconds: int = DEFAULT_TIMEOUT) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self.timeout_seconds = timeout_seconds
        self._lock = threading.Lock()

    def run(
        self,
        invocation: Invocation,
        timeout_seconds: int | None = None,
        exclusive: bool = True,
    ) -> str:
        """Run ``invocation`` and return its stdout.

        ``exclusive=False`` skips the serialization lock; only read-only
        probes such as ``--version`` should use it.

        Raises:
            ExecutionError: the process could not start, exited non-zero,
                produced too much output, or exceeded the timeout.
        """
        timeout = timeout_seconds or self.timeout_seconds
        if not exclusive:
            return self._execute(invocation, timeout)
        with self._lock:
            return self._execute(invocation, timeout)

    def _execute(self, invocation: Invocation, timeout: int) -> str:
        start = time.monotonic()
        executable = invocation.argv[0]
        with trace_span(
            f"dayone/{invocation.subcommand or 'cli'}",
            attributes={
                "dayone.subcommand": invocation.subcommand,
                "dayone.argc": len(invocation.argv),
                "dayone.timeout_seconds": timeout,
            },
        ) as span:
            try:
                proc = Popen(
                    invocation.argv,
                    stdin=PIPE if invocation.stdin is not None else DEVNULL,
                    stdout=PIPE,
                    stderr=PIPE,
                    text=True,
                    start_new_session=True,
                )
            except FileNotFoundError:
                logger.error("Day One CLI not found at %s", executable)
                raise ExecutionError(f"Day One CLI not found at {executable}") from None
            except PermissionError as exc:
                logger.error("Permission denied starting Day One CLI: %s", exc)
                raise ExecutionError(f"Permission denied: {exc}") from exc
            except OSError as exc:
                logger.error("Failed to start Day One CLI: %s", exc)
                raise ExecutionError(f"Failed to start process: {exc}") from exc

            _track_process(proc)
            try:
                stdout, stderr = proc.communicate(input=invocation.stdin, timeout=timeout)
            except TimeoutExpired:
                _terminate_process(proc)
                logger.warning(
                    "Day One CLI %s timed out after %ss", invocation.subcommand, timeout
                )
                raise ExecutionError(
                    f"Day One CLI timed out after {timeout}s", returncode=-1
                ) from None
            except Exception as exc:
                _terminate_process(proc)
                logger.error("Day One CLI %s failed: %s", invocation.subcommand, exc)
                raise ExecutionError(str(exc), returncode=-1) from exc
            finally:
                _untrack_process(proc)

            duration_ms = int((time.monotonic() - start) * 1000)
            set_attributes(
                span,
                {"dayone.returncode": proc.returncode, "dayone.duration_ms": duration_ms},
            )
            stdout = stdout or ""
            stderr = stderr or ""
            if proc.returncode != 0:
                logger.error(
                    "Day One CLI %s exited with %s", invocation.subcommand, proc.returncode
                )
                raise ExecutionError(
                    _failure_detail(stdout, stderr, proc.returncode),
                    stderr=stderr or None,
                    returncode=proc.returncode,
                )
            if len(stdout.encode()) > MAX_OUTPUT_BYTES:
                raise ExecutionError(
                    f"Day One CLI output exceeded {MAX_OUTPUT_BYTES} bytes",
                    returncode=proc.returncode,
                )
            logger.debug(
                "Day One CLI %s completed in %dms", invocation.subcommand, duration_ms
            )
            return stdout
