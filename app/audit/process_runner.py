"""
Deadline-bounded subprocess execution with concurrent stdout/stderr capture.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
from collections.abc import Sequence

from app.audit.errors import AuditSpawnError, AuditTimeoutError
from app.audit.logging_utils import log_event
from app.domain.dom_analysis import RawCapture

logger = logging.getLogger(__name__)

_READ_CHUNK_BYTES = 64 * 1024
_POSIX = os.name == "posix"


async def _drain(stream: asyncio.StreamReader | None, buffer: bytearray) -> None:
    """
    Read a pipe to EOF into ``buffer``.
    """

    if stream is None:
        return
    while True:
        chunk = await stream.read(_READ_CHUNK_BYTES)
        if not chunk:
            return
        buffer.extend(chunk)


class ProcessRunner:
    """
    Runs one subprocess per call and always reaps it before returning.

    Both pipes are drained by independent tasks while the process runs, so a
    chatty stderr can never stall a large stdout (or the reverse). One
    deadline covers process exit and both drains.
    """

    def __init__(self, *, terminate_grace_seconds: float = 5.0) -> None:
        self._terminate_grace_seconds = terminate_grace_seconds

    async def run(
        self,
        target: str,
        args: Sequence[str],
        *,
        timeout_seconds: float,
    ) -> RawCapture:
        """
        Execute ``target`` with ``args`` and return its raw output.

        A non-zero exit code is returned, not raised; callers decide whether
        the payload is usable.

        Raises:
            AuditSpawnError: the executable could not be started.
            AuditTimeoutError: the deadline expired; the process was reaped.
        """

        try:
            process = await asyncio.create_subprocess_exec(
                target,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=_POSIX,
            )
        except OSError as exc:
            log_event(logger, logging.WARNING, "audit_process_spawn_failed", target=target, error=str(exc))
            raise AuditSpawnError(f"Could not start {target}: {exc}") from exc

        stdout_buffer = bytearray()
        stderr_buffer = bytearray()
        drains = asyncio.gather(
            _drain(process.stdout, stdout_buffer),
            _drain(process.stderr, stderr_buffer),
        )

        try:
            try:
                await asyncio.wait_for(
                    asyncio.gather(drains, process.wait()),
                    timeout=timeout_seconds,
                )
            except asyncio.TimeoutError:
                await self._reap(process)
                log_event(
                    logger,
                    logging.WARNING,
                    "audit_process_timeout",
                    target=target,
                    pid=process.pid,
                    timeout_seconds=timeout_seconds,
                    stdout_bytes=len(stdout_buffer),
                    stderr_bytes=len(stderr_buffer),
                )
                raise AuditTimeoutError(
                    f"{target} exceeded its {timeout_seconds:g}s deadline",
                    capture=RawCapture(
                        stdout=bytes(stdout_buffer),
                        stderr=bytes(stderr_buffer),
                        exit_code=process.returncode,
                        timed_out=True,
                    ),
                ) from None
        finally:
            if process.returncode is None:
                await self._reap(process)
            else:
                _signal_group(process, force=True)
            if not drains.done():
                drains.cancel()

        log_event(
            logger,
            logging.DEBUG,
            "audit_process_exited",
            target=target,
            pid=process.pid,
            exit_code=process.returncode,
            stdout_bytes=len(stdout_buffer),
            stderr_bytes=len(stderr_buffer),
        )
        return RawCapture(
            stdout=bytes(stdout_buffer),
            stderr=bytes(stderr_buffer),
            exit_code=process.returncode,
        )

    async def _reap(self, process: asyncio.subprocess.Process) -> None:
        """
        Terminate the process group, then kill it after the grace period,
        and wait for the direct child to exit.
        """

        _signal_group(process, force=False)
        if process.returncode is None:
            try:
                await asyncio.wait_for(process.wait(), timeout=self._terminate_grace_seconds)
            except asyncio.TimeoutError:
                pass
        _signal_group(process, force=True)
        await process.wait()


def _signal_group(process: asyncio.subprocess.Process, *, force: bool) -> None:
    """
    Signal every process started under the child's session.

    Processes the tool launched itself, such as a browser, share the
    child's process group and are reached through it.
    """

    try:
        if _POSIX:
            os.killpg(process.pid, signal.SIGKILL if force else signal.SIGTERM)
        elif process.returncode is None:
            if force:
                process.kill()
            else:
                process.terminate()
    except (ProcessLookupError, PermissionError):
        pass
