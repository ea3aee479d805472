"""
tests/test_process_runner.py

ProcessRunner tests against real Python child processes.
"""

from __future__ import annotations

import asyncio
import os
import sys
import time

import pytest

from app.audit.errors import AuditSpawnError, AuditTimeoutError
from app.audit.process_runner import ProcessRunner

PYTHON = sys.executable


def _is_running(pid: int) -> bool:
    stat_path = f"/proc/{pid}/stat"
    if os.path.exists("/proc"):
        try:
            with open(stat_path, encoding="utf-8") as handle:
                state = handle.read().rsplit(")", 1)[1].split()[0]
        except FileNotFoundError:
            return False
        return state != "Z"
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    return True


def _wait_until_stopped(pid: int, timeout_seconds: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout_seconds
    while time.monotonic() < deadline:
        if not _is_running(pid):
            return True
        time.sleep(0.05)
    return not _is_running(pid)


def _run(runner: ProcessRunner, code: str, timeout_seconds: float = 30.0):
    return asyncio.run(runner.run(PYTHON, ["-c", code], timeout_seconds=timeout_seconds))


class TestNormalExit:
    def test_captures_both_streams(self) -> None:
        code = "import sys; sys.stdout.write('{\"ok\": true}'); sys.stderr.write('LH:warn hello')"
        capture = _run(ProcessRunner(), code)
        assert capture.stdout == b'{"ok": true}'
        assert capture.stderr == b"LH:warn hello"
        assert capture.exit_code == 0
        assert capture.timed_out is False

    def test_large_interleaved_streams_do_not_stall(self) -> None:
        code = (
            "import sys\n"
            "for _ in range(2000):\n"
            "    sys.stdout.write('o' * 1000 + '\\n')\n"
            "    sys.stderr.write('e' * 1000 + '\\n')\n"
        )
        capture = _run(ProcessRunner(), code, timeout_seconds=60.0)
        assert capture.stdout.count(b"\n") == 2000
        assert capture.stderr.count(b"\n") == 2000
        assert set(capture.stdout.replace(b"\n", b"")) == {ord("o")}
        assert set(capture.stderr.replace(b"\n", b"")) == {ord("e")}

    def test_non_zero_exit_is_returned_not_raised(self) -> None:
        code = "import sys; sys.stderr.write('Runtime error encountered'); sys.exit(3)"
        capture = _run(ProcessRunner(), code)
        assert capture.exit_code == 3
        assert capture.stderr_text() == "Runtime error encountered"

    def test_text_helpers_replace_invalid_utf8(self) -> None:
        code = "import sys; sys.stdout.buffer.write(b'ok\\xff')"
        capture = _run(ProcessRunner(), code)
        assert capture.stdout_text() == "ok\ufffd"


class TestTimeout:
    def test_deadline_raises_with_partial_capture(self) -> None:
        code = "import sys, time; print('partial', flush=True); time.sleep(60)"
        started = time.monotonic()
        with pytest.raises(AuditTimeoutError) as excinfo:
            _run(ProcessRunner(terminate_grace_seconds=2.0), code, timeout_seconds=2.0)
        elapsed = time.monotonic() - started

        assert elapsed < 20
        capture = excinfo.value.capture
        assert capture is not None
        assert capture.timed_out is True
        assert b"partial" in capture.stdout
        assert capture.exit_code is not None

    @pytest.mark.skipif(sys.platform == "win32", reason="SIGTERM cannot be ignored on Windows")
    def test_process_ignoring_sigterm_is_killed(self) -> None:
        code = (
            "import signal, sys, time\n"
            "signal.signal(signal.SIGTERM, signal.SIG_IGN)\n"
            "print('ready', flush=True)\n"
            "time.sleep(60)\n"
        )
        started = time.monotonic()
        with pytest.raises(AuditTimeoutError) as excinfo:
            _run(ProcessRunner(terminate_grace_seconds=0.5), code, timeout_seconds=2.0)
        elapsed = time.monotonic() - started

        assert elapsed < 20
        assert excinfo.value.capture is not None
        assert excinfo.value.capture.exit_code is not None

    @pytest.mark.skipif(sys.platform == "win32", reason="process groups are POSIX only")
    def test_processes_started_by_the_child_are_reaped(self) -> None:
        code = (
            "import subprocess, sys, time\n"
            "child = subprocess.Popen([sys.executable, '-c', 'import time; time.sleep(60)'])\n"
            "print(child.pid, flush=True)\n"
            "time.sleep(60)\n"
        )
        with pytest.raises(AuditTimeoutError) as excinfo:
            _run(ProcessRunner(terminate_grace_seconds=0.5), code, timeout_seconds=2.0)

        capture = excinfo.value.capture
        assert capture is not None
        grandchild_pid = int(capture.stdout.split()[0])
        assert _wait_until_stopped(grandchild_pid)


class TestSpawnFailure:
    def test_missing_binary_raises_spawn_error(self) -> None:
        runner = ProcessRunner()
        with pytest.raises(AuditSpawnError):
            asyncio.run(runner.run("definitely-not-a-lighthouse-binary-xyz", ["--version"], timeout_seconds=5))


class TestConcurrentRuns:
    def test_two_runs_do_not_share_buffers(self) -> None:
        runner = ProcessRunner()

        async def _both():
            return await asyncio.gather(
                runner.run(PYTHON, ["-c", "print('first')"], timeout_seconds=30),
                runner.run(PYTHON, ["-c", "print('second')"], timeout_seconds=30),
            )

        first, second = asyncio.run(_both())
        assert first.stdout.strip() == b"first"
        assert second.stdout.strip() == b"second"
