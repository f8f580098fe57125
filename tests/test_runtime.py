"""Tests for the bash validation runtime."""

from __future__ import annotations

import asyncio
import os
import time

import pytest

from recipe_filter_engine.runtime import BashRuntime


def _pid_alive(pid: int) -> bool:
    """True if the process exists and is not a zombie waiting to be reaped."""
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    try:
        with open(f"/proc/{pid}/stat") as f:
            state = f.read().rsplit(")", 1)[1].split()[0]
    except (FileNotFoundError, IndexError):
        return True
    return state not in ("Z", "X")


# ---------------------------------------------------------------------------
# Basic execution
# ---------------------------------------------------------------------------


class TestBashRuntimeExecute:
    @pytest.fixture
    def runtime(self) -> BashRuntime:
        return BashRuntime()

    @pytest.mark.asyncio
    async def test_simple_command(self, runtime: BashRuntime) -> None:
        result = await runtime.execute("echo hello")
        assert result.success
        assert result.exit_code == 0
        assert "hello" in result.output

    @pytest.mark.asyncio
    async def test_failing_command(self, runtime: BashRuntime) -> None:
        result = await runtime.execute("exit 42")
        assert not result.success
        assert result.exit_code == 42
        assert result.started

    @pytest.mark.asyncio
    async def test_stderr_captured(self, runtime: BashRuntime) -> None:
        result = await runtime.execute("echo 'apache too old' >&2; exit 1")
        assert result.stderr == "apache too old"
        assert result.error == "apache too old"

    @pytest.mark.asyncio
    async def test_command_with_env(self, runtime: BashRuntime) -> None:
        result = await runtime.execute('echo "$MY_TEST_VAR"', env={"MY_TEST_VAR": "test123"})
        assert "test123" in result.output

    @pytest.mark.asyncio
    async def test_multiline_script(self, runtime: BashRuntime) -> None:
        result = await runtime.execute("if [ 1 -eq 1 ]; then\n  exit 132\nfi\nexit 0\n")
        assert result.exit_code == 132

    @pytest.mark.asyncio
    async def test_on_output_receives_lines(self, runtime: BashRuntime) -> None:
        lines: list[str] = []
        await runtime.execute("echo one; echo two", on_output=lines.append)
        assert [line.strip() for line in lines] == ["one", "two"]

    @pytest.mark.asyncio
    async def test_missing_shell_does_not_start(self) -> None:
        runtime = BashRuntime(shell="/nonexistent/shell")
        result = await runtime.execute("exit 0")
        assert not result.success
        assert not result.started
        assert "Failed to start" in result.error

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        runtime = BashRuntime(default_timeout=0.3)
        result = await runtime.execute("sleep 10")
        assert result.timed_out
        assert "timed out" in result.error

    @pytest.mark.asyncio
    async def test_output_truncated(self) -> None:
        runtime = BashRuntime(max_output_size=10)
        result = await runtime.execute("printf '%.0sx' $(seq 1 100)")
        assert result.output.startswith("x" * 10)
        assert "truncated" in result.output


# ---------------------------------------------------------------------------
# Abort and cancellation
# ---------------------------------------------------------------------------


class TestBashRuntimeAbort:
    @pytest.fixture
    def runtime(self) -> BashRuntime:
        return BashRuntime()

    @pytest.mark.asyncio
    async def test_abort_already_set(self, runtime: BashRuntime) -> None:
        abort = asyncio.Event()
        abort.set()
        result = await runtime.execute("exit 0", abort_signal=abort)
        assert result.aborted
        assert result.exit_code == -2

    @pytest.mark.asyncio
    async def test_abort_kills_running_command(self, runtime: BashRuntime) -> None:
        abort = asyncio.Event()

        async def _abort_soon() -> None:
            await asyncio.sleep(0.2)
            abort.set()

        start = time.monotonic()
        setter = asyncio.create_task(_abort_soon())
        result = await runtime.execute("sleep 30", abort_signal=abort)
        await setter

        assert result.aborted
        assert time.monotonic() - start < 5

    @pytest.mark.asyncio
    async def test_abort_kills_forked_children(self, runtime: BashRuntime, tmp_path) -> None:
        """Children of the validation script are killed with it."""
        pid_file = tmp_path / "child.pid"
        abort = asyncio.Event()

        async def _abort_when_started() -> None:
            while not pid_file.exists() or not pid_file.read_text().strip():
                await asyncio.sleep(0.02)
            abort.set()

        setter = asyncio.create_task(_abort_when_started())
        result = await runtime.execute(
            f"sleep 30 & echo $! > {pid_file}; wait", abort_signal=abort
        )
        await setter

        assert result.aborted
        child_pid = int(pid_file.read_text())
        deadline = time.monotonic() + 2
        while _pid_alive(child_pid) and time.monotonic() < deadline:
            await asyncio.sleep(0.05)
        assert not _pid_alive(child_pid)

    @pytest.mark.asyncio
    async def test_abort_kills_children_of_exited_shell(
        self, runtime: BashRuntime, tmp_path
    ) -> None:
        """A background child still holding stdout is killed after its shell exits."""
        pid_file = tmp_path / "child.pid"
        abort = asyncio.Event()

        async def _abort_when_started() -> None:
            while not pid_file.exists() or not pid_file.read_text().strip():
                await asyncio.sleep(0.02)
            await asyncio.sleep(0.1)
            abort.set()

        setter = asyncio.create_task(_abort_when_started())
        start = time.monotonic()
        result = await runtime.execute(
            f"sleep 30 & echo $! > {pid_file}; exit 0", abort_signal=abort
        )
        await setter

        assert result.aborted
        assert time.monotonic() - start < 5
        child_pid = int(pid_file.read_text())
        deadline = time.monotonic() + 2
        while _pid_alive(child_pid) and time.monotonic() < deadline:
            await asyncio.sleep(0.05)
        assert not _pid_alive(child_pid)

    @pytest.mark.asyncio
    async def test_task_cancel_kills_command(self, runtime: BashRuntime, tmp_path) -> None:
        pid_file = tmp_path / "shell.pid"
        task = asyncio.create_task(runtime.execute(f"echo $$ > {pid_file}; sleep 30"))

        while not pid_file.exists() or not pid_file.read_text().strip():
            await asyncio.sleep(0.02)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert not _pid_alive(int(pid_file.read_text()))

    @pytest.mark.asyncio
    async def test_abort_signal_unused_when_command_finishes(self, runtime: BashRuntime) -> None:
        abort = asyncio.Event()
        result = await runtime.execute("exit 0", abort_signal=abort)
        assert result.success
        assert not result.aborted
