"""
Bash execution runtime with streaming output and abort support.
"""

from __future__ import annotations

import asyncio
import os
import signal
import time

from recipe_filter_engine.logging import get_logger
from recipe_filter_engine.runtime.base import (
    ExecutionResult,
    OutputCallback,
    ValidationRuntime,
    elapsed_ms,
)

logger = get_logger("runtime.bash")


class BashRuntime(ValidationRuntime):
    """
    Shell-based validation runtime.

    Runs commands with ``<shell> -c``. Each command gets its own process
    group so that aborting kills the whole tree, including anything the
    script forked.
    """

    def __init__(
        self,
        shell: str = "/bin/bash",
        default_timeout: float | None = None,
        max_output_size: int = 1_000_000,  # 1MB
    ) -> None:
        self.shell = shell
        self.default_timeout = default_timeout
        self.max_output_size = max_output_size

    async def execute(
        self,
        command: str,
        cwd: str | None = None,
        env: dict[str, str] | None = None,
        timeout: float | None = None,
        on_output: OutputCallback | None = None,
        abort_signal: asyncio.Event | None = None,
    ) -> ExecutionResult:
        """Execute a command with optional streaming and abort."""
        started_at = time.perf_counter()
        timeout = timeout if timeout is not None else self.default_timeout

        if abort_signal is not None and abort_signal.is_set():
            return ExecutionResult.aborted_result(duration_ms=elapsed_ms(started_at))

        full_env = os.environ.copy()
        if env:
            full_env.update(env)

        try:
            process = await asyncio.create_subprocess_exec(
                self.shell,
                "-c",
                command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
                env=full_env,
                start_new_session=os.name == "posix",
            )
        except OSError as e:
            return ExecutionResult.spawn_error_result(
                error=f"Failed to start {self.shell}: {e}",
                duration_ms=elapsed_ms(started_at),
            )

        return await self._collect_output(process, started_at, timeout, on_output, abort_signal)

    async def _collect_output(
        self,
        process: asyncio.subprocess.Process,
        started_at: float,
        timeout: float | None,
        on_output: OutputCallback | None,
        abort_signal: asyncio.Event | None,
    ) -> ExecutionResult:
        """
        Collect output from a subprocess while watching for abort and timeout.

        Whichever finishes first wins: the process exiting, the abort signal
        firing, or the timeout expiring. In the last two cases the process
        group is killed and reaped before returning.
        """
        stdout_lines: list[str] = []
        stderr_lines: list[str] = []

        async def _read_stream(
            stream: asyncio.StreamReader | None,
            lines: list[str],
            callback: OutputCallback | None,
        ) -> None:
            if stream is None:
                return
            while True:
                line = await stream.readline()
                if not line:
                    break
                decoded = line.decode("utf-8", errors="replace")
                lines.append(decoded)
                if callback:
                    callback(decoded)

        async def _run_to_completion() -> int:
            await asyncio.gather(
                _read_stream(process.stdout, stdout_lines, on_output),
                _read_stream(process.stderr, stderr_lines, None),
            )
            return await process.wait()

        completion = asyncio.create_task(_run_to_completion())
        waiters: set[asyncio.Task] = {completion}
        abort_task: asyncio.Task | None = None
        if abort_signal is not None:
            abort_task = asyncio.create_task(abort_signal.wait())
            waiters.add(abort_task)

        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            await self._terminate(process, completion)
            if abort_task is not None:
                abort_task.cancel()
            raise

        if abort_task is not None and not abort_task.done():
            abort_task.cancel()

        if completion not in done:
            await self._terminate(process, completion)
            output_str = self._truncate("".join(stdout_lines))
            if abort_task is not None and abort_task in done:
                logger.debug("Aborted process %d", process.pid)
                return ExecutionResult.aborted_result(
                    output=output_str, duration_ms=elapsed_ms(started_at)
                )
            logger.debug("Process %d timed out after %ss", process.pid, timeout)
            return ExecutionResult.timeout_result(
                timeout or 0.0, output=output_str, duration_ms=elapsed_ms(started_at)
            )

        returncode = completion.result()
        output_str = self._truncate("".join(stdout_lines))
        error_str = "".join(stderr_lines).strip()

        if returncode == 0:
            return ExecutionResult.success_result(
                output=output_str,
                duration_ms=elapsed_ms(started_at),
            )
        return ExecutionResult.error_result(
            error=error_str or f"Command failed with exit code {returncode}",
            exit_code=returncode,
            output=output_str,
            stderr=error_str,
            duration_ms=elapsed_ms(started_at),
        )

    async def _terminate(
        self,
        process: asyncio.subprocess.Process,
        completion: asyncio.Task,
    ) -> None:
        """Kill the process group, stop the readers, and reap the process."""
        self._kill(process)
        completion.cancel()
        try:
            await completion
        except asyncio.CancelledError:
            pass
        await process.wait()

    @staticmethod
    def _kill(process: asyncio.subprocess.Process) -> None:
        """
        Kill everything in the command's session.

        The group outlives its leader: background children of a shell that
        already exited still hold the output pipes and must be killed too.
        """
        try:
            if os.name == "posix":
                os.killpg(process.pid, signal.SIGKILL)
            elif process.returncode is None:
                process.kill()
        except ProcessLookupError:
            pass

    def _truncate(self, text: str) -> str:
        """Truncate text if it exceeds max_output_size."""
        if len(text) > self.max_output_size:
            return text[: self.max_output_size] + "\n... (output truncated)"
        return text
