"""Async subprocess utilities.

Provides non-blocking subprocess execution for use in async contexts.

Key Features:
    - Non-blocking execution compatible with asyncio
    - Optional data fed to the child's standard input
    - Cap on the size of captured output; the child is killed when exceeded
    - Optional check mode that raises on non-zero exit codes

Example:
    >>> from linear_to_pr.utils.async_subprocess import run_command
    >>> stdout, stderr, code = await run_command("claude", "--version")
    >>> if code == 0:
    ...     print(stdout)

See Also:
    - asyncio.create_subprocess_exec: Underlying async subprocess API
    - subprocess.CalledProcessError: Exception raised on check failures
"""

import asyncio
import subprocess
from pathlib import Path

_CHUNK_SIZE = 64 * 1024


class OutputLimitExceededError(RuntimeError):
    """A command wrote more output than the configured cap."""

    def __init__(self, args: tuple[str, ...], limit: int) -> None:
        self.cmd = args
        self.limit = limit
        super().__init__(f"Command {args[0]!r} exceeded the output limit of {limit} bytes")


async def run_command(
    *args: str,
    cwd: Path | str | None = None,
    check: bool = True,
    input: bytes | None = None,
    max_output_bytes: int | None = None,
    timeout: float | None = None,
) -> tuple[str, str, int]:
    """Run a command asynchronously without shell interpolation.

    Args:
        *args: Command and arguments as separate strings. The first argument
            is the executable.
        cwd: Working directory for command execution.
        check: If True (default), raise CalledProcessError when the command
            returns a non-zero exit code.
        input: Bytes written to the child's stdin, which is then closed. When
            None the child's stdin is /dev/null.
        max_output_bytes: Upper bound for each of stdout and stderr. Exceeding
            it kills the child and raises OutputLimitExceededError.
        timeout: Maximum seconds to wait. None means wait indefinitely.

    Returns:
        Tuple of (stdout, stderr, return_code), decoded as UTF-8 with
        replacement for invalid bytes.

    Raises:
        subprocess.CalledProcessError: If check=True and command returns non-zero.
        OutputLimitExceededError: If the output cap is exceeded.
        TimeoutError: If timeout is exceeded. The process is killed first.
        FileNotFoundError: If the command executable is not found.
        PermissionError: If the executable cannot be executed.
    """
    process = await asyncio.create_subprocess_exec(
        *args,
        cwd=cwd,
        stdin=asyncio.subprocess.PIPE if input is not None else asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )

    tasks = [
        asyncio.ensure_future(_feed_stdin(process, input)),
        asyncio.ensure_future(_read_capped(process.stdout, args, max_output_bytes)),
        asyncio.ensure_future(_read_capped(process.stderr, args, max_output_bytes)),
    ]

    try:
        _, stdout_bytes, stderr_bytes = await asyncio.wait_for(asyncio.gather(*tasks), timeout=timeout)
        await process.wait()
    except BaseException:
        for task in tasks:
            task.cancel()
        if process.returncode is None:
            process.kill()
            await process.wait()
        raise

    stdout = stdout_bytes.decode("utf-8", errors="replace")
    stderr = stderr_bytes.decode("utf-8", errors="replace")

    if check and process.returncode != 0:
        raise subprocess.CalledProcessError(
            process.returncode,
            args,
            stdout,
            stderr,
        )

    return stdout, stderr, process.returncode or 0


async def _feed_stdin(process: asyncio.subprocess.Process, data: bytes | None) -> None:
    if data is None or process.stdin is None:
        return
    try:
        process.stdin.write(data)
        await process.stdin.drain()
    except (BrokenPipeError, ConnectionResetError):
        # Child exited without reading its input; its exit code tells the story
        pass
    finally:
        process.stdin.close()


async def _read_capped(
    stream: asyncio.StreamReader | None,
    args: tuple[str, ...],
    limit: int | None,
) -> bytes:
    if stream is None:
        return b""
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await stream.read(_CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if limit is not None and total > limit:
            raise OutputLimitExceededError(args, limit)
        chunks.append(chunk)
    return b"".join(chunks)
