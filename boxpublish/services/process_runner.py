"""
Run an external command while streaming its output line by line.
"""
from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional, Sequence

LineSink = Callable[[str], None]

# Longest line accepted from the export process (asyncio defaults to 64 KiB).
STREAM_LIMIT = 1024 * 1024


class ProcessRunner(ABC):
    """
    Abstract capability for spawning a process.

    Implementations feed every stdout line to out_sink and every stderr line
    to err_sink as they arrive, and return the exit code once the process
    has exited.
    """

    @abstractmethod
    async def run(
        self,
        cmd: Sequence[str],
        out_sink: LineSink,
        err_sink: LineSink,
        cwd: Optional[Path] = None,
    ) -> int:
        """Run cmd to completion and return its exit code."""
        pass


async def _drain(stream: Optional[asyncio.StreamReader], sink: LineSink) -> None:
    if stream is None:
        return
    while True:
        line = await stream.readline()
        if not line:
            break
        sink(line.decode("utf-8", errors="replace").rstrip("\r\n"))


class AsyncioProcessRunner(ProcessRunner):
    """Spawns the command with asyncio and drains both pipes concurrently."""

    async def run(
        self,
        cmd: Sequence[str],
        out_sink: LineSink,
        err_sink: LineSink,
        cwd: Optional[Path] = None,
    ) -> int:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd) if cwd is not None else None,
            limit=STREAM_LIMIT,
        )
        # Both pipes must be drained together.
        await asyncio.gather(
            _drain(process.stdout, out_sink),
            _drain(process.stderr, err_sink),
        )
        return await process.wait()
