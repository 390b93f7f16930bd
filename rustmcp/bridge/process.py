"""Process bridge: run the external analyzer once per request under a deadline."""

from __future__ import annotations

import asyncio
import os
import shutil
import signal
from pathlib import Path
from typing import Any

from loguru import logger

from rustmcp.bridge.framing import ResponseFormatError, encode_request, parse_analyzer_output
from rustmcp.bridge.outcome import (
    AnalysisOutcome,
    AnalysisRequest,
    Degraded,
    DegradedReason,
    Success,
)
from rustmcp.utils.exceptions import sanitize_error_message

_CAN_KILL_GROUP = hasattr(os, "killpg")
_READ_CHUNK = 64 * 1024
_MAX_STDERR_CHARS = 2000


class ProcessSession:
    """One running analyzer process with its buffers and deadline.

    Stdout and stderr are drained concurrently while the request is written to
    stdin. When the deadline fires first the whole process group is killed,
    which closes the pipes and lets the drains finish. ``close`` is safe to
    call any number of times.
    """

    def __init__(self, process: asyncio.subprocess.Process, timeout: float):
        self.process = process
        self.timeout = timeout
        self.stdout = bytearray()
        self.stderr = bytearray()
        self.timed_out = False
        self._deadline: asyncio.TimerHandle | None = None
        self._closed = False

    @property
    def exit_code(self) -> int | None:
        return self.process.returncode

    async def run(self, payload: bytes) -> None:
        loop = asyncio.get_running_loop()
        self._deadline = loop.call_later(self.timeout, self._expire)
        await asyncio.gather(
            self._feed(payload),
            self._drain(self.process.stdout, self.stdout),
            self._drain(self.process.stderr, self.stderr),
        )
        await self.process.wait()

    async def _feed(self, payload: bytes) -> None:
        stdin = self.process.stdin
        if stdin is None:
            return
        try:
            stdin.write(payload)
            await stdin.drain()
        except (BrokenPipeError, ConnectionResetError):
            # Exit status decides the outcome.
            logger.debug("[bridge] analyzer pid={} closed stdin early", self.process.pid)
        finally:
            stdin.close()

    @staticmethod
    async def _drain(stream: asyncio.StreamReader | None, sink: bytearray) -> None:
        if stream is None:
            return
        while True:
            chunk = await stream.read(_READ_CHUNK)
            if not chunk:
                return
            sink.extend(chunk)

    def _expire(self) -> None:
        self.timed_out = True
        logger.warning("[bridge] analyzer pid={} exceeded {}s, killing", self.process.pid, self.timeout)
        self.kill()

    def kill(self) -> None:
        """Kill the process group (or the process) if anything is left alive."""
        try:
            if _CAN_KILL_GROUP:
                os.killpg(self.process.pid, signal.SIGKILL)
            elif self.process.returncode is None:
                self.process.kill()
        except (ProcessLookupError, PermissionError) as e:
            logger.debug("[bridge] analyzer pid={} already gone: {}", self.process.pid, e)

    async def close(self) -> None:
        if self._deadline is not None:
            self._deadline.cancel()
        if self._closed:
            return
        self._closed = True
        # Also after a clean exit: background children of the analyzer stay in its group.
        self.kill()
        if self.process.returncode is None:
            await self.process.wait()


class ProcessBridge:
    """Spawn the analyzer binary for each request and classify what happens.

    Every failure is turned into a :class:`Degraded` outcome; ``run`` only
    raises when the calling task itself is cancelled.
    """

    def __init__(
        self,
        binary_path: str | None,
        *,
        timeout: float = 10.0,
        capability: str = "Rust analysis",
    ):
        raw = (binary_path or "").strip()
        self.binary_path = str(Path(raw).expanduser()) if raw else None
        self.timeout = timeout
        self.capability = capability

    def is_available(self) -> bool:
        if not self.binary_path:
            return False
        path = Path(self.binary_path)
        return path.is_file() and os.access(path, os.X_OK)

    def requirements_report(self) -> dict[str, Any]:
        """Collect readiness checks for the analyzer binary."""
        path = Path(self.binary_path) if self.binary_path else None
        checks = {
            "binaryConfigured": path is not None,
            "binaryExists": bool(path and path.exists()),
            "binaryIsFile": bool(path and path.is_file()),
            "binaryExecutable": bool(path and path.is_file() and os.access(path, os.X_OK)),
        }
        suggestions: list[str] = []
        if not checks["binaryConfigured"]:
            cargo = shutil.which("cargo")
            hint = " (cargo is available, build the analyzer with `cargo build --release`)" if cargo else ""
            suggestions.append(f"Set RUST_BINARY_PATH or bridge.binaryPath in the config{hint}.")
        elif not checks["binaryExists"]:
            suggestions.append(f"Analyzer binary not found at: {path}")
        elif not checks["binaryExecutable"]:
            suggestions.append(f"Make the analyzer executable: chmod +x {path}")
        return {
            "binaryPath": str(path) if path else "",
            "timeoutSeconds": self.timeout,
            "checks": checks,
            "suggestions": suggestions,
        }

    async def run(self, request: AnalysisRequest) -> AnalysisOutcome:
        if not self.is_available():
            return self._degraded(DegradedReason.SERVICE_UNAVAILABLE, f"{self.capability} service is unavailable")

        try:
            process = await asyncio.create_subprocess_exec(
                self.binary_path,
                request.command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=_CAN_KILL_GROUP,
            )
        except OSError as e:
            return self._degraded(
                DegradedReason.SPAWN_FAILURE,
                f"{self.capability} process failed to start: {sanitize_error_message(str(e))}",
            )

        logger.debug("[bridge] spawned analyzer pid={} command={}", process.pid, request.command)
        session = ProcessSession(process, self.timeout)
        try:
            await session.run(encode_request(request.to_payload()))
        finally:
            await session.close()
        logger.debug(
            "[bridge] analyzer pid={} exited code={} stdout={}B stderr={}B",
            process.pid,
            session.exit_code,
            len(session.stdout),
            len(session.stderr),
        )
        return self._interpret(session)

    def _interpret(self, session: ProcessSession) -> AnalysisOutcome:
        if session.timed_out:
            return self._degraded(DegradedReason.PROCESS_TIMEOUT, "Analysis timed out")

        if session.exit_code != 0:
            stderr_text = session.stderr.decode("utf-8", errors="replace").strip()[-_MAX_STDERR_CHARS:]
            message = f"Analyzer exited with code {session.exit_code}"
            if stderr_text:
                message += f": {sanitize_error_message(stderr_text)}"
            return self._degraded(DegradedReason.PROCESS_NON_ZERO_EXIT, message)

        try:
            response = parse_analyzer_output(bytes(session.stdout))
        except ResponseFormatError as e:
            return self._degraded(DegradedReason.RESPONSE_PARSE_FAILURE, f"Failed to parse analysis response: {e}")

        return Success(
            diagnostics=response.diagnostics,
            suggestions=response.suggestions,
            explanation=response.explanation,
        )

    @staticmethod
    def _degraded(reason: DegradedReason, message: str) -> Degraded:
        logger.warning("[bridge] degraded outcome reason={}: {}", reason.value, message)
        return Degraded(reason=reason, message=message)
