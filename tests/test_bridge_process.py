"""Tests for ProcessBridge against throwaway /bin/sh analyzers."""

import asyncio
import json
import os
import sys
import time
from pathlib import Path

import pytest

from rustmcp.bridge.outcome import AnalysisRequest, Degraded, DegradedReason, Success
from rustmcp.bridge.process import ProcessBridge

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="analyzer stubs are /bin/sh scripts")

ANSWER = json.dumps({
    "diagnostics": [{"message": "unused variable `x`", "severity": "warning"}],
    "suggestions": [{"message": "prefix with an underscore"}],
    "explanation": "One warning.",
})


def _request(command: str = "analyze") -> AnalysisRequest:
    return AnalysisRequest(command=command, code='fn main() { println!("hi") }', file_name="main.rs")


@pytest.mark.asyncio
async def test_success_after_log_noise(make_analyzer):
    path = make_analyzer(f"cat > /dev/null\necho 'Compiling analyzer...'\necho '{ANSWER}'")
    outcome = await ProcessBridge(path, timeout=5).run(_request())
    assert isinstance(outcome, Success)
    assert outcome.explanation == "One warning."
    assert outcome.diagnostics[0]["severity"] == "warning"


@pytest.mark.asyncio
async def test_request_goes_to_stdin_and_command_to_argv(make_analyzer, tmp_path):
    path = make_analyzer(
        f'cat > "{tmp_path}/request.json"\n'
        f'echo "$1" > "{tmp_path}/argv.txt"\n'
        f"echo '{ANSWER}'"
    )
    outcome = await ProcessBridge(path, timeout=5).run(_request("suggest"))
    assert isinstance(outcome, Success)
    assert (tmp_path / "argv.txt").read_text().strip() == "suggest"
    sent = json.loads((tmp_path / "request.json").read_text())
    assert sent == {"command": "suggest", "code": 'fn main() { println!("hi") }', "fileName": "main.rs"}


@pytest.mark.asyncio
async def test_timeout_kills_the_process(make_analyzer, tmp_path):
    pid_file = tmp_path / "pid"
    path = make_analyzer(f'echo $$ > "{pid_file}"\nexec sleep 30')
    started = time.monotonic()
    outcome = await ProcessBridge(path, timeout=0.5).run(_request())
    elapsed = time.monotonic() - started

    assert isinstance(outcome, Degraded)
    assert outcome.reason is DegradedReason.PROCESS_TIMEOUT
    assert "Analysis timed out" in outcome.diagnostic["message"]
    assert elapsed < 5
    pid = int(pid_file.read_text().strip())
    with pytest.raises(ProcessLookupError):
        os.kill(pid, 0)


@pytest.mark.asyncio
async def test_timeout_kills_child_processes_too(make_analyzer):
    path = make_analyzer("sleep 30 &\nwait")
    started = time.monotonic()
    outcome = await ProcessBridge(path, timeout=0.5).run(_request())
    assert isinstance(outcome, Degraded)
    assert outcome.reason is DegradedReason.PROCESS_TIMEOUT
    assert time.monotonic() - started < 5


def _is_gone(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return True
    stat_path = Path(f"/proc/{pid}/stat")
    try:
        return stat_path.read_text().split(")")[-1].split()[0] == "Z"
    except OSError:
        return True


@pytest.mark.asyncio
async def test_clean_exit_still_clears_background_children(make_analyzer, tmp_path):
    pid_file = tmp_path / "child.pid"
    path = make_analyzer(
        "cat > /dev/null\n"
        f'sleep 30 > /dev/null 2>&1 < /dev/null &\necho $! > "{pid_file}"\n'
        f"echo '{ANSWER}'"
    )
    outcome = await ProcessBridge(path, timeout=5).run(_request())
    assert isinstance(outcome, Success)

    child = int(pid_file.read_text().strip())
    deadline = time.monotonic() + 3
    while not _is_gone(child) and time.monotonic() < deadline:
        await asyncio.sleep(0.05)
    assert _is_gone(child)


@pytest.mark.asyncio
async def test_non_zero_exit_reports_stderr(make_analyzer):
    path = make_analyzer("echo boom >&2\nexit 1")
    outcome = await ProcessBridge(path, timeout=5).run(_request())
    assert isinstance(outcome, Degraded)
    assert outcome.reason is DegradedReason.PROCESS_NON_ZERO_EXIT
    assert "boom" in outcome.diagnostic["message"]
    assert "code 1" in outcome.diagnostic["message"]
    assert outcome.diagnostic["severity"] == "error"


@pytest.mark.asyncio
async def test_unparseable_output(make_analyzer):
    path = make_analyzer("cat > /dev/null\necho 'no json here'")
    outcome = await ProcessBridge(path, timeout=5).run(_request())
    assert isinstance(outcome, Degraded)
    assert outcome.reason is DegradedReason.RESPONSE_PARSE_FAILURE
    assert outcome.message.startswith("Failed to parse analysis response")


@pytest.mark.asyncio
async def test_missing_required_field(make_analyzer):
    path = make_analyzer("cat > /dev/null\necho '{\"diagnostics\": [], \"suggestions\": []}'")
    outcome = await ProcessBridge(path, timeout=5).run(_request())
    assert isinstance(outcome, Degraded)
    assert outcome.reason is DegradedReason.RESPONSE_PARSE_FAILURE
    assert "explanation" in outcome.message


@pytest.mark.asyncio
async def test_process_that_ignores_stdin(make_analyzer):
    path = make_analyzer(f"echo '{ANSWER}'")
    request = AnalysisRequest(command="analyze", code="x" * (1024 * 1024))
    outcome = await ProcessBridge(path, timeout=5).run(request)
    assert isinstance(outcome, Success)


@pytest.mark.asyncio
async def test_unavailable_binary_variants(tmp_path):
    not_executable = tmp_path / "plain.txt"
    not_executable.write_text("#!/bin/sh\n")
    for binary in (None, "", str(tmp_path / "missing"), str(not_executable), str(tmp_path)):
        bridge = ProcessBridge(binary, capability="Rust analysis")
        assert bridge.is_available() is False
        outcome = await bridge.run(_request())
        assert isinstance(outcome, Degraded)
        assert outcome.reason is DegradedReason.SERVICE_UNAVAILABLE
        assert outcome.message == "Rust analysis service is unavailable"


def test_requirements_report(make_analyzer, tmp_path):
    missing = ProcessBridge(str(tmp_path / "nope")).requirements_report()
    assert missing["checks"]["binaryConfigured"] is True
    assert missing["checks"]["binaryExists"] is False
    assert missing["suggestions"]

    ready = ProcessBridge(make_analyzer("exit 0")).requirements_report()
    assert ready["checks"]["binaryExecutable"] is True
    assert ready["suggestions"] == []
    assert Path(ready["binaryPath"]).name == "analyzer"

    unset = ProcessBridge(None).requirements_report()
    assert unset["binaryPath"] == ""
    assert unset["checks"]["binaryConfigured"] is False
