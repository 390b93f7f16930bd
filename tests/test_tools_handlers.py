import pytest

from rustmcp.bridge.outcome import AnalysisRequest, Degraded, DegradedReason, Success
from rustmcp.tools.handlers import AnalysisTools
from rustmcp.tools.history import AnalysisHistory


class _FakeBridge:
    def __init__(self, outcome):
        self.outcome = outcome
        self.requests: list[AnalysisRequest] = []

    async def run(self, request):
        self.requests.append(request)
        return self.outcome


@pytest.mark.asyncio
async def test_analyze_forwards_request_and_records_history():
    bridge = _FakeBridge(Success(diagnostics=[{"message": "m", "severity": "warning"}], explanation="e"))
    history = AnalysisHistory()
    tools = AnalysisTools(bridge, history)

    result = await tools.analyze({"code": "fn main() {}", "position": {"line": 1, "character": 0}})

    assert bridge.requests[0].command == "analyze"
    assert bridge.requests[0].file_name == "unnamed_code.rs"
    assert bridge.requests[0].position == {"line": 1, "character": 0}
    assert result["success"] is True
    assert result["fileName"] == "unnamed_code.rs"
    assert result["diagnostics"][0]["message"] == "m"
    assert result["id"] == history.recent(1)[0].id


@pytest.mark.asyncio
async def test_degraded_outcome_is_still_a_result():
    tools = AnalysisTools(
        _FakeBridge(Degraded(DegradedReason.SERVICE_UNAVAILABLE, "Rust analysis service is unavailable")),
        AnalysisHistory(),
    )
    result = await tools.explain({"code": "x", "fileName": "lib.rs", "focus": "x"})
    assert result["success"] is False
    assert result["fileName"] == "lib.rs"
    assert result["diagnostics"][0]["severity"] == "error"


@pytest.mark.asyncio
async def test_history_lists_newest_first_with_stats():
    history = AnalysisHistory(max_entries=2)
    tools = AnalysisTools(_FakeBridge(Success(suggestions=["a", "b"], explanation="why")), history)
    await tools.analyze({"code": "a", "fileName": "a.rs"})
    await tools.suggest({"code": "b", "fileName": "b.rs"})
    await tools.explain({"code": "c", "fileName": "c.rs"})

    listing = await tools.recent_history({"limit": 10})

    assert listing["total"] == 3
    assert [row["fileName"] for row in listing["analyses"]] == ["c.rs", "b.rs"]
    assert listing["analyses"][0]["type"] == "explanation"
    assert listing["analyses"][0]["stats"] == {"explanationLength": 3}
    assert listing["analyses"][1]["stats"] == {"suggestionCount": 2}


@pytest.mark.asyncio
async def test_history_default_limit():
    history = AnalysisHistory(max_entries=50)
    tools = AnalysisTools(_FakeBridge(Success()), history)
    for i in range(12):
        await tools.analyze({"code": str(i)})
    listing = await tools.recent_history({})
    assert len(listing["analyses"]) == 10
    assert listing["analyses"][0]["stats"] == {"diagnosticCount": 0}
