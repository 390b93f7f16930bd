"""Handlers behind the ``rust.*`` tools."""

from __future__ import annotations

from typing import Any

from loguru import logger

from rustmcp.bridge.outcome import DEFAULT_FILE_NAME, AnalysisRequest, outcome_payload
from rustmcp.bridge.process import ProcessBridge
from rustmcp.tools.history import AnalysisHistory, HistoryKind

DEFAULT_HISTORY_LIMIT = 10


class AnalysisTools:
    """Turns validated tool params into bridge calls and records the outcome."""

    def __init__(self, bridge: ProcessBridge, history: AnalysisHistory):
        self.bridge = bridge
        self.history = history

    async def analyze(self, params: dict[str, Any]) -> dict[str, Any]:
        return await self._run("analyze", "analysis", params)

    async def suggest(self, params: dict[str, Any]) -> dict[str, Any]:
        return await self._run("suggest", "suggestion", params)

    async def explain(self, params: dict[str, Any]) -> dict[str, Any]:
        return await self._run("explain", "explanation", params)

    async def recent_history(self, params: dict[str, Any]) -> dict[str, Any]:
        limit = params.get("limit", DEFAULT_HISTORY_LIMIT)
        return {
            "analyses": [entry.to_summary() for entry in self.history.recent(limit)],
            "total": self.history.total,
        }

    async def _run(self, command: str, kind: HistoryKind, params: dict[str, Any]) -> dict[str, Any]:
        request = AnalysisRequest(
            command=command,
            code=params["code"],
            file_name=params.get("fileName") or DEFAULT_FILE_NAME,
            position=params.get("position"),
            focus=params.get("focus"),
        )
        outcome = await self.bridge.run(request)
        payload = outcome_payload(outcome)
        entry = self.history.record(kind, request.file_name, payload)
        logger.debug("[tools] {} {} success={}", command, request.file_name, payload["success"])
        return {
            "id": entry.id,
            "timestamp": entry.timestamp,
            "fileName": request.file_name,
            **payload,
        }
