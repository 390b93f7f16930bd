"""Analysis request and outcome types shared by the bridge and tool handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEFAULT_FILE_NAME = "unnamed_code.rs"
DEGRADED_SOURCE = "bridge"


class DegradedReason(str, Enum):
    SERVICE_UNAVAILABLE = "service_unavailable"
    SPAWN_FAILURE = "spawn_failure"
    PROCESS_TIMEOUT = "process_timeout"
    PROCESS_NON_ZERO_EXIT = "process_non_zero_exit"
    RESPONSE_PARSE_FAILURE = "response_parse_failure"


@dataclass(slots=True, frozen=True)
class AnalysisRequest:
    """One request for the external analyzer."""

    command: str
    code: str
    file_name: str = DEFAULT_FILE_NAME
    position: dict[str, Any] | None = None
    focus: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "command": self.command,
            "code": self.code,
            "fileName": self.file_name,
        }
        if self.position is not None:
            payload["position"] = self.position
        if self.focus is not None:
            payload["focus"] = self.focus
        return payload


@dataclass(slots=True, frozen=True)
class Success:
    diagnostics: list[Any] = field(default_factory=list)
    suggestions: list[Any] = field(default_factory=list)
    explanation: str = ""


@dataclass(slots=True, frozen=True)
class Degraded:
    """Failure reported to the client as a successful reply carrying one error diagnostic."""

    reason: DegradedReason
    message: str

    @property
    def diagnostic(self) -> dict[str, Any]:
        return {"message": self.message, "severity": "error", "source": DEGRADED_SOURCE}


AnalysisOutcome = Success | Degraded


def outcome_payload(outcome: AnalysisOutcome) -> dict[str, Any]:
    """Render either outcome variant in the shape tool replies use."""
    if isinstance(outcome, Success):
        return {
            "success": True,
            "diagnostics": list(outcome.diagnostics),
            "suggestions": list(outcome.suggestions),
            "explanation": outcome.explanation,
        }
    return {
        "success": False,
        "diagnostics": [outcome.diagnostic],
        "suggestions": [],
        "explanation": outcome.message,
        "reason": outcome.reason.value,
    }
