"""Bridge to the external Rust analyzer process."""

from rustmcp.bridge.outcome import (
    AnalysisOutcome,
    AnalysisRequest,
    Degraded,
    DegradedReason,
    Success,
    outcome_payload,
)
from rustmcp.bridge.process import ProcessBridge, ProcessSession

__all__ = [
    "AnalysisOutcome",
    "AnalysisRequest",
    "Degraded",
    "DegradedReason",
    "ProcessBridge",
    "ProcessSession",
    "Success",
    "outcome_payload",
]
