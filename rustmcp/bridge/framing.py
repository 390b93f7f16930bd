"""Wire framing between the bridge and the analyzer process.

The analyzer receives one JSON object on stdin and answers with one JSON
object on stdout. Analyzers built with verbose logging print noise around
the answer, so stdout is scanned line by line for the first line that is a
complete JSON object.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError


class AnalyzerResponse(BaseModel):
    """Fields every analyzer answer must carry."""

    model_config = ConfigDict(extra="allow", strict=True)

    diagnostics: list[Any]
    suggestions: list[Any]
    explanation: StrictStr


class ResponseFormatError(ValueError):
    """Analyzer stdout did not contain a usable answer."""


def encode_request(payload: dict[str, Any]) -> bytes:
    """Encode a request payload for the analyzer's stdin."""
    return (json.dumps(payload, ensure_ascii=False) + "\n").encode("utf-8")


def find_json_object_line(output: str) -> dict[str, Any] | None:
    """Return the first line of ``output`` that parses as a JSON object."""
    for line in output.splitlines():
        text = line.strip()
        if not (text.startswith("{") and text.endswith("}")):
            continue
        try:
            value = json.loads(text)
        except json.JSONDecodeError:
            continue
        if isinstance(value, dict):
            return value
    return None


def parse_analyzer_output(stdout: bytes) -> AnalyzerResponse:
    """Extract and validate the analyzer answer from raw stdout bytes."""
    text = stdout.decode("utf-8", errors="replace")
    candidate = find_json_object_line(text)
    if candidate is None:
        raise ResponseFormatError("No valid JSON found in analyzer response")
    try:
        return AnalyzerResponse.model_validate(candidate)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'root'}: {err['msg']}" for err in e.errors()
        )
        raise ResponseFormatError(f"Invalid response structure ({problems})") from e
