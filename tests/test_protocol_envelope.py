"""Tests for dialect classification and reply encoding."""

import pytest

from rustmcp.protocol.encoder import encode_response, encode_rpc_error
from rustmcp.protocol.envelope import (
    Dialect,
    LegacyEnvelope,
    RpcEnvelope,
    classify,
    decode_frame,
    request_id_of,
)
from rustmcp.utils.exceptions import InvalidRequestError, ParseError


def test_decode_frame_accepts_text_and_bytes():
    assert decode_frame('{"a": 1}') == {"a": 1}
    assert decode_frame(b'{"a": 1}') == {"a": 1}


@pytest.mark.parametrize("raw", ["{not json", "", b"\xff\xfe{}", "{\"a\": 1} trailing"])
def test_decode_frame_rejects_malformed(raw):
    with pytest.raises(ParseError) as excinfo:
        decode_frame(raw)
    assert excinfo.value.message.startswith("Parse error:")


def test_classify_rpc_request():
    envelope = classify({"version": "2.0", "id": 7, "method": "tools/list"})
    assert isinstance(envelope, RpcEnvelope)
    assert envelope.tag.dialect is Dialect.RPC
    assert envelope.id == 7
    assert envelope.has_id is True
    assert envelope.params is None


def test_classify_accepts_jsonrpc_key():
    envelope = classify({"jsonrpc": "2.0", "id": "a", "method": "ping"})
    assert isinstance(envelope, RpcEnvelope)
    assert envelope.version_key == "jsonrpc"


def test_classify_legacy_request():
    envelope = classify({"type": "rust.analyze", "data": {"code": "x"}, "id": "r1"})
    assert isinstance(envelope, LegacyEnvelope)
    assert envelope.tag.legacy_type == "rust.analyze"
    assert envelope.tag.has_id is True


@pytest.mark.parametrize(
    "message",
    [
        {"version": "2.0", "type": "rust.analyze", "data": {"code": "fn main() {}"}},
        {"version": "1.0", "type": "rust.analyze", "data": {"code": "fn main() {}"}},
        {"jsonrpc": "2.0", "method": "", "type": "rust.analyze", "data": {}},
    ],
)
def test_classify_falls_back_to_legacy_without_rpc_method(message):
    envelope = classify(message)
    assert isinstance(envelope, LegacyEnvelope)
    assert envelope.type == "rust.analyze"
    assert envelope.tag.dialect is Dialect.LEGACY


def test_classify_prefers_rpc_when_both_shapes_are_complete():
    envelope = classify({"version": "2.0", "id": 1, "method": "ping", "type": "rust.analyze"})
    assert isinstance(envelope, RpcEnvelope)
    assert envelope.method == "ping"


def test_classify_legacy_drops_unusable_id():
    envelope = classify({"type": "rust.analyze", "data": {}, "id": {"nested": True}})
    assert envelope.has_id is False
    assert envelope.id is None


@pytest.mark.parametrize(
    "message",
    [
        [1, 2],
        "text",
        {},
        {"version": "1.0", "id": 1, "method": "ping"},
        {"version": "2.0", "id": 1},
        {"version": "2.0", "id": 1, "method": ""},
        {"version": "2.0", "id": True, "method": "ping"},
        {"version": "2.0", "id": [1], "method": "ping"},
        {"type": 5, "data": {}},
    ],
)
def test_classify_rejects_invalid_requests(message):
    with pytest.raises(InvalidRequestError):
        classify(message)


def test_request_id_of_is_best_effort():
    assert request_id_of({"id": 3}) == 3
    assert request_id_of({"id": [3]}) is None
    assert request_id_of(["not", "a", "dict"]) is None


def test_notification_needs_prefix_and_no_id():
    assert classify({"version": "2.0", "method": "notifications/initialized"}).is_notification
    assert not classify({"version": "2.0", "method": "ping"}).is_notification
    assert not classify({"version": "2.0", "id": 1, "method": "notifications/initialized"}).is_notification


@pytest.mark.parametrize("request_id", [1, 1.5, "abc", None, 0])
def test_rpc_reply_echoes_id_unchanged(request_id):
    tag = classify({"version": "2.0", "id": request_id, "method": "ping"}).tag
    reply = encode_response(tag, True, {}, None)
    assert reply == {"version": "2.0", "id": request_id, "result": {}}
    assert type(reply["id"]) is type(request_id)


def test_rpc_reply_uses_callers_version_key():
    tag = classify({"jsonrpc": "2.0", "id": 1, "method": "ping"}).tag
    assert encode_response(tag, True, {}, None) == {"jsonrpc": "2.0", "id": 1, "result": {}}


def test_rpc_error_reply():
    tag = classify({"version": "2.0", "id": 2, "method": "nope"}).tag
    reply = encode_response(tag, False, None, {"code": -32601, "message": "Method not found: nope"})
    assert reply == {"version": "2.0", "id": 2, "error": {"code": -32601, "message": "Method not found: nope"}}
    assert "result" not in reply


def test_legacy_replies():
    tag = classify({"type": "rust.analyze", "data": {}, "id": 9}).tag
    assert encode_response(tag, True, {"ok": 1}, None, result_type="rust.analysis.result") == {
        "type": "rust.analysis.result",
        "data": {"ok": 1},
        "id": 9,
    }
    assert encode_response(tag, True, {}, None)["type"] == "rust.analyze.result"

    error = encode_response(tag, False, None, {"code": -32602, "message": "Invalid params: x", "data": ["x"]})
    assert error == {"type": "error", "data": {"message": "Invalid params: x", "details": ["x"]}, "id": 9}

    untagged = classify({"type": "rust.analyze", "data": {}}).tag
    assert "id" not in encode_response(untagged, True, {}, None)


def test_encode_rpc_error_defaults_to_null_id():
    reply = encode_rpc_error({"code": -32700, "message": "Parse error: x"})
    assert reply == {"version": "2.0", "id": None, "error": {"code": -32700, "message": "Parse error: x"}}
