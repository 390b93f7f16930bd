"""WebSocket transport tests through FastAPI's TestClient."""

import json

import pytest
from fastapi.testclient import TestClient

from rustmcp.config.schema import Config
from rustmcp.server import build_websocket_transport


def _client(dispatcher) -> tuple[TestClient, object]:
    transport = build_websocket_transport(Config(), dispatcher)
    return TestClient(transport.app), transport


def test_health_route(catalog_dispatcher):
    client, _ = _client(catalog_dispatcher)
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "service": "rustmcp", "connections": 0}


def test_rpc_and_legacy_over_one_socket(catalog_dispatcher):
    client, transport = _client(catalog_dispatcher)
    with client.websocket_connect("/") as ws:
        ws.send_text(json.dumps({"version": "2.0", "id": 1, "method": "initialize", "params": {}}))
        reply = ws.receive_json()
        assert reply["id"] == 1
        assert reply["result"]["serverInfo"]["name"] == "rust-mcp-server"
        assert transport.connection_count == 1

        ws.send_text(json.dumps({"type": "rust.suggest", "data": {"code": "let x = 5;"}}))
        legacy = ws.receive_json()
        assert legacy["type"] == "rust.suggestion.result"
        assert legacy["data"]["success"] is False

        ws.send_text("not json")
        assert ws.receive_json()["error"]["code"] == -32700


def test_binary_frames_are_accepted(catalog_dispatcher):
    client, _ = _client(catalog_dispatcher)
    with client.websocket_connect("/") as ws:
        ws.send_bytes(json.dumps({"version": "2.0", "id": "b", "method": "ping"}).encode())
        assert ws.receive_json() == {"version": "2.0", "id": "b", "result": {}}


def test_concurrent_requests_on_one_connection(echo_dispatcher):
    client, _ = _client(echo_dispatcher)
    with client.websocket_connect("/") as ws:
        for request_id, text, delay in (("A", "slow", 0.3), ("B", "fast", 0)):
            ws.send_text(json.dumps({
                "version": "2.0",
                "id": request_id,
                "method": "tools/call",
                "params": {"name": "test.echo", "params": {"text": text, "delay": delay}},
            }))
        first, second = ws.receive_json(), ws.receive_json()
    assert (first["id"], first["result"]["text"]) == ("B", "fast")
    assert (second["id"], second["result"]["text"]) == ("A", "slow")


def test_replies_go_only_to_the_sender(catalog_dispatcher):
    client, _ = _client(catalog_dispatcher)
    with client.websocket_connect("/") as first, client.websocket_connect("/") as second:
        first.send_text(json.dumps({"version": "2.0", "id": "one", "method": "ping"}))
        second.send_text(json.dumps({"version": "2.0", "id": "two", "method": "ping"}))
        assert first.receive_json()["id"] == "one"
        assert second.receive_json()["id"] == "two"


@pytest.mark.asyncio
async def test_send_to_unknown_connection_is_dropped(catalog_dispatcher):
    _, transport = _client(catalog_dispatcher)
    assert await transport.send_to("missing", {"version": "2.0", "id": 1, "result": {}}) is False
