"""
Tests for the HTTP tool surface.
"""

import pytest
from fastapi.testclient import TestClient

from vectordb.main import create_app


@pytest.fixture
def client(store, sample_docs):
    store.add_documents(sample_docs)
    with TestClient(create_app(store=store)) as c:
        yield c


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "collection": "test-docs", "provider": "hash:64"}


def test_list_tools(client):
    tools = client.get("/tools").json()["tools"]
    assert len(tools) == 8
    assert all("inputSchema" in t for t in tools)


def test_search_tools(client):
    body = client.get("/tools/search", params={"q": "recent"}).json()
    assert [t["name"] for t in body["tools"]] == ["get_recent_docs"]


def test_call_tool(client):
    resp = client.post("/tools/query_vector_db", json={"query": "jwt tokens", "threshold": 0.1})
    assert resp.status_code == 200
    assert resp.json()["ok"] is True


def test_call_tool_without_body(client):
    resp = client.post("/tools/get_stats")
    assert resp.status_code == 200
    assert resp.json()["result"]["totalDocuments"] == 3


def test_invalid_argument_is_400(client):
    resp = client.post("/tools/query_vector_db", json={"query": ""})
    assert resp.status_code == 400
    assert resp.json()["error"]["kind"] == "InvalidArgument"


def test_unknown_tool_is_400(client):
    assert client.post("/tools/nope", json={}).status_code == 400


def test_invalid_json_body(client):
    resp = client.post(
        "/tools/get_stats", content=b"{not json", headers={"content-type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["kind"] == "InvalidArgument"


def test_connection_error_is_503(client, provider):
    from vectordb.errors import StoreConnectionError

    provider.fail_with = StoreConnectionError("provider down")
    resp = client.post("/tools/query_vector_db", json={"query": "tokens"})
    assert resp.status_code == 503
    assert resp.json()["error"] == {"kind": "ConnectionError", "message": "provider down"}
