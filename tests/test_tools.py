"""
Tests for the protocol-tool registry.
"""

import json

import pytest

from vectordb.tools.definitions import TOOLS
from vectordb.tools.registry import ToolRegistry, match_tools


@pytest.fixture
def registry(store, sample_docs):
    store.add_documents(sample_docs)
    return ToolRegistry(store)


def test_tool_names_map_to_operations(registry):
    names = {t["name"] for t in registry.list_tools()}
    assert names == {
        "search_tools", "query_vector_db", "search_by_category", "get_stats",
        "get_recent_docs", "add_documents", "backup_database", "restore_database",
    }


def test_every_tool_has_a_schema():
    for tool in TOOLS:
        assert tool["inputSchema"]["type"] == "object"
        assert tool["description"]


class TestSearchTools:
    def test_keyword_matches_name(self, registry):
        names = [t["name"] for t in registry.search_tools("backup")]
        assert names == ["backup_database", "restore_database"]

    def test_keyword_matches_description(self, registry):
        names = {t["name"] for t in registry.search_tools("category")}
        assert "search_by_category" in names

    def test_case_insensitive_and_no_schemas(self, registry):
        results = registry.search_tools("STATS")
        assert results == [{"name": "get_stats", "description": registry.tools["get_stats"]["description"]}]

    def test_registry_and_cli_share_matching(self, registry):
        for keyword in ("backup", "Category", "", "nothing-matches"):
            assert registry.search_tools(keyword) == match_tools(keyword)

    def test_empty_keyword_lists_everything(self):
        assert len(match_tools("")) == len(TOOLS)

    def test_via_call(self, registry):
        payload = registry.call("search_tools", {"query": "restore"})
        assert payload["ok"]
        assert payload["result"]["count"] == 1


class TestCalls:
    def test_query(self, registry):
        payload = registry.call("query_vector_db", {"query": "jwt tokens", "threshold": 0.1})
        assert payload["ok"]
        result = payload["result"]
        assert result["resultCount"] == len(result["results"]) >= 1
        assert result["results"][0]["title"] == "JWT"
        json.dumps(payload)

    def test_query_with_filters(self, registry):
        payload = registry.call("query_vector_db", {
            "query": "tokens", "threshold": 0.0, "category": "auth", "source": "memory-bank",
        })
        assert [r["title"] for r in payload["result"]["results"]] == ["Refresh"]

    def test_search_by_category(self, registry):
        payload = registry.call("search_by_category", {"category": "design", "query": "palette", "threshold": 0.0})
        assert payload["ok"]
        assert [r["title"] for r in payload["result"]["results"]] == ["Buttons"]

    def test_get_stats(self, registry):
        payload = registry.call("get_stats")
        assert payload["result"]["totalDocuments"] == 3

    def test_get_recent_docs_default_days(self, registry):
        payload = registry.call("get_recent_docs", {})
        assert payload["ok"]
        assert payload["result"]["days"] == 7

    def test_add_documents(self, registry, store):
        payload = registry.call("add_documents", {"documents": [
            {"id": "new", "content": "added through a tool", "metadata": {"source": "agent"}},
        ]})
        assert payload == {"ok": True, "result": {"success": True, "added": 1}}
        assert store.count() == 4

    def test_backup_and_restore(self, registry, store, tmp_path):
        path = str(tmp_path / "b.jsonl")
        backup = registry.call("backup_database", {"outputPath": path})
        assert backup["ok"] and backup["result"]["documents"] == 3
        restore = registry.call("restore_database", {"inputPath": path, "clearExisting": True})
        assert restore["ok"] and restore["result"]["documents"] == 3
        assert store.count() == 3


class TestErrors:
    def test_unknown_tool(self, registry):
        payload = registry.call("drop_tables", {})
        assert payload == {"ok": False, "error": {"kind": "InvalidArgument", "message": "unknown tool 'drop_tables'"}}

    def test_missing_argument(self, registry):
        payload = registry.call("query_vector_db", {})
        assert not payload["ok"]
        assert payload["error"]["kind"] == "InvalidArgument"

    def test_bad_limit(self, registry):
        payload = registry.call("query_vector_db", {"query": "x", "limit": 0})
        assert payload["error"]["kind"] == "InvalidArgument"

    def test_arguments_must_be_object(self, registry):
        payload = registry.call("get_stats", ["not", "a", "dict"])
        assert payload["error"]["kind"] == "InvalidArgument"

    def test_malformed_restore(self, registry, tmp_path):
        path = tmp_path / "bad.jsonl"
        path.write_text("{broken\n", encoding="utf-8")
        payload = registry.call("restore_database", {"inputPath": str(path)})
        assert payload["error"]["kind"] == "MalformedBackupRecord"

    @pytest.mark.parametrize("flag", ["false", "true", 1, 0, None])
    def test_restore_clear_flag_must_be_bool(self, registry, store, tmp_path, flag):
        path = tmp_path / "one.jsonl"
        path.write_text('{"id": "n", "content": "new doc", "metadata": {}}\n', encoding="utf-8")
        payload = registry.call("restore_database", {"inputPath": str(path), "clearExisting": flag})
        assert payload["error"]["kind"] == "InvalidArgument"
        assert store.count() == 3
        assert store.get_document("auth-1") is not None
        assert store.get_document("n") is None

    def test_restore_clear_false_keeps_existing(self, registry, store, tmp_path):
        path = tmp_path / "one.jsonl"
        path.write_text('{"id": "n", "content": "new doc", "metadata": {}}\n', encoding="utf-8")
        payload = registry.call("restore_database", {"inputPath": str(path), "clearExisting": False})
        assert payload["ok"] and payload["result"]["clearedExisting"] is False
        assert store.count() == 4

    def test_provider_errors_are_payloads(self, registry, provider):
        from vectordb.errors import StoreConnectionError

        provider.fail_with = StoreConnectionError("quota exhausted")
        payload = registry.call("query_vector_db", {"query": "tokens"})
        assert payload == {"ok": False, "error": {"kind": "ConnectionError", "message": "quota exhausted"}}

    def test_unexpected_exception_is_backend_failure(self, registry, store):
        def explode(*args, **kwargs):
            raise KeyError("weird")

        store.get_stats = explode
        payload = registry.call("get_stats")
        assert payload["error"]["kind"] == "BackendFailure"
