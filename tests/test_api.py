"""End-to-end tests of the HTTP surface against a fake Looker API."""

import json

import pytest

AUTH = {"Authorization": "Bearer token-abc"}


def rpc(method, params=None, request_id=1):
    body = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        body["params"] = params
    return body


class TestProbe:

    def test_root_reports_service_and_tool_count(self, api):
        response = api.get("/")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["service"] == "mcp-looker-gateway"
        assert body["tool_count"] == 18


class TestAuthentication:
    """Methods that need a credential reject requests without one."""

    @pytest.mark.parametrize("method,params", [
        ("initialize", {"protocolVersion": "2025-06-18", "capabilities": {}}),
        ("tools/call", {"name": "get_models", "arguments": {}}),
    ])
    def test_missing_credential_is_401(self, api, fake_looker, method, params):
        response = api.post("/mcp", json=rpc(method, params))

        assert response.status_code == 401
        body = response.json()
        assert body["id"] == 1
        assert body["error"]["code"] == -32600
        assert "result" not in body
        assert fake_looker.requests == []

    @pytest.mark.parametrize("method", ["tools/list", "ping", "notifications/initialized"])
    def test_open_methods_need_no_credential(self, api, method):
        response = api.post("/mcp", json=rpc(method))

        assert response.status_code == 200
        assert "error" not in response.json()

    def test_non_bearer_scheme_is_rejected(self, api):
        response = api.post(
            "/mcp",
            json=rpc("initialize"),
            headers={"Authorization": "Basic dXNlcjpwYXNz"},
        )

        assert response.status_code == 401

    def test_initialize_with_credential(self, api):
        response = api.post("/mcp", json=rpc("initialize"), headers=AUTH)

        assert response.status_code == 200
        result = response.json()["result"]
        assert result["protocolVersion"] == "2025-06-18"
        assert result["capabilities"]["tools"]["listChanged"] is False


class TestToolsList:

    def test_lists_tools_in_declaration_order(self, api):
        from domains.looker.tools import TOOLS

        response = api.post("/mcp", json=rpc("tools/list"))

        tools = response.json()["result"]["tools"]
        assert [t["name"] for t in tools] == [t.name for t in TOOLS]
        assert all(set(t) == {"name", "description", "inputSchema"} for t in tools)

    def test_every_listed_tool_is_executable(self, api):
        router = api.app.state.router

        tools = api.post("/mcp", json=rpc("tools/list")).json()["result"]["tools"]

        for tool in tools:
            assert router.registry.lookup(tool["name"]).name == tool["name"]
            assert tool["name"] in router.routes()
        assert len(tools) == len(router.routes())


class TestToolsCall:

    def test_get_dashboards_round_trip(self, api, fake_looker):
        dashboards = [{"id": "1", "title": "Revenue", "description": None}]
        fake_looker.add("GET", "/dashboards", json_body=dashboards)

        response = api.post(
            "/mcp",
            json=rpc("tools/call", {"name": "get_dashboards", "arguments": {"title": "Revenue"}}),
            headers=AUTH,
        )

        assert response.status_code == 200
        upstream = fake_looker.requests[0]
        assert upstream.method == "GET"
        assert "title=Revenue" in str(upstream.url)
        assert upstream.headers["Authorization"] == "Bearer token-abc"
        content = response.json()["result"]["content"]
        assert len(content) == 1
        assert content[0]["type"] == "text"
        assert json.loads(content[0]["text"]) == dashboards

    def test_query_default_limit(self, api, fake_looker):
        fake_looker.add("POST", "/queries/run/json", json_body=[])

        api.post(
            "/mcp",
            json=rpc("tools/call", {
                "name": "query",
                "arguments": {"model": "ecommerce", "explore": "orders", "fields": ["orders.count"]},
            }),
            headers=AUTH,
        )

        assert fake_looker.body(0)["limit"] == "500"

    def test_upstream_404_is_reported(self, api, fake_looker):
        fake_looker.add("GET", "/lookml_models", status=404, text="Not found")

        response = api.post(
            "/mcp",
            json=rpc("tools/call", {"name": "get_models"}),
            headers=AUTH,
        )

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == -32603
        assert "404" in error["message"]

    def test_upstream_401_is_http_401(self, api, fake_looker):
        fake_looker.add("GET", "/lookml_models", status=401, text="Requires authentication.")

        response = api.post(
            "/mcp",
            json=rpc("tools/call", {"name": "get_models"}),
            headers=AUTH,
        )

        assert response.status_code == 401
        assert "Requires authentication." in response.json()["error"]["message"]

    def test_run_dashboard_partial_failure_is_not_an_error(self, api, fake_looker):
        fake_looker.add("GET", "/dashboards/9/dashboard_elements", json_body=[
            {"id": "1", "title": "Broken", "query_id": "11"},
            {"id": "2", "title": "Working", "query_id": "22"},
        ])
        fake_looker.add("GET", "/queries/11/run/json", status=500, text="boom")
        fake_looker.add("GET", "/queries/22/run/json", json_body=[{"x": 1}])

        response = api.post(
            "/mcp",
            json=rpc("tools/call", {"name": "run_dashboard", "arguments": {"dashboard_id": "9"}}),
            headers=AUTH,
        )

        assert response.status_code == 200
        elements = json.loads(response.json()["result"]["content"][0]["text"])
        assert len(elements) == 2
        assert sum("error" in e for e in elements) == 1
        assert sum("data" in e for e in elements) == 1

    def test_unknown_tool(self, api):
        response = api.post(
            "/mcp",
            json=rpc("tools/call", {"name": "drop_everything"}),
            headers=AUTH,
        )

        assert response.status_code == 500
        assert response.json()["error"]["message"] == "Unknown tool: drop_everything"


class TestEnvelopeErrors:

    def test_unknown_method_is_400(self, api):
        response = api.post("/mcp", json=rpc("prompts/list", request_id="x-9"), headers=AUTH)

        assert response.status_code == 400
        body = response.json()
        assert body["id"] == "x-9"
        assert body["error"]["code"] == -32601

    def test_malformed_json_is_parse_error(self, api):
        response = api.post(
            "/mcp",
            content=b"{broken",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["id"] is None
        assert body["error"]["code"] == -32700

    def test_missing_method_is_invalid_request(self, api):
        response = api.post("/mcp", json={"jsonrpc": "2.0", "id": 3})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == -32600
