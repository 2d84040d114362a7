"""Unit tests for the AI-agent tool adapter and its stdio loop."""

from __future__ import annotations

import io
import json
from typing import TYPE_CHECKING

import httpx
import pytest

from oway_sdk import OwayClient, OwayConfig
from oway_sdk.http import create_http_client
from oway_sdk.tools import (
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    OwayToolAdapter,
    serve_stdio,
)

if TYPE_CHECKING:
    from conftest import FakeOwayApi

QUOTE_ARGS = {
    "origin": {"zipCode": "94103", "country": "US"},
    "destination": {"zipCode": "10001", "country": "US"},
    "items": [{"weight": 200, "weightUnit": "KG"}],
}


@pytest.fixture
def adapter(fast_config: OwayConfig, transport: httpx.MockTransport) -> OwayToolAdapter:
    client = OwayClient(fast_config, http_client=create_http_client(fast_config, transport=transport))
    return OwayToolAdapter(client)


class TestListTools:
    """Tests for tool discovery."""

    def test_tool_names(self, adapter: OwayToolAdapter) -> None:
        names = [tool["name"] for tool in adapter.list_tools()]

        assert names == ["oway_get_quote", "oway_create_shipment", "oway_track_shipment"]

    def test_schemas_use_wire_names(self, adapter: OwayToolAdapter) -> None:
        quote, shipment, track = (tool["inputSchema"] for tool in adapter.list_tools())

        assert set(quote["required"]) == {"origin", "destination", "items"}
        assert "companyApiKey" in quote["properties"]
        assert "quoteId" in shipment["properties"]
        assert "quoteId" in shipment["required"]
        assert track["required"] == ["orderNumber"]
        assert "companyApiKey" in track["properties"]


class TestExecuteTool:
    """Tests for tool execution."""

    def test_get_quote(self, adapter: OwayToolAdapter, api: FakeOwayApi) -> None:
        api.queue(httpx.Response(200, json={"quoteId": "Q-1", "price": 99.0}))

        result = adapter.execute_tool("oway_get_quote", {**QUOTE_ARGS, "companyApiKey": "oway_sk_t"})

        assert result == {"quoteId": "Q-1", "price": 99.0}
        request = api.requests[0]
        assert request.headers["x-oway-api-key"] == "oway_sk_t"
        assert "companyApiKey" not in json.loads(request.content)

    def test_arguments_are_not_mutated(self, adapter: OwayToolAdapter) -> None:
        args = {**QUOTE_ARGS, "companyApiKey": "oway_sk_t"}

        adapter.execute_tool("oway_get_quote", args)

        assert args["companyApiKey"] == "oway_sk_t"

    def test_create_shipment(self, adapter: OwayToolAdapter, api: FakeOwayApi) -> None:
        api.queue(httpx.Response(200, json={"orderNumber": "ORD-1"}))

        result = adapter.execute_tool(
            "oway_create_shipment",
            {"quoteId": "Q-1", "pickup": {"contactName": "A"}, "delivery": {"contactName": "B"}},
        )

        assert result == {"orderNumber": "ORD-1"}
        assert api.requests[0].url.path == "/v1/shipper/shipment"

    def test_track_shipment(self, adapter: OwayToolAdapter, api: FakeOwayApi) -> None:
        api.queue(httpx.Response(200, json={"orderNumber": "ORD-1", "status": "IN_TRANSIT"}))

        result = adapter.execute_tool("oway_track_shipment", {"orderNumber": "ORD-1"})

        assert result["status"] == "IN_TRANSIT"
        assert api.requests[0].url.path == "/v1/shipper/shipment/ORD-1/tracking"

    def test_sdk_errors_become_payloads(self, adapter: OwayToolAdapter, api: FakeOwayApi) -> None:
        api.queue(
            httpx.Response(
                404,
                json={"message": "Shipment not found", "code": "NOT_FOUND"},
                headers={"x-request-id": "srv-1"},
            )
        )

        result = adapter.execute_tool("oway_track_shipment", {"orderNumber": "ORD-X"})

        assert result == {
            "error": "Shipment not found",
            "code": "NOT_FOUND",
            "statusCode": 404,
            "requestId": "srv-1",
            "retryable": False,
        }

    def test_unknown_tool(self, adapter: OwayToolAdapter) -> None:
        with pytest.raises(ValueError, match="Unknown tool"):
            adapter.execute_tool("oway_delete_everything", {})

    def test_invalid_arguments(self, adapter: OwayToolAdapter, api: FakeOwayApi) -> None:
        with pytest.raises(ValueError):
            adapter.execute_tool("oway_get_quote", {"origin": {"zipCode": "1"}})

        assert api.requests == []


class TestServeStdio:
    """Tests for the JSON-RPC stdio loop."""

    def _serve(self, adapter: OwayToolAdapter, *messages: object) -> list[dict]:
        lines = [m if isinstance(m, str) else json.dumps(m) for m in messages]
        stdin = io.StringIO("\n".join(lines) + "\n")
        stdout = io.StringIO()
        serve_stdio(adapter, stdin, stdout)
        return [json.loads(line) for line in stdout.getvalue().splitlines()]

    def test_tools_list(self, adapter: OwayToolAdapter) -> None:
        (response,) = self._serve(adapter, {"jsonrpc": "2.0", "id": 1, "method": "tools/list"})

        assert response["id"] == 1
        assert len(response["result"]["tools"]) == 3

    def test_tools_call(self, adapter: OwayToolAdapter, api: FakeOwayApi) -> None:
        api.queue(httpx.Response(200, json={"orderNumber": "ORD-1", "status": "DELIVERED"}))

        (response,) = self._serve(
            adapter,
            {
                "jsonrpc": "2.0",
                "id": "a",
                "method": "tools/call",
                "params": {"name": "oway_track_shipment", "arguments": {"orderNumber": "ORD-1"}},
            },
        )

        content = response["result"]["content"][0]
        assert content["type"] == "text"
        assert json.loads(content["text"])["status"] == "DELIVERED"

    def test_errors(self, adapter: OwayToolAdapter) -> None:
        responses = self._serve(
            adapter,
            "{not json",
            {"jsonrpc": "2.0", "id": 2, "method": "resources/list"},
            {"jsonrpc": "2.0", "id": 3, "method": "tools/call", "params": {"name": "nope"}},
            {"jsonrpc": "2.0", "method": "notifications/initialized"},
        )

        assert [r["error"]["code"] for r in responses] == [
            PARSE_ERROR,
            METHOD_NOT_FOUND,
            INVALID_PARAMS,
        ]

    def test_malformed_params_keep_serving(self, adapter: OwayToolAdapter) -> None:
        responses = self._serve(
            adapter,
            {"jsonrpc": "2.0", "id": 4, "method": "tools/call", "params": [1]},
            {"jsonrpc": "2.0", "id": 5, "method": "tools/call", "params": {"name": 7}},
            {
                "jsonrpc": "2.0",
                "id": 6,
                "method": "tools/call",
                "params": {"name": "oway_track_shipment", "arguments": ["ORD-1"]},
            },
            {"jsonrpc": "2.0", "id": 7, "method": "tools/list"},
        )

        assert [r["id"] for r in responses] == [4, 5, 6, 7]
        assert [r["error"]["code"] for r in responses[:3]] == [INVALID_PARAMS] * 3
        assert len(responses[3]["result"]["tools"]) == 3
