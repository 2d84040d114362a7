"""AI-agent tool adapter for the Oway SDK.

Exposes quoting, booking and tracking as JSON-schema described tools and
serves them over a line-delimited JSON-RPC 2.0 stdio loop (``tools/list``
and ``tools/call``).

Configure through the environment::

    OWAY_M2M_CLIENT_ID=client_... OWAY_M2M_CLIENT_SECRET=secret_... oway-mcp
"""

from __future__ import annotations

import json
import sys
from typing import TYPE_CHECKING, Any, Final, TextIO

from pydantic import BaseModel

from .config import TelemetryConfig
from .errors import ConfigurationError, OwayError
from .models import QuoteRequest, ShipmentRequest
from .telemetry import SDKLogger, configure_telemetry

if TYPE_CHECKING:
    from .client import OwayClient

TENANT_ARGUMENT = "companyApiKey"

# JSON-RPC error codes
PARSE_ERROR: Final[int] = -32700
INVALID_REQUEST: Final[int] = -32600
METHOD_NOT_FOUND: Final[int] = -32601
INVALID_PARAMS: Final[int] = -32602

METHOD_TOOLS_LIST: Final[str] = "tools/list"
METHOD_TOOLS_CALL: Final[str] = "tools/call"


def _input_schema(
    model: type[BaseModel] | None = None,
    *,
    properties: dict[str, Any] | None = None,
    required: list[str] | None = None,
) -> dict[str, Any]:
    schema: dict[str, Any] = (
        model.model_json_schema(by_alias=True)
        if model is not None
        else {"type": "object", "properties": {}, "required": []}
    )
    schema.pop("title", None)
    schema["properties"] = {
        **schema.get("properties", {}),
        **(properties or {}),
        TENANT_ARGUMENT: {
            "type": "string",
            "description": "Optional: company API key for multi-company integrations",
        },
    }
    if required:
        schema["required"] = [*schema.get("required", []), *required]
    return schema


class OwayToolAdapter:
    """Maps tool calls onto an ``OwayClient``.

    Failures raised by the SDK are returned as payloads instead of
    exceptions so an agent can read the code and request id.
    """

    def __init__(self, client: OwayClient, *, logger: SDKLogger | None = None) -> None:
        self._client = client
        self._logger = logger or SDKLogger(debug=client.config.debug)

    def list_tools(self) -> list[dict[str, Any]]:
        """Describe the available tools."""
        return [
            {
                "name": "oway_get_quote",
                "description": "Get a freight shipping quote. Returns quote ID and price.",
                "inputSchema": _input_schema(QuoteRequest),
            },
            {
                "name": "oway_create_shipment",
                "description": "Schedule a shipment from a quote. Returns order number.",
                "inputSchema": _input_schema(ShipmentRequest),
            },
            {
                "name": "oway_track_shipment",
                "description": "Get tracking status for a shipment.",
                "inputSchema": _input_schema(
                    properties={"orderNumber": {"type": "string"}},
                    required=["orderNumber"],
                ),
            },
        ]

    def execute_tool(self, name: str, arguments: dict[str, Any] | None) -> dict[str, Any]:
        """Run one tool.

        Args:
            name: Tool name from ``list_tools``.
            arguments: Tool arguments; ``companyApiKey`` selects the tenant.

        Returns:
            The API result, or an error payload for SDK failures.

        Raises:
            ValueError: Unknown tool or invalid arguments.
        """
        if arguments is not None and not isinstance(arguments, dict):
            raise ValueError("arguments must be an object")
        args = dict(arguments or {})
        tenant_key = args.pop(TENANT_ARGUMENT, None)
        self._logger.info("Tool call", tool=name)

        try:
            if name == "oway_get_quote":
                quote = self._client.quotes.create(
                    QuoteRequest.model_validate(args), tenant_key=tenant_key
                )
                return quote.to_payload()
            if name == "oway_create_shipment":
                shipment = self._client.shipments.create(
                    ShipmentRequest.model_validate(args), tenant_key=tenant_key
                )
                return shipment.to_payload()
            if name == "oway_track_shipment":
                order_number = args.get("orderNumber")
                if not order_number:
                    raise ValueError("orderNumber is required")
                tracking = self._client.shipments.tracking(
                    order_number, tenant_key=tenant_key
                )
                return tracking.to_payload()
        except OwayError as e:
            return {
                "error": e.message,
                "code": e.code,
                "statusCode": e.status_code,
                "requestId": e.request_id,
                "retryable": e.is_retryable,
            }

        raise ValueError(f"Unknown tool: {name}")

    def handle_message(self, message: dict[str, Any]) -> dict[str, Any] | None:
        """Answer one JSON-RPC request; notifications get no response."""
        request_id = message.get("id")
        method = message.get("method")
        if not isinstance(method, str):
            return _error_response(request_id, INVALID_REQUEST, "Invalid Request")

        if method == METHOD_TOOLS_LIST:
            result: dict[str, Any] = {"tools": self.list_tools()}
        elif method == METHOD_TOOLS_CALL:
            params = message.get("params") or {}
            if not isinstance(params, dict):
                return _error_response(request_id, INVALID_PARAMS, "params must be an object")
            name = params.get("name")
            if not isinstance(name, str):
                return _error_response(request_id, INVALID_PARAMS, "Tool name is required")
            try:
                payload = self.execute_tool(name, params.get("arguments"))
            except ValueError as e:
                return _error_response(request_id, INVALID_PARAMS, str(e))
            result = {"content": [{"type": "text", "text": json.dumps(payload, indent=2)}]}
        else:
            if "id" not in message:
                return None
            return _error_response(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")

        if "id" not in message:
            return None
        return {"jsonrpc": "2.0", "id": request_id, "result": result}


def _error_response(request_id: Any, code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}


def serve_stdio(
    adapter: OwayToolAdapter,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> None:
    """Serve JSON-RPC requests, one per line, until stdin closes."""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    for line in stdin:
        if not line.strip():
            continue
        try:
            message = json.loads(line)
        except json.JSONDecodeError:
            response = _error_response(None, PARSE_ERROR, "Parse error")
        else:
            if isinstance(message, dict):
                response = adapter.handle_message(message)
            else:
                response = _error_response(None, INVALID_REQUEST, "Invalid Request")

        if response is not None:
            stdout.write(json.dumps(response) + "\n")
            stdout.flush()


def main() -> int:
    """Console entry point: serve the Oway tools over stdio."""
    from .client import OwayClient

    # stdout carries the protocol
    configure_telemetry(TelemetryConfig(json_logs=True), stream=sys.stderr)
    logger = SDKLogger()

    try:
        client = OwayClient.from_env()
    except ConfigurationError as e:
        logger.error(
            "OWAY_M2M_CLIENT_ID and OWAY_M2M_CLIENT_SECRET required",
            error=e.message,
        )
        return 1

    with client:
        serve_stdio(OwayToolAdapter(client, logger=logger))
    return 0


if __name__ == "__main__":
    sys.exit(main())
