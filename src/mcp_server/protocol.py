"""JSON-RPC 2.0 envelopes for the MCP endpoint.

Parses inbound request envelopes and builds success and error
responses. The request id is echoed verbatim, null when absent.
"""

import json
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from shared.errors import GatewayError, InvalidRequestError, ParseError

JSONRPC_VERSION = "2.0"


class JsonRpcRequest(BaseModel):
    """A parsed JSON-RPC 2.0 request."""
    jsonrpc: str
    id: Any = None
    method: str
    params: Optional[dict[str, Any]] = Field(default=None)

    @field_validator("jsonrpc")
    @classmethod
    def _check_version(cls, value: str) -> str:
        if value != JSONRPC_VERSION:
            raise ValueError(f"jsonrpc must be '{JSONRPC_VERSION}'")
        return value

    @property
    def arguments(self) -> dict[str, Any]:
        return self.params or {}


class JsonRpcError(BaseModel):
    """Error object of a JSON-RPC response."""
    code: int
    message: str


class JsonRpcResponse(BaseModel):
    """
    A JSON-RPC 2.0 response.

    Exactly one of result or error is serialized.
    """
    jsonrpc: str = JSONRPC_VERSION
    id: Any = None
    result: Any = None
    error: Optional[JsonRpcError] = None

    @classmethod
    def success(cls, request_id: Any, result: Any) -> "JsonRpcResponse":
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: Any, error: GatewayError) -> "JsonRpcResponse":
        return cls(id=request_id, error=JsonRpcError(code=error.code, message=error.message))

    def to_dict(self) -> dict[str, Any]:
        response: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            response["error"] = self.error.model_dump()
        else:
            response["result"] = self.result
        return response


def decode_body(raw: bytes) -> Any:
    """
    Decode a request body as JSON.

    Raises:
        ParseError: If the body is not valid JSON
    """
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(f"Parse error: {e}") from e


def parse_request(payload: Any) -> JsonRpcRequest:
    """
    Validate a decoded body as a JSON-RPC request envelope.

    Raises:
        InvalidRequestError: If the payload is not a valid envelope
    """
    if not isinstance(payload, dict):
        raise InvalidRequestError("Invalid Request: expected a JSON object")
    try:
        return JsonRpcRequest.model_validate(payload)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise InvalidRequestError(f"Invalid Request: {problems}") from e


def text_content(value: Any) -> dict[str, Any]:
    """Wrap a tool result as a single MCP text content block."""
    return {"content": [{"type": "text", "text": json.dumps(value, indent=2)}]}
