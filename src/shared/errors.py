"""Error taxonomy for the Looker MCP gateway.

Every error maps to a JSON-RPC error code and an HTTP status. The
dispatcher turns any GatewayError into a JSON-RPC error envelope.
"""

from typing import Optional

# Standard JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Auth failures reuse the invalid-request code; HTTP 401 distinguishes them
AUTH_REQUIRED = INVALID_REQUEST


class GatewayError(Exception):
    """Base exception for all gateway errors."""
    code: int = INTERNAL_ERROR
    http_status: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ParseError(GatewayError):
    """Request body is not valid JSON."""
    code = PARSE_ERROR
    http_status = 400


class InvalidRequestError(GatewayError):
    """Request body is not a valid JSON-RPC envelope."""
    code = INVALID_REQUEST
    http_status = 400


class AuthRequiredError(GatewayError):
    """A bearer credential is required but was not supplied."""
    code = AUTH_REQUIRED
    http_status = 401


class MethodNotFoundError(GatewayError):
    """Unrecognized top-level RPC method."""
    code = METHOD_NOT_FOUND
    http_status = 400

    def __init__(self, method: str) -> None:
        super().__init__(f"Unknown method: {method}")
        self.method = method


class InvalidParamsError(GatewayError):
    """Method parameters are malformed."""
    code = INVALID_PARAMS
    http_status = 400


class UnknownToolError(GatewayError):
    """tools/call named a tool that is not registered."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"Unknown tool: {tool_name}")
        self.tool_name = tool_name


class ToolExecutionError(GatewayError):
    """A tool could not complete for a reason other than an upstream failure."""


class UpstreamError(GatewayError):
    """
    Non-success response from the Looker API.

    Carries the numeric status and the upstream body text verbatim.
    """

    def __init__(
        self,
        status: Optional[int],
        raw_body: str,
        message: Optional[str] = None
    ) -> None:
        super().__init__(message or f"Looker API error {status}: {raw_body}")
        self.status = status
        self.raw_body = raw_body

    @property
    def http_status(self) -> int:  # type: ignore[override]
        return 401 if self.status == 401 else 500


class UpstreamTransportError(UpstreamError):
    """Network-level failure reaching the Looker API."""

    def __init__(self, raw_body: str) -> None:
        super().__init__(None, raw_body, f"Looker API unreachable: {raw_body}")
