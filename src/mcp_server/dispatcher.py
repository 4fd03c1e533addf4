"""MCP method dispatch.

An McpSession walks the MCP lifecycle (uninitialized -> ready) and maps
each JSON-RPC method to its handler. Over HTTP a fresh session serves
each request, so the only ordering rule enforced is the per-call
credential check.
"""

import uuid
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from pydantic import SecretStr

from shared.config import Settings
from shared.errors import (
    GatewayError,
    InvalidParamsError,
    MethodNotFoundError,
    UpstreamError,
)
from shared.logging import get_logger
from shared.models import ExecutionContext, ToolCall
from mcp_server.auth import require_credential
from mcp_server.protocol import JsonRpcRequest, JsonRpcResponse, text_content
from mcp_server.router import ToolRouter

logger = get_logger(__name__)


class SessionState(str, Enum):
    """MCP lifecycle state."""
    UNINITIALIZED = "uninitialized"
    READY = "ready"


MethodHandler = Callable[[JsonRpcRequest], Awaitable[Any]]


class McpSession:
    """
    One MCP connection-level session.

    Holds the caller's credential for the lifetime of the session and
    nothing else; the registry and router are shared read-only.
    """

    def __init__(
        self,
        router: ToolRouter,
        settings: Settings,
        credential: Optional[SecretStr] = None
    ) -> None:
        self.router = router
        self.settings = settings
        self.credential = credential
        self.state = SessionState.UNINITIALIZED
        self._methods: dict[str, MethodHandler] = {
            "initialize": self._initialize,
            "notifications/initialized": self._initialized,
            "ping": self._ping,
            "tools/list": self._tools_list,
            "tools/call": self._tools_call,
        }

    async def handle(self, request: JsonRpcRequest) -> tuple[JsonRpcResponse, int]:
        """
        Handle one JSON-RPC request.

        Args:
            request: Parsed request envelope

        Returns:
            Tuple of (response envelope, HTTP status)
        """
        logger.info(
            "MCP request",
            method=request.method,
            auth="present" if self.credential else "missing",
            state=self.state.value,
        )

        try:
            handler = self._methods.get(request.method)
            if handler is None:
                raise MethodNotFoundError(request.method)
            result = await handler(request)
        except UpstreamError as e:
            logger.error("Upstream failure", method=request.method, status=e.status, error=e.message)
            return JsonRpcResponse.failure(request.id, e), e.http_status
        except GatewayError as e:
            logger.warning("Request failed", method=request.method, error=e.message, code=e.code)
            return JsonRpcResponse.failure(request.id, e), e.http_status
        except Exception as e:
            logger.exception("Unhandled error", method=request.method)
            error = GatewayError(str(e) or e.__class__.__name__)
            return JsonRpcResponse.failure(request.id, error), error.http_status

        return JsonRpcResponse.success(request.id, result), 200

    async def _initialize(self, request: JsonRpcRequest) -> dict[str, Any]:
        require_credential(
            self.credential,
            "OAuth authentication required. Please authenticate with Looker.",
        )
        self.state = SessionState.READY
        return {
            "protocolVersion": self.settings.protocol_version,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": {
                "name": self.settings.service_name,
                "version": self.settings.version,
            },
        }

    async def _initialized(self, request: JsonRpcRequest) -> dict[str, Any]:
        return {}

    async def _ping(self, request: JsonRpcRequest) -> dict[str, Any]:
        return {}

    async def _tools_list(self, request: JsonRpcRequest) -> dict[str, Any]:
        return {"tools": self.router.registry.get_tools_for_mcp()}

    async def _tools_call(self, request: JsonRpcRequest) -> dict[str, Any]:
        credential = require_credential(self.credential, "OAuth authentication required")

        params = request.arguments
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise InvalidParamsError("tools/call requires a tool name")
        arguments = params.get("arguments") or {}
        if not isinstance(arguments, dict):
            raise InvalidParamsError("tools/call arguments must be an object")

        call = ToolCall(
            tool_name=name,
            arguments=arguments,
            context=ExecutionContext(
                request_id=str(request.id) if request.id is not None else str(uuid.uuid4()),
                credential=credential,
            ),
        )
        result = await self.router.execute(call)
        return text_content(result)
