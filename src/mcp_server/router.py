"""Tool Router for MCP Server.

Routes tool calls to the domain adapter that handles them. Handles
lookup, advisory validation and auditing; errors propagate to the
dispatcher unchanged.
"""

import time
from typing import Any, Optional

from shared.errors import UnknownToolError, UpstreamError
from shared.logging import get_logger
from shared.models import ToolCall, ToolResult, ToolResultStatus
from domains.base import BaseAdapter
from mcp_server.audit import AuditLogger
from mcp_server.registry import ToolRegistry

logger = get_logger(__name__)


class ToolRouter:
    """
    Routes tool calls to domain adapters.

    Responsibilities:
    - Keep the registry and the adapters' handlers in 1:1 correspondence
    - Resolve tool names
    - Validate arguments (advisory only)
    - Audit all executions
    """

    def __init__(
        self,
        registry: Optional[ToolRegistry] = None,
        audit_logger: Optional[AuditLogger] = None
    ) -> None:
        self.registry = registry or ToolRegistry()
        self.audit_logger = audit_logger
        self._routes: dict[str, BaseAdapter] = {}

    def register_adapter(self, adapter: BaseAdapter) -> None:
        """
        Register a domain adapter and its tools.

        Args:
            adapter: Domain adapter
        """
        for tool in adapter.tools:
            if tool.name in self._routes:
                raise ValueError(f"Tool '{tool.name}' is already routed")
            self.registry.register(tool)
            self._routes[tool.name] = adapter
        logger.info("Adapter registered", domain=adapter.domain, tool_count=len(adapter.tools))

    def routes(self) -> list[str]:
        """Names of all tools the router can execute."""
        return list(self._routes)

    def verify(self) -> None:
        """
        Check that every registered tool has a handler and vice versa.

        Raises:
            RuntimeError: If the registry and the routes disagree
        """
        registered = set(self.registry.names())
        handled = {
            name for name, adapter in self._routes.items()
            if name in adapter.handlers
        }
        if registered != handled:
            raise RuntimeError(
                "Tool registry and executor disagree: "
                f"unhandled={sorted(registered - handled)} "
                f"unregistered={sorted(handled - registered)}"
            )

    async def execute(self, call: ToolCall) -> Any:
        """
        Execute a tool call.

        Args:
            call: Tool call request

        Returns:
            The tool's result value

        Raises:
            UnknownToolError: If the tool is not registered
            UpstreamError: If an upstream call fails
        """
        start_time = time.time()
        tool_name = call.tool_name

        tool = self.registry.get(tool_name)
        adapter = self._routes.get(tool_name)
        if tool is None or adapter is None:
            logger.warning("Unknown tool requested", tool=tool_name, request_id=call.context.request_id)
            await self._audit(call, ToolResult(
                tool_name=tool_name,
                status=ToolResultStatus.NOT_FOUND,
                error=f"Unknown tool: {tool_name}",
            ), domain="unknown")
            raise UnknownToolError(tool_name)

        is_valid, errors = self.registry.validate_input(tool_name, call.arguments)
        if not is_valid:
            logger.warning("Tool arguments do not match schema", tool=tool_name, errors=errors)

        logger.debug("Executing tool", tool=tool_name, request_id=call.context.request_id)

        result = ToolResult(tool_name=tool_name, status=ToolResultStatus.SUCCESS)
        try:
            return await adapter.execute(tool_name, call.arguments, call.context)
        except UpstreamError as e:
            result.status = (
                ToolResultStatus.UNAUTHORIZED if e.status == 401 else ToolResultStatus.ERROR
            )
            result.error = str(e)
            raise
        except Exception as e:
            result.status = ToolResultStatus.ERROR
            result.error = str(e)
            raise
        finally:
            result.execution_time_ms = (time.time() - start_time) * 1000
            await self._audit(call, result, domain=tool.domain)

    async def _audit(self, call: ToolCall, result: ToolResult, domain: str) -> None:
        if self.audit_logger is not None:
            await self.audit_logger.log(call, result, domain=domain)
