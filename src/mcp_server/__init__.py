"""MCP Server - JSON-RPC dispatch, tool registry, routing and auditing.

Accepts MCP requests over HTTP, requires a bearer credential where the
protocol calls for one, and routes tool calls to the Looker domain.
"""

from mcp_server.audit import AuditLogger
from mcp_server.auth import extract_credential
from mcp_server.dispatcher import McpSession, SessionState
from mcp_server.registry import ToolRegistry
from mcp_server.router import ToolRouter

__all__ = [
    "AuditLogger",
    "extract_credential",
    "McpSession",
    "SessionState",
    "ToolRegistry",
    "ToolRouter",
]
