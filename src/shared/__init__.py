"""Shared models, configuration, logging and errors for the Looker MCP gateway."""

from shared.models import (
    AuditEntry,
    DomainConfig,
    ExecutionContext,
    Outcome,
    ToolCall,
    ToolDefinition,
    ToolResult,
)
from shared.config import Settings, get_settings
from shared.errors import GatewayError, UpstreamError
from shared.logging import get_logger, setup_logging

__all__ = [
    "AuditEntry",
    "DomainConfig",
    "ExecutionContext",
    "Outcome",
    "ToolCall",
    "ToolDefinition",
    "ToolResult",
    "Settings",
    "get_settings",
    "GatewayError",
    "UpstreamError",
    "get_logger",
    "setup_logging",
]
