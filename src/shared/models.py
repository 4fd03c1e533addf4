"""Core data models for the Looker MCP gateway.

This module defines the shared data structures used across the gateway:
tool descriptors, the per-call invocation context, partial-failure
outcomes and audit records.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, model_validator


class ToolDefinition(BaseModel):
    """
    Immutable descriptor of an MCP tool.

    Rendered verbatim (name, description, inputSchema) in tools/list.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., description="Unique tool name")
    description: str = Field(..., description="Human-readable description")
    input_schema: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}, "required": []},
        alias="inputSchema",
        description="JSON Schema describing the tool arguments"
    )
    domain: str = Field(default="looker", description="Domain the tool belongs to")

    def to_mcp(self) -> dict[str, Any]:
        """Render the descriptor in MCP tools/list format."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


class DomainConfig(BaseModel):
    """Configuration for an upstream domain."""
    name: str
    description: str
    version: str = "1.0.0"
    enabled: bool = True
    base_url: str


class ExecutionContext(BaseModel):
    """
    Per-request context for a tool invocation.

    The credential is held only for the lifetime of one HTTP request.
    """
    request_id: str = Field(..., description="Unique request identifier")
    credential: SecretStr
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ToolCall(BaseModel):
    """A request to execute a specific tool."""
    tool_name: str
    arguments: dict[str, Any] = Field(default_factory=dict)
    context: ExecutionContext


class ToolResultStatus(str, Enum):
    """Status of tool execution."""
    SUCCESS = "success"
    ERROR = "error"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"


class ToolResult(BaseModel):
    """Outcome of a tool execution, as recorded in the audit log."""
    tool_name: str
    status: ToolResultStatus
    error: Optional[str] = None
    execution_time_ms: float = 0


class Outcome(BaseModel):
    """
    Result of one item in a partial-failure fan-out.

    Exactly one of data or error is meaningful; ok tells which.
    """
    key: str
    data: Any = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def _check_exclusive(self) -> "Outcome":
        if self.error is not None and self.data is not None:
            raise ValueError("Outcome cannot carry both data and error")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None

    def as_section(self) -> Any:
        """Data on success, {"error": message} on failure."""
        return self.data if self.ok else {"error": self.error}


class AuditEntry(BaseModel):
    """
    Audit log entry for a tools/call invocation.

    Never carries the credential, only whether one was present.
    """
    id: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    request_id: str
    tool_name: str
    domain: str
    arguments: dict[str, Any] = Field(default_factory=dict)
    status: ToolResultStatus
    error: Optional[str] = None
    execution_time_ms: float = 0
    credential_present: bool = True
