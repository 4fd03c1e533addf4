"""Audit logging for MCP Server.

Logs every tools/call for compliance and debugging.
Captures: tool, redacted arguments, timestamp, result, credential presence.
The credential itself is never recorded.
"""

import asyncio
import uuid
from pathlib import Path
from typing import Any

import aiofiles

from shared.logging import get_logger
from shared.models import AuditEntry, ToolCall, ToolResult

logger = get_logger(__name__)


class AuditLogger:
    """
    Audit logger for MCP tool executions.

    Entries go to the structured log immediately and are buffered for
    batch writing to a JSON-lines file.
    """

    # Arguments that should be redacted in audit logs
    SENSITIVE_PARAMS = {"password", "token", "secret", "api_key", "apikey", "credential", "authorization"}

    def __init__(
        self,
        log_path: str = "logs/audit.log",
        enabled: bool = True,
        buffer_size: int = 100
    ) -> None:
        self.log_path = Path(log_path)
        self.enabled = enabled
        self.buffer_size = buffer_size
        self._buffer: list[AuditEntry] = []
        self._lock = asyncio.Lock()

        if self.enabled:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)

    def _redact_sensitive(self, params: dict[str, Any]) -> dict[str, Any]:
        """Redact sensitive arguments from audit logs."""
        redacted = {}
        for key, value in params.items():
            if key.lower() in self.SENSITIVE_PARAMS:
                redacted[key] = "[REDACTED]"
            elif isinstance(value, dict):
                redacted[key] = self._redact_sensitive(value)
            else:
                redacted[key] = value
        return redacted

    def create_entry(self, call: ToolCall, result: ToolResult, domain: str) -> AuditEntry:
        """Create an audit entry from tool execution data."""
        return AuditEntry(
            id=str(uuid.uuid4()),
            request_id=call.context.request_id,
            tool_name=call.tool_name,
            domain=domain,
            arguments=self._redact_sensitive(call.arguments),
            status=result.status,
            error=result.error,
            execution_time_ms=result.execution_time_ms,
            credential_present=bool(call.context.credential.get_secret_value()),
        )

    async def log(self, call: ToolCall, result: ToolResult, domain: str) -> None:
        """
        Log a tool execution.

        Args:
            call: Tool call request
            result: Tool execution result
            domain: Domain that owns the tool
        """
        if not self.enabled:
            return

        entry = self.create_entry(call, result, domain)

        logger.info(
            "Tool executed",
            audit_id=entry.id,
            tool=entry.tool_name,
            status=entry.status.value,
            execution_time_ms=round(entry.execution_time_ms, 2),
            request_id=entry.request_id,
        )

        async with self._lock:
            self._buffer.append(entry)

            if len(self._buffer) >= self.buffer_size:
                await self._flush()

    async def _flush(self) -> None:
        """Flush buffered entries to file."""
        if not self._buffer:
            return

        entries_to_write = self._buffer.copy()
        self._buffer.clear()

        try:
            async with aiofiles.open(self.log_path, "a") as f:
                for entry in entries_to_write:
                    await f.write(entry.model_dump_json() + "\n")
        except OSError as e:
            logger.error("Failed to write audit log", error=str(e))
            # Keep entries for the next flush
            self._buffer.extend(entries_to_write)

    async def flush(self) -> None:
        """Public method to flush audit buffer."""
        async with self._lock:
            await self._flush()
