"""Tool Registry for MCP Server.

Holds the static catalog of tool descriptors. Tools are registered at
startup in declaration order, then the registry is frozen and only read.
"""

from typing import Any, Optional

from shared.errors import UnknownToolError
from shared.logging import get_logger
from shared.models import ToolDefinition
from shared.schema import validate_schema

logger = get_logger(__name__)


class ToolRegistry:
    """
    Central registry for all MCP tools.

    Responsibilities:
    - Register tools from domains, keeping declaration order
    - Lookup tools by name
    - Validate tool arguments against their schemas
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        self._frozen = False

    def register(self, tool: ToolDefinition) -> None:
        """
        Register a tool in the registry.

        Args:
            tool: Tool definition to register

        Raises:
            ValueError: If tool name is already registered
            RuntimeError: If the registry has been frozen
        """
        if self._frozen:
            raise RuntimeError("Tool registry is frozen")

        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")

        self._tools[tool.name] = tool
        logger.debug("Tool registered", tool=tool.name, domain=tool.domain)

    def register_many(self, tools: list[ToolDefinition]) -> None:
        """Register multiple tools at once."""
        for tool in tools:
            self.register(tool)

    def freeze(self) -> None:
        """Disallow further registration."""
        self._frozen = True
        logger.info("Tool registry frozen", tool_count=len(self._tools))

    def get(self, tool_name: str) -> Optional[ToolDefinition]:
        """Get a tool by name, or None."""
        return self._tools.get(tool_name)

    def lookup(self, tool_name: str) -> ToolDefinition:
        """
        Get a tool by name.

        Raises:
            UnknownToolError: If no tool has that name
        """
        tool = self._tools.get(tool_name)
        if tool is None:
            raise UnknownToolError(tool_name)
        return tool

    def list_tools(self) -> list[ToolDefinition]:
        """List all registered tools in registration order."""
        return list(self._tools.values())

    def names(self) -> list[str]:
        return list(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, tool_name: object) -> bool:
        return tool_name in self._tools

    def validate_input(
        self,
        tool_name: str,
        arguments: dict[str, Any]
    ) -> tuple[bool, list[str]]:
        """
        Validate arguments against the tool's input schema.

        Args:
            tool_name: Tool name
            arguments: Arguments to validate

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        tool = self.get(tool_name)
        if not tool:
            return False, [f"Tool '{tool_name}' not found"]

        return validate_schema(arguments, tool.input_schema)

    def get_tools_for_mcp(self) -> list[dict[str, Any]]:
        """Get tool descriptors in MCP tools/list format."""
        return [tool.to_mcp() for tool in self._tools.values()]
