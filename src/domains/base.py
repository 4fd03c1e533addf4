"""Base classes for domain adapters.

All adapters must:
- Translate MCP tool calls to upstream API calls
- Forward the caller's credential, never hold their own
- Project upstream responses into stable result shapes
- Never have shared mutable state
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Mapping

from shared.errors import UnknownToolError, UpstreamError
from shared.logging import get_logger
from shared.models import DomainConfig, ExecutionContext, Outcome, ToolDefinition

logger = get_logger(__name__)


ToolHandler = Callable[[dict[str, Any], ExecutionContext], Awaitable[Any]]


class BaseAdapter(ABC):
    """
    Base class for domain adapters.

    Each adapter declares its tool descriptors and one handler per tool.
    The two must name exactly the same tools.
    """

    def __init__(self, config: DomainConfig) -> None:
        self.config = config
        self.domain = config.name
        self._check_coherence()

    @property
    @abstractmethod
    def tools(self) -> list[ToolDefinition]:
        """Return all tool descriptors for this domain, in declaration order."""

    @property
    @abstractmethod
    def handlers(self) -> Mapping[str, ToolHandler]:
        """Return the tool name -> handler mapping."""

    def _check_coherence(self) -> None:
        declared = {tool.name for tool in self.tools}
        handled = set(self.handlers)
        if declared != handled:
            raise RuntimeError(
                f"Domain '{self.domain}' tools and handlers differ: "
                f"undeclared={sorted(handled - declared)} "
                f"unhandled={sorted(declared - handled)}"
            )

    async def execute(
        self,
        action: str,
        arguments: dict[str, Any],
        context: ExecutionContext
    ) -> Any:
        """
        Execute a tool action.

        Args:
            action: Tool name
            arguments: Tool arguments
            context: Per-request execution context carrying the credential

        Returns:
            The projected tool result

        Raises:
            UnknownToolError: If the adapter has no handler for the action
            UpstreamError: If an upstream call fails
        """
        handler = self.handlers.get(action)
        if handler is None:
            raise UnknownToolError(action)

        logger.debug("Domain action", domain=self.domain, action=action, request_id=context.request_id)
        return await handler(arguments, context)


async def gather_outcomes(
    calls: Mapping[str, Awaitable[Any]],
    failures: tuple[type[Exception], ...] = (UpstreamError,)
) -> dict[str, Outcome]:
    """
    Run independent upstream calls concurrently and collect every outcome.

    An exception listed in failures (UpstreamError by default) becomes
    that key's error; the others still complete. Any other exception is
    re-raised once all calls finish.

    Args:
        calls: Mapping of item key -> awaitable
        failures: Exception types recorded as per-key errors

    Returns:
        Mapping of item key -> Outcome, in the order of calls
    """
    keys = list(calls)
    results = await asyncio.gather(*calls.values(), return_exceptions=True)

    outcomes: dict[str, Outcome] = {}
    for key, result in zip(keys, results):
        if isinstance(result, failures):
            error = str(result) or result.__class__.__name__
            logger.warning("Partial upstream failure", key=key, error=error)
            outcomes[key] = Outcome(key=key, error=error)
        elif isinstance(result, BaseException):
            raise result
        else:
            outcomes[key] = Outcome(key=key, data=result)
    return outcomes
