"""Looker Domain - LookML metadata, queries, content and diagnostics.

Every tool is translated into calls against the Looker REST API using
the caller's own bearer credential.
"""

from typing import TYPE_CHECKING

from shared.config import Settings
from shared.logging import get_logger
from shared.models import DomainConfig
from domains.looker.adapter import LookerAdapter
from domains.looker.client import LookerClient
from domains.looker.tools import TOOLS

if TYPE_CHECKING:
    from mcp_server.router import ToolRouter

logger = get_logger(__name__)


def register_looker_domain(router: "ToolRouter", client: LookerClient, settings: Settings) -> LookerAdapter:
    """Register the Looker domain with the MCP server."""
    config = DomainConfig(
        name="looker",
        description="Looker analytics API",
        version=settings.version,
        base_url=settings.looker.base_url,
    )

    adapter = LookerAdapter(config, client, api_prefix=settings.looker.api_prefix)
    router.register_adapter(adapter)

    logger.info("Looker domain registered", tool_count=len(adapter.tools), base_url=config.base_url)
    return adapter


__all__ = ["LookerAdapter", "LookerClient", "TOOLS", "register_looker_domain"]
