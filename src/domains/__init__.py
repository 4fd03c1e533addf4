"""Upstream domains.

Each domain contains:
- Tool descriptors
- Adapter implementation (tool name -> REST call sequence)
- An HTTP client for its upstream API

Domains share no state; the caller's credential travels with each call.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shared.config import Settings
    from domains.looker.client import LookerClient
    from mcp_server.router import ToolRouter


def load_all_domains(router: "ToolRouter", client: "LookerClient", settings: "Settings") -> None:
    """
    Load and register all upstream domains.

    Called at MCP server startup, before the registry is frozen.
    """
    from domains.looker import register_looker_domain

    register_looker_domain(router, client, settings)


__all__ = ["load_all_domains"]
