"""MCP Server - FastAPI Application.

Exposes the Looker tools over a single MCP JSON-RPC endpoint. The server
holds no credentials: each request's bearer token is forwarded to Looker.
"""

from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, SecretStr

from shared.config import Settings, get_settings
from shared.errors import GatewayError
from shared.logging import bind_context, clear_context, get_logger, setup_logging
from mcp_server.audit import AuditLogger
from mcp_server.auth import get_credential
from mcp_server.dispatcher import McpSession
from mcp_server.protocol import JsonRpcResponse, decode_body, parse_request
from mcp_server.registry import ToolRegistry
from mcp_server.router import ToolRouter
from domains import load_all_domains
from domains.looker.client import LookerClient

logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Liveness probe response."""
    status: str
    service: str
    version: str
    tool_count: int


def build_router(
    settings: Settings,
    client: LookerClient,
    audit_logger: Optional[AuditLogger] = None
) -> ToolRouter:
    """Build the tool router, load all domains and freeze the registry."""
    router = ToolRouter(registry=ToolRegistry(), audit_logger=audit_logger)
    load_all_domains(router, client, settings)
    router.verify()
    router.registry.freeze()
    return router


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Application settings (defaults to the cached settings)
        transport: Optional httpx transport for the Looker client
    """
    if settings is None:
        settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        setup_logging(settings.log_level, json_output=settings.environment == "production")
        logger.info("Starting MCP Server", looker_url=settings.looker.base_url)

        client = LookerClient(settings.looker.base_url, transport=transport)
        audit_logger = AuditLogger(
            log_path=settings.mcp_server.audit_log_path,
            enabled=settings.mcp_server.enable_audit,
        )
        app.state.settings = settings
        app.state.client = client
        app.state.audit_logger = audit_logger
        app.state.router = build_router(settings, client, audit_logger)

        logger.info("MCP Server started", tool_count=len(app.state.router.registry))

        yield

        logger.info("Shutting down MCP Server")
        await audit_logger.flush()
        await client.close()

    app = FastAPI(
        title="MCP Looker Gateway",
        description="MCP JSON-RPC gateway to the Looker API",
        version=settings.version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.mcp_server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", response_model=HealthResponse, tags=["System"])
    async def health_check(request: Request) -> HealthResponse:
        """Liveness and identity probe."""
        return HealthResponse(
            status="ok",
            service=settings.service_name,
            version=settings.version,
            tool_count=len(request.app.state.router.registry),
        )

    @app.post("/mcp", tags=["MCP"])
    async def mcp_endpoint(
        request: Request,
        credential: Optional[SecretStr] = Depends(get_credential)
    ) -> JSONResponse:
        """
        MCP JSON-RPC endpoint.

        One JSON-RPC request per HTTP request; the response envelope is
        returned with the HTTP status its outcome maps to.
        """
        clear_context()
        try:
            rpc_request = parse_request(decode_body(await request.body()))
        except GatewayError as e:
            logger.warning("Rejected request envelope", error=e.message)
            response = JsonRpcResponse.failure(None, e)
            return JSONResponse(response.to_dict(), status_code=e.http_status)

        bind_context(rpc_id=rpc_request.id, rpc_method=rpc_request.method)
        session = McpSession(request.app.state.router, settings, credential=credential)
        response, status_code = await session.handle(rpc_request)
        return JSONResponse(response.to_dict(), status_code=status_code)

    return app


app = create_app()


def main() -> None:
    """Run the MCP Server."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "mcp_server.main:app",
        host=settings.mcp_server.host,
        port=settings.mcp_server.port,
        reload=settings.environment == "development"
    )


if __name__ == "__main__":
    main()
