"""Shared fixtures: a scripted fake of the Looker API."""

import json
from typing import Any, Callable, Optional

import httpx
import pytest
from pydantic import SecretStr

from shared.config import LookerSettings, MCPServerSettings, Settings
from shared.models import DomainConfig, ExecutionContext

LOOKER_URL = "https://looker.test"
TOKEN = "token-abc"


class FakeLooker:
    """Routes (method, path) to canned responses and records every request."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        json_body: Any = None,
        status: int = 200,
        text: Optional[str] = None,
        handler: Optional[Callable[[httpx.Request], httpx.Response]] = None,
    ) -> None:
        if handler is None:
            def handler(request: httpx.Request) -> httpx.Response:
                if text is not None:
                    return httpx.Response(status, text=text)
                return httpx.Response(status, json=json_body)
        self.routes[(method, f"/api/4.0{path}")] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, text='{"message":"Not found"}')
        return handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def paths(self) -> list[tuple[str, str]]:
        return [(r.method, r.url.path) for r in self.requests]

    def body(self, index: int) -> Any:
        return json.loads(self.requests[index].content)


@pytest.fixture
def fake_looker() -> FakeLooker:
    return FakeLooker()


@pytest.fixture
def looker_client(fake_looker):
    from domains.looker.client import LookerClient

    return LookerClient(LOOKER_URL, transport=fake_looker.transport)


@pytest.fixture
def adapter(looker_client):
    from domains.looker.adapter import LookerAdapter

    config = DomainConfig(name="looker", description="Looker", base_url=LOOKER_URL)
    return LookerAdapter(config, looker_client)


@pytest.fixture
def context() -> ExecutionContext:
    return ExecutionContext(request_id="req-1", credential=SecretStr(TOKEN))


@pytest.fixture
def settings() -> Settings:
    return Settings(
        looker=LookerSettings(base_url=LOOKER_URL),
        mcp_server=MCPServerSettings(enable_audit=False),
    )


@pytest.fixture
def api(settings, fake_looker):
    """HTTP client for the gateway wired to the fake Looker API."""
    from fastapi.testclient import TestClient
    from mcp_server.main import create_app

    app = create_app(settings, transport=fake_looker.transport)
    with TestClient(app) as client:
        yield client
