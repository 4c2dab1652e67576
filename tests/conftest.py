"""Shared fixtures: a fake Buildable backend behind httpx.MockTransport."""

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from buildable_mcp.client import BuildableClient
from buildable_mcp.config import BuildableConfig

API_URL = "https://api.test/api"
HEARTBEAT_PATH = "/api/internal/ai-connections"

Handler = Callable[[httpx.Request], httpx.Response]


class FakeBackend:
    """Records requests and answers them from a (method, path) route table.

    Unrouted heartbeats get an empty 200; anything else unrouted is a 404.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def route(
        self,
        method: str,
        path: str,
        status: int = 200,
        body: Any = None,
        handler: Handler | None = None,
    ) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            # json=None would send an empty body; always serialize so that
            # body=None yields a literal JSON null.
            return httpx.Response(
                status,
                content=json.dumps(body).encode(),
                headers={"Content-Type": "application/json"},
            )

        self.routes[(method, f"/api{path}")] = handler or respond

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is not None:
            return handler(request)
        if request.url.path == HEARTBEAT_PATH:
            return httpx.Response(200, json={})
        return httpx.Response(404, json={"error": "not found"})

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == f"/api{path}"]

    @property
    def heartbeats(self) -> list[dict[str, Any]]:
        return [
            json.loads(r.content)
            for r in self.requests
            if r.url.path == HEARTBEAT_PATH
        ]


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def config() -> BuildableConfig:
    return BuildableConfig(
        api_url=API_URL,
        api_key="k",
        project_id="p",
        ai_assistant_id="test-assistant",
    )


@pytest.fixture
def make_client(
    backend: FakeBackend, config: BuildableConfig
) -> Callable[..., BuildableClient]:
    def factory(cfg: BuildableConfig | None = None) -> BuildableClient:
        return BuildableClient(cfg or config, transport=httpx.MockTransport(backend))

    return factory
