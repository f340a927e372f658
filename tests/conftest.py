"""Shared fixtures: fake capabilities and a configured app."""

from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest
from fastapi import Request
from fastapi.responses import PlainTextResponse
from fastapi.testclient import TestClient

from edge_router.main import create_app
from edge_router.shared.config import AppConfig


class FakeInference:
    """Records run() calls and streams canned chunks."""

    def __init__(self, chunks: Optional[List[bytes]] = None, error: Optional[Exception] = None):
        self.chunks = chunks if chunks is not None else [b"data: hello\n\n", b"data: [DONE]\n\n"]
        self.error = error
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    async def run(self, model: str, inputs: Dict[str, Any]):
        self.calls.append((model, inputs))
        if self.error:
            raise self.error

        async def stream():
            for chunk in self.chunks:
                yield chunk

        return stream()


class FakeAssets:
    """Records every request handed to it."""

    def __init__(self):
        self.requests: List[Tuple[str, str]] = []

    async def fetch(self, request: Request):
        self.requests.append((request.method, request.url.path))
        return PlainTextResponse(f"asset:{request.url.path}")


class UpstreamRecorder:
    """MockTransport handler capturing outbound proxy requests."""

    def __init__(self, status_code: int = 200, body: bytes = b'{"object": "list"}', headers=None):
        self.status_code = status_code
        self.body = body
        self.headers = headers or [("content-type", "application/json")]
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(
            self.status_code,
            headers=self.headers,
            stream=httpx.ByteStream(self.body),
        )


@pytest.fixture
def config():
    return AppConfig()


@pytest.fixture
def inference():
    return FakeInference()


@pytest.fixture
def assets():
    return FakeAssets()


@pytest.fixture
def upstream():
    return UpstreamRecorder()


@pytest.fixture
def make_client(config, inference, assets, upstream):
    """Builds a TestClient; keyword overrides replace individual fixtures."""
    clients = []

    def _make(**overrides) -> TestClient:
        transport = overrides.pop("transport", httpx.MockTransport(upstream))
        app = create_app(
            overrides.pop("config", config),
            http_client=httpx.AsyncClient(transport=transport),
            inference=overrides.pop("inference", inference),
            assets=overrides.pop("assets", assets),
        )
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    return make_client()
