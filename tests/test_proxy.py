"""Tests for the OpenAI-compatible reverse proxy."""

import httpx
import pytest

from edge_router.features.openai_proxy.handler import passthrough_headers
from edge_router.shared.config import AppConfig, ProxyConfig

from conftest import UpstreamRecorder


@pytest.fixture
def keyed_config():
    return AppConfig(proxy=ProxyConfig(api_key="gsk_test"))


class TestUpstreamRequest:
    """Tests for how the outbound request is constructed."""

    def test_rewrites_authority_and_scheme(self, client, upstream):
        client.get("/openai/v1/models?limit=5")

        sent = upstream.requests[0]
        assert sent.url.scheme == "https"
        assert sent.url.host == "api.groq.com"
        assert sent.url.port is None
        assert sent.url.path == "/openai/v1/models"
        assert sent.url.query == b"limit=5"
        assert sent.headers["host"] == "api.groq.com"

    def test_method_and_body_preserved(self, client, upstream):
        body = b'{"model": "llama-3.1-8b-instant", "messages": [{"role": "user", "content": "Hi"}]}'
        client.post(
            "/openai/v1/chat/completions",
            content=body,
            headers={"content-type": "application/json"},
        )

        sent = upstream.requests[0]
        assert sent.method == "POST"
        assert sent.content == body
        assert sent.headers["content-type"] == "application/json"

    def test_bodyless_delete_adds_no_framing(self, client, upstream):
        """A request without a body is forwarded without one, and without framing headers."""
        client.delete("/openai/v1/files/abc")

        sent = upstream.requests[0]
        assert sent.method == "DELETE"
        assert sent.content == b""
        assert "transfer-encoding" not in sent.headers
        assert "content-length" not in sent.headers

    def test_chunked_body_streamed_through(self, client, upstream):
        def body():
            yield b'{"model": "llama-3.1-8b-instant", '
            yield b'"messages": []}'

        client.post(
            "/openai/v1/chat/completions",
            content=body(),
            headers={"content-type": "application/json"},
        )

        sent = upstream.requests[0]
        assert sent.content == b'{"model": "llama-3.1-8b-instant", "messages": []}'
        assert sent.headers.get_list("transfer-encoding") == ["chunked"]
        assert "content-length" not in sent.headers

    def test_caller_headers_copied(self, client, upstream):
        client.get("/openai/v1/models", headers={"x-custom": "kept", "user-agent": "openai-python/1.0"})

        sent = upstream.requests[0]
        assert sent.headers["x-custom"] == "kept"
        assert sent.headers["user-agent"] == "openai-python/1.0"

    def test_configured_key_overrides_caller(self, make_client, upstream, keyed_config):
        client = make_client(config=keyed_config)
        client.get("/openai/v1/models", headers={"authorization": "Bearer caller"})

        sent = upstream.requests[0]
        assert sent.headers.get_list("authorization") == ["Bearer gsk_test"]

    def test_configured_key_added(self, make_client, upstream, keyed_config):
        client = make_client(config=keyed_config)
        client.get("/openai/v1/models")
        assert upstream.requests[0].headers["authorization"] == "Bearer gsk_test"

    def test_no_key_keeps_caller_authorization(self, client, upstream):
        client.get("/openai/v1/models", headers={"authorization": "Bearer caller"})
        assert upstream.requests[0].headers["authorization"] == "Bearer caller"

    def test_no_key_no_authorization(self, client, upstream):
        client.get("/openai/v1/models")
        assert "authorization" not in upstream.requests[0].headers

    def test_custom_upstream_host(self, make_client, upstream):
        client = make_client(config=AppConfig(proxy=ProxyConfig(upstream_host="api.example.com")))
        client.get("/openai/v1/models")

        sent = upstream.requests[0]
        assert sent.url.host == "api.example.com"
        assert sent.headers["host"] == "api.example.com"


class TestUpstreamResponse:
    """Tests for relaying the upstream response."""

    def test_status_headers_and_body_passed_through(self, make_client):
        upstream = UpstreamRecorder(
            status_code=429,
            body=b'{"error": {"message": "rate limited"}}',
            headers=[
                ("content-type", "application/json"),
                ("x-ratelimit-remaining-requests", "0"),
                ("set-cookie", "a=1"),
                ("set-cookie", "b=2"),
            ],
        )
        client = make_client(transport=httpx.MockTransport(upstream))
        resp = client.get("/openai/v1/models")

        assert resp.status_code == 429
        assert resp.content == b'{"error": {"message": "rate limited"}}'
        assert resp.headers["x-ratelimit-remaining-requests"] == "0"
        assert resp.headers.get_list("set-cookie") == ["a=1", "b=2"]

    def test_streamed_body_relayed(self, make_client):
        sse = b'data: {"choices": []}\n\ndata: [DONE]\n\n'
        upstream = UpstreamRecorder(body=sse, headers=[("content-type", "text/event-stream")])
        client = make_client(transport=httpx.MockTransport(upstream))

        resp = client.post("/openai/v1/chat/completions", json={"stream": True})
        assert resp.headers["content-type"] == "text/event-stream"
        assert resp.content == sse

    def test_network_failure(self, make_client):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(transport=httpx.MockTransport(refuse))
        resp = client.post("/openai/v1/chat/completions", json={"model": "x"})

        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to proxy request"}


class TestPassthroughHeaders:
    def test_duplicates_kept_and_lowercased(self):
        headers = httpx.Headers([("Set-Cookie", "a=1"), ("set-cookie", "b=2"), ("X-Id", "7")])
        assert passthrough_headers(headers) == [
            (b"set-cookie", b"a=1"),
            (b"set-cookie", b"b=2"),
            (b"x-id", b"7"),
        ]
