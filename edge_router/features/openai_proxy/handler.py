"""
Transparent reverse proxy for OpenAI-compatible API calls.
"""

from typing import AsyncIterator, List, Tuple

import httpx
from fastapi import Depends, Request
from fastapi.responses import Response, StreamingResponse

from edge_router.dependencies import get_config, get_http_client
from edge_router.shared.config import AppConfig, logger
from edge_router.shared.constants import PROXY_ERROR_MESSAGE
from edge_router.shared.metrics import PROXY_REQUESTS
from edge_router.shared.responses import error_response


def passthrough_headers(headers: httpx.Headers) -> List[Tuple[bytes, bytes]]:
    """Raw upstream header rows, duplicates kept, names lowercased for ASGI."""
    return [(name.lower(), value) for name, value in headers.raw]


def has_body(request: Request) -> bool:
    """Only requests with message framing carry a body, like a Fetch Request with a null body."""
    return "content-length" in request.headers or "transfer-encoding" in request.headers


async def relay_raw(response: httpx.Response) -> AsyncIterator[bytes]:
    """Yields the upstream body exactly as received, still content-encoded."""
    try:
        async for chunk in response.aiter_raw():
            yield chunk
    except httpx.HTTPError as e:
        logger.error("Proxied stream interrupted: %s", e)
    finally:
        await response.aclose()


class OpenAIProxyHandler:
    """
    Forwards requests to the configured OpenAI-compatible upstream.
    Only the authority, scheme, `host` header and (when a key is configured)
    `authorization` header change; everything else passes through.
    """

    def __init__(
        self,
        config: AppConfig = Depends(get_config),
        http_client: httpx.AsyncClient = Depends(get_http_client),
    ):
        self._config = config.proxy
        self._client = http_client

    def build_upstream_request(self, request: Request) -> httpx.Request:
        upstream_host = self._config.upstream_host
        url = httpx.URL(str(request.url)).copy_with(
            scheme="https", host=upstream_host, port=None
        )

        headers = httpx.Headers(request.headers.raw)
        headers["host"] = upstream_host
        if self._config.api_key:
            headers["authorization"] = f"Bearer {self._config.api_key}"

        content = request.stream() if has_body(request) else None
        return self._client.build_request(
            request.method, url, headers=headers, content=content
        )

    async def handle(self, request: Request) -> Response:
        try:
            upstream_request = self.build_upstream_request(request)
            logger.info("Proxying %s %s", upstream_request.method, upstream_request.url)
            upstream_response = await self._client.send(upstream_request, stream=True)
        except Exception as e:
            logger.error("Error proxying request: %s", e)
            PROXY_REQUESTS.labels(outcome="error").inc()
            return error_response(PROXY_ERROR_MESSAGE)

        PROXY_REQUESTS.labels(outcome=str(upstream_response.status_code)).inc()
        response = StreamingResponse(
            relay_raw(upstream_response),
            status_code=upstream_response.status_code,
        )
        response.raw_headers = passthrough_headers(upstream_response.headers)
        return response
