"""
Inference backends for the chat endpoint.
Runs Workers AI text generation models over the Cloudflare REST API.
"""

from typing import Any, AsyncIterator, Dict, Optional, Protocol

import httpx

from edge_router.shared.config import GatewayConfig, logger
from edge_router.shared.constants import AI_GATEWAY_BASE_URL, WORKERS_AI_BASE_URL


class InferenceError(Exception):
    """Raised when the inference service refuses to start a completion."""

    def __init__(self, status_code: int, detail: str):
        super().__init__(f"Inference service returned {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class InferenceBackend(Protocol):
    async def run(self, model: str, inputs: Dict[str, Any]) -> AsyncIterator[bytes]:
        """Start a streaming completion and return its body as a byte iterator."""
        ...


class WorkersAIClient:
    """Handles the logic of sending completion requests to Workers AI."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        account_id: str,
        api_token: str,
        base_url: str = WORKERS_AI_BASE_URL,
        gateway: Optional[GatewayConfig] = None,
    ):
        self._client = http_client
        self._account_id = account_id
        self._api_token = api_token
        self._base_url = base_url.rstrip("/")
        self._gateway = gateway

    def endpoint(self, model: str) -> str:
        """Returns the run URL for a model, routed through AI Gateway if configured."""
        if self._gateway:
            return f"{AI_GATEWAY_BASE_URL}/{self._account_id}/{self._gateway.id}/workers-ai/{model}"
        return f"{self._base_url}/accounts/{self._account_id}/ai/run/{model}"

    def headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._api_token}",
            "Content-Type": "application/json",
        }
        if self._gateway:
            headers["cf-aig-skip-cache"] = "true" if self._gateway.skip_cache else "false"
            headers["cf-aig-cache-ttl"] = str(self._gateway.cache_ttl)
        return headers

    async def run(self, model: str, inputs: Dict[str, Any]) -> AsyncIterator[bytes]:
        """
        Opens a streaming completion and returns its body without waiting for it to finish.

        Raises:
            InferenceError: If the service answers with an error status.
            httpx.HTTPError: If the service cannot be reached.
        """
        request = self._client.build_request(
            "POST", self.endpoint(model), json=inputs, headers=self.headers()
        )
        logger.info("Running model '%s' (stream: %s)", model, inputs.get("stream", False))
        response = await self._client.send(request, stream=True)

        if response.status_code >= 400:
            try:
                await response.aread()
            finally:
                await response.aclose()
            logger.error("Workers AI error: %s - %s", response.status_code, response.text)
            raise InferenceError(response.status_code, response.text)

        return self._relay(response)

    async def _relay(self, response: httpx.Response) -> AsyncIterator[bytes]:
        try:
            async for chunk in response.aiter_bytes():
                yield chunk
        except httpx.HTTPError as e:
            # Headers are already on the wire, the caller just sees the stream end.
            logger.error("Inference stream interrupted: %s", e)
        finally:
            await response.aclose()
