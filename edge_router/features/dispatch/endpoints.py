from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from edge_router.dependencies import get_assets
from edge_router.features.chat.handler import ChatHandler
from edge_router.features.openai_proxy.handler import OpenAIProxyHandler
from edge_router.services.assets import AssetFetcher
from edge_router.shared.constants import ALL_METHODS
from edge_router.shared.metrics import ROUTED_REQUESTS
from edge_router.shared.responses import text_response

from .query import Route, resolve_route

router = APIRouter()

@router.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
async def dispatch(
    request: Request,
    assets: AssetFetcher = Depends(get_assets),
    chat: ChatHandler = Depends(ChatHandler),
    proxy: OpenAIProxyHandler = Depends(OpenAIProxyHandler),
) -> Response:
    """Single entry point: every request is routed by path and method."""
    route = resolve_route(request.method, request.url.path)
    ROUTED_REQUESTS.labels(route=route.value).inc()

    if route is Route.ASSETS:
        return await assets.fetch(request)
    if route is Route.CHAT:
        return await chat.handle(request)
    if route is Route.METHOD_NOT_ALLOWED:
        return text_response("Method not allowed", 405)
    if route is Route.OPENAI_PROXY:
        return await proxy.handle(request)
    return text_response("Not found", 404)
