from enum import Enum

from edge_router.shared.constants import API_PREFIX, CHAT_PATH, OPENAI_PREFIX


class Route(str, Enum):
    ASSETS = "assets"
    CHAT = "chat"
    METHOD_NOT_ALLOWED = "method_not_allowed"
    OPENAI_PROXY = "openai_proxy"
    NOT_FOUND = "not_found"


def resolve_route(method: str, path: str) -> Route:
    """
    Picks the handler for a request. Every (method, path) pair maps to exactly one route.

    The OpenAI prefix is checked before the asset fallback, otherwise
    `/openai/v1/...` (which is not under `/api/`) would never reach the proxy.
    """
    if path.startswith(OPENAI_PREFIX):
        return Route.OPENAI_PROXY

    if path == "/" or not path.startswith(API_PREFIX):
        return Route.ASSETS

    if path == CHAT_PATH:
        return Route.CHAT if method.upper() == "POST" else Route.METHOD_NOT_ALLOWED

    return Route.NOT_FOUND
