#!/usr/bin/env python3
"""
Metrics definitions for the edge chat router.
"""

import prometheus_client

ROUTED_REQUESTS = prometheus_client.Counter(
    'edge_router_requests_total', 'Requests dispatched by the router', ['route']
)
CHAT_REQUESTS = prometheus_client.Counter(
    'edge_router_chat_requests_total', 'Chat completion requests by outcome', ['outcome']
)
PROXY_REQUESTS = prometheus_client.Counter(
    'edge_router_proxy_requests_total', 'Proxied OpenAI-compatible requests by outcome', ['outcome']
)
