#!/usr/bin/env python3
"""
Constants shared across the edge chat router.
"""

# Workers AI model used by the chat endpoint
# https://developers.cloudflare.com/workers-ai/models/
DEFAULT_MODEL_ID = "@cf/meta/llama-3.1-8b-instruct-fp8"

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful, friendly assistant. Provide concise and accurate responses."
)
DEFAULT_MAX_TOKENS = 1024

WORKERS_AI_BASE_URL = "https://api.cloudflare.com/client/v4"
AI_GATEWAY_BASE_URL = "https://gateway.ai.cloudflare.com/v1"

GROQ_API_HOST = "api.groq.com"

CHAT_PATH = "/api/chat"
API_PREFIX = "/api/"
OPENAI_PREFIX = "/openai/v1/"

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

SSE_HEADERS = {
    "content-type": "text/event-stream; charset=utf-8",
    "cache-control": "no-cache",
    "connection": "keep-alive",
}

CHAT_ERROR_MESSAGE = "Failed to process request"
PROXY_ERROR_MESSAGE = "Failed to proxy request"
