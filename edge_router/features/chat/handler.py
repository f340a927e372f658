from typing import List

from fastapi import Depends, Request
from fastapi.responses import Response, StreamingResponse

from edge_router.dependencies import get_config, get_inference
from edge_router.services.inference import InferenceBackend
from edge_router.shared.config import AppConfig, logger
from edge_router.shared.constants import CHAT_ERROR_MESSAGE, SSE_HEADERS
from edge_router.shared.metrics import CHAT_REQUESTS
from edge_router.shared.responses import error_response

from .command import ChatMessage, ChatRequest


def ensure_system_prompt(messages: List[ChatMessage], prompt: str) -> List[ChatMessage]:
    """Prepends a system message with `prompt` unless the conversation already has one."""
    if not any(message.role == "system" for message in messages):
        messages.insert(0, ChatMessage(role="system", content=prompt))
    return messages


class ChatHandler:
    """Runs a streaming chat completion and relays it as Server-Sent Events."""

    def __init__(
        self,
        config: AppConfig = Depends(get_config),
        inference: InferenceBackend = Depends(get_inference),
    ):
        self._config = config.chat
        self._inference = inference

    async def handle(self, request: Request) -> Response:
        try:
            chat_request = ChatRequest.model_validate(await request.json())
            messages = ensure_system_prompt(chat_request.messages, self._config.system_prompt)

            stream = await self._inference.run(
                self._config.model_id,
                {
                    "messages": [message.model_dump() for message in messages],
                    "max_tokens": self._config.max_tokens,
                    "stream": True,
                },
            )
        except Exception as e:
            logger.error("Error processing chat request: %s", e)
            CHAT_REQUESTS.labels(outcome="error").inc()
            return error_response(CHAT_ERROR_MESSAGE)

        CHAT_REQUESTS.labels(outcome="streamed").inc()
        return StreamingResponse(stream, headers=SSE_HEADERS)
