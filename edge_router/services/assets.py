import os
from typing import Protocol

from fastapi import Request, Response
from starlette.exceptions import HTTPException
from starlette.staticfiles import StaticFiles

from edge_router.shared.config import logger
from edge_router.shared.responses import text_response


class AssetFetcher(Protocol):
    async def fetch(self, request: Request) -> Response:
        ...


class StaticAssets:
    """
    Serves the chat frontend from a directory on disk.
    Missing files and unsupported methods get the router's plain-text 404/405 bodies.
    """
    def __init__(self, directory: str, html: bool = True):
        self.directory = directory
        if not os.path.isdir(directory):
            logger.warning("Static assets directory %s does not exist", directory)
        self._files = StaticFiles(directory=directory, html=html, check_dir=False)

    async def fetch(self, request: Request) -> Response:
        path = self._files.get_path(request.scope)
        try:
            return await self._files.get_response(path, request.scope)
        except HTTPException as e:
            if e.status_code == 404:
                return text_response("Not found", 404)
            if e.status_code == 405:
                return text_response("Method not allowed", 405)
            raise
