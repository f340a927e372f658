import time
import uuid
from fastapi import Request, Response
from edge_router.shared.config import logger


async def log_request_completion(
    request: Request, call_next
) -> Response:
    """
    Tags the request with an ID for tracing and logs completion details.

    Response headers are left alone: proxied upstream responses must reach the
    caller exactly as the upstream sent them.
    """
    request.state.request_id = request.headers.get('X-Request-ID', str(uuid.uuid4()))
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time

    logger.info(
        "Request completed",
        extra={
            "req_id": request.state.request_id,
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_sec": round(process_time, 4)
        }
    )
    return response
