from fastapi.responses import JSONResponse, PlainTextResponse


def error_response(message: str, status_code: int = 500) -> JSONResponse:
    """JSON error body in the shape the chat frontend expects."""
    return JSONResponse({"error": message}, status_code=status_code)


def text_response(message: str, status_code: int) -> PlainTextResponse:
    return PlainTextResponse(message, status_code=status_code)
