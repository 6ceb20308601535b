from typing import Optional

from fastapi.responses import JSONResponse

from shortlink_app.errors import ShortUrlError, StoreError


def error_response(error: ShortUrlError, failure_message: Optional[str] = None) -> JSONResponse:
    """
    JSON ``{error, message}`` body for a service error.

    Store failures get the generic 500 body, optionally with a route
    specific message; their detail only goes to the log.
    """
    body = error.to_dict()
    if isinstance(error, StoreError) and failure_message:
        body["message"] = failure_message
    return JSONResponse(status_code=error.status_code, content=body)


def internal_error(message: str = "An unexpected error occurred") -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "message": message},
    )
