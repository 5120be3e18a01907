"""Error envelopes returned by the gateway itself (not relayed from upstream)."""

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.gateway.types import INTERNAL_ERROR_MESSAGE, ApiResponse

logger = logging.getLogger(__name__)

INVALID_REQUEST_ERROR = "invalid_request_error"


def invalid_request(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "status": False,
            "error": {"message": message, "type": INVALID_REQUEST_ERROR},
        },
    )


def endpoint_not_found(request: Request) -> JSONResponse:
    return invalid_request(
        404,
        f"The requested endpoint ({request.method.upper()} {request.url.path}) was not found. "
        f'please make sure to use "{settings.local_base_url}" as the base URL.',
    )


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Unknown path and known path with the wrong method look the same to callers
    if exc.status_code in (404, 405):
        return endpoint_not_found(request)
    return invalid_request(exc.status_code, str(exc.detail))


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled %s on %s %s:\n%s", type(exc).__name__, request.method, request.url.path, "".join(tb))
    return JSONResponse(status_code=500, content=ApiResponse.failure(error=INTERNAL_ERROR_MESSAGE).to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
