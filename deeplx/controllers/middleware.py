"""
/**
 * @file deeplx/controllers/middleware.py
 * @description CORS 头注入、预检请求、统一错误响应。
 */
"""

from __future__ import annotations

import logging

from fastapi import Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse, Response

from deeplx.utils import DeepLXError

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}
PREFLIGHT_MAX_AGE = "86400"


class CorsErrorMiddleware(BaseHTTPMiddleware):
    """Answers preflight requests, adds CORS headers to every response and
    turns anything that escapes the routes into a JSON 500."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "OPTIONS":
            response = Response(status_code=204)
            response.headers["Access-Control-Max-Age"] = PREFLIGHT_MAX_AGE
        else:
            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(f"Unhandled exception on {request.method} {request.url.path}: {e}", exc_info=True)
                response = JSONResponse(
                    status_code=500,
                    content={"code": 500, "message": "Internal server error", "error": str(e)},
                )
        for key, value in CORS_HEADERS.items():
            response.headers[key] = value
        return response


async def deeplx_error_handler(request: Request, exc: DeepLXError) -> JSONResponse:
    if exc.status_code < 500:
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    else:
        logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # unknown paths and wrong methods both read as "Not Found"
    if exc.status_code in (404, 405):
        return JSONResponse(status_code=404, content={"code": 404, "message": "Not Found"})
    return JSONResponse(status_code=exc.status_code, content={"code": exc.status_code, "message": str(exc.detail)})
