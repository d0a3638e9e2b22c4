"""Exception handlers rendering errors as JSON (API) or HTML (form UI)."""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config import settings
from ..errors import AppError
from .schemas import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)

BAD_REQUEST = 400
NOT_FOUND = 404
SERVER_ERROR = 500


class BadRequest(Exception):
    """Malformed request; raised before any store mutation."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def map_app_error(err: AppError, status_map: dict[str, int]) -> int:
    """HTTP status for a domain error; unmapped codes are bad requests."""
    return status_map.get(err.code, BAD_REQUEST)


def _is_api(request: Request) -> bool:
    return request.url.path.startswith("/api")


def register_error_handlers(
    app: FastAPI,
    templates: Jinja2Templates,
    error_status_map: Optional[dict[str, int]] = None,
):
    """Install handlers for bad requests, unknown routes, domain and server errors."""
    status_map = dict(settings.error_status_map if error_status_map is None else error_status_map)

    def render(request: Request, status: int, code: str, message: str):
        if _is_api(request):
            body = ErrorResponse(status=status, error=ErrorDetail(code=code, message=message))
            return JSONResponse(body.model_dump(), status_code=status)
        return templates.TemplateResponse(
            request,
            "errors.html",
            {"errors": [{"msg": message}]},
            status_code=status,
        )

    @app.exception_handler(BadRequest)
    async def bad_request_handler(request: Request, exc: BadRequest):
        return render(request, BAD_REQUEST, "BAD_REQUEST", exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError):
        messages = "; ".join(e.get("msg", "") for e in exc.errors())
        return render(request, BAD_REQUEST, "BAD_REQUEST", messages or "bad request")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            message = f"{request.method} not supported for {request.url.path}"
            return render(request, NOT_FOUND, "NOT_FOUND", message)
        return render(request, exc.status_code, "HTTP_ERROR", str(exc.detail))

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return render(request, map_app_error(exc, status_map), exc.code, exc.message)

    # Register before CORSMiddleware so 500 responses still get CORS headers
    @app.middleware("http")
    async def server_error_middleware(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception(f"Unhandled error for {request.method} {request.url.path}")
            return render(request, SERVER_ERROR, "SERVER_ERROR", str(exc))
