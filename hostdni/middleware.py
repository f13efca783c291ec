from __future__ import annotations

from time import perf_counter
from typing import Awaitable, Callable
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from hostdni.errors import UnauthorizedError
from hostdni.logger import get_logger
from hostdni.metrics import observe_http_request, record_auth_failure
from hostdni.schemas.envelope import failure
from hostdni.security import TokenManager, extract_bearer

Handler = Callable[[Request], Awaitable[Response]]

PUBLIC_PATHS = frozenset({"/api/auth/token", "/api/health"})
UNAUTHORIZED_MESSAGE = "Invalid or missing API token"

_logger = get_logger("api")


def requires_token(request: Request) -> bool:
    # Only the /api surface is guarded; /metrics and /docs stay local-readable.
    if request.method == "OPTIONS":
        return False
    path = request.url.path
    return path.startswith("/api/") and path not in PUBLIC_PATHS


def install_middleware(app: FastAPI, tokens: TokenManager) -> None:
    """Register token checking, then request tracing around it (outermost)."""

    @app.middleware("http")
    async def auth_guard(request: Request, call_next: Handler) -> Response:
        if not requires_token(request):
            return await call_next(request)

        presented = extract_bearer(request.headers.get("authorization"))
        if tokens.validate(presented):
            return await call_next(request)

        record_auth_failure()
        _logger.warning(
            "auth.reject",
            UNAUTHORIZED_MESSAGE,
            method=request.method,
            path=request.url.path,
            token_present=presented is not None,
        )
        rejected = UnauthorizedError(UNAUTHORIZED_MESSAGE)
        return JSONResponse(status_code=rejected.status_code, content=failure(rejected.detail))

    @app.middleware("http")
    async def trace_requests(request: Request, call_next: Handler) -> Response:
        request_id = request.headers.get("x-request-id") or uuid4().hex
        method, path = request.method, request.url.path
        began = perf_counter()

        with _logger.context(request_id=request_id):
            try:
                response = await call_next(request)
            except Exception:
                _logger.exception("request.error", "Unhandled error", method=method, path=path)
                raise
            elapsed = perf_counter() - began
            observe_http_request(
                method=method,
                path=path,
                status=response.status_code,
                duration_seconds=elapsed,
            )
            _logger.info(
                "request",
                f"{method} {path} -> {response.status_code}",
                duration_ms=round(elapsed * 1000, 1),
                client=request.client.host if request.client else None,
            )

        response.headers["X-Request-ID"] = request_id
        return response
