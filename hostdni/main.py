from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hostdni.config import Settings, get_settings
from hostdni.errors import HostsError
from hostdni.logger import configure_logging, get_logger
from hostdni.middleware import UNAUTHORIZED_MESSAGE, install_middleware
from hostdni.routes import auth, backups, hosts, lists, system
from hostdni.runtime import RuntimeController
from hostdni.schemas.envelope import failure
from hostdni.security import TokenManager
from hostdni.services.catalogs import Catalogs
from hostdni.services.elevation import ElevatedExecutor, build_executor

__all__ = ["UNAUTHORIZED_MESSAGE", "app", "create_app"]

logger = get_logger("app")


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for item in exc.errors():
        location = ".".join(str(part) for part in item.get("loc", ()) if part != "body")
        text = item.get("msg", "invalid")
        parts.append(f"{location}: {text}" if location else str(text))
    return "; ".join(parts) or "Invalid request"


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(HostsError)
    async def hosts_error(request: Request, exc: HostsError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=failure(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content=failure(_validation_message(exc)))

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=failure(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )


def create_app(
    settings: Optional[Settings] = None,
    *,
    tokens: Optional[TokenManager] = None,
    executor: Optional[ElevatedExecutor] = None,
) -> FastAPI:
    """Build the control API. `tokens` and `executor` are injectable for tests."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_file or None)

    tokens = tokens or TokenManager(
        rotation_seconds=settings.token_rotation_seconds,
        grace_seconds=settings.token_grace_seconds,
        token_length=settings.token_length,
    )
    executor = executor or build_executor(settings.elevation_mode)
    runtime = RuntimeController(tokens)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "app.startup",
            "Starting hosts control API",
            env=settings.app_env,
            version=settings.app_version,
            hosts_path=settings.hosts_path,
            executor=executor.name,
        )
        await runtime.start()
        try:
            yield
        finally:
            await runtime.stop()
            logger.info("app.shutdown", "Stopped hosts control API")

    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)
    app.state.settings = settings
    app.state.tokens = tokens
    app.state.executor = executor
    app.state.catalogs = Catalogs()
    app.state.runtime = runtime

    _register_error_handlers(app)
    install_middleware(app, tokens)

    origins = settings.cors_origin_list()
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        )

    for router in (system.router, auth.router, hosts.router, backups.router, lists.router):
        app.include_router(router)
    return app


app = create_app()
