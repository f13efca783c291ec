from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from hostdni.config import Settings
from hostdni.dependencies import get_app_settings, get_catalogs, get_hosts_paths
from hostdni.errors import HostsError
from hostdni.logger import get_logger
from hostdni.metrics import metrics_content_type, render_metrics
from hostdni.models.paths import HostsPaths
from hostdni.schemas.envelope import ApiResponse
from hostdni.services import hosts_reader
from hostdni.services.catalogs import Catalogs

router = APIRouter()
_logger = get_logger("api.system")


@router.get("/api/health", tags=["system"], response_model=ApiResponse[Dict[str, str]])
async def health(settings: Settings = Depends(get_app_settings)) -> ApiResponse[Dict[str, str]]:
    _logger.debug("health.check", "Health check", status="healthy")
    return ApiResponse[Dict[str, str]](
        success=True,
        data={
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": settings.app_version,
        },
        message="Service is healthy",
    )


@router.get("/api/stats", tags=["system"], response_model=ApiResponse[Dict[str, Any]])
async def stats(
    paths: HostsPaths = Depends(get_hosts_paths),
    catalogs: Catalogs = Depends(get_catalogs),
) -> ApiResponse[Dict[str, Any]]:
    try:
        host_entries = await asyncio.to_thread(hosts_reader.count, paths)
    except HostsError as exc:
        _logger.debug("stats.count.skip", "Reporting zero host entries", reason=exc.detail)
        host_entries = 0
    return ApiResponse[Dict[str, Any]](
        success=True,
        data={
            "host_entries": host_entries,
            "backups": len(catalogs.backups),
            "allow_lists": len(catalogs.allow_lists),
            "block_lists": len(catalogs.block_lists),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


@router.get("/metrics", include_in_schema=False)
async def metrics(settings: Settings = Depends(get_app_settings)) -> Response:
    if not settings.metrics_enabled:
        raise HTTPException(status_code=404, detail="Metrics are disabled.")
    return Response(content=render_metrics(), media_type=metrics_content_type())
