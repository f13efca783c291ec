from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Callable, List, TypeVar

from fastapi import APIRouter, Depends, Query, status

from hostdni.config import Settings
from hostdni.dependencies import get_app_settings, get_executor, get_hosts_paths
from hostdni.errors import HostsError
from hostdni.logger import get_logger
from hostdni.metrics import record_hosts_operation
from hostdni.models.paths import HostsPaths
from hostdni.schemas.envelope import ApiResponse
from hostdni.schemas.hosts import (
    HostPageOut,
    HostRecordCreate,
    HostRecordOut,
    HostsActionOut,
    HostsStatusOut,
)
from hostdni.services import hosts_reader, hosts_toggle, hosts_writer
from hostdni.services.elevation import ElevatedExecutor

router = APIRouter(prefix="/api/etc/hosts", tags=["hosts"])
_logger = get_logger("api.hosts")

R = TypeVar("R")


async def _run(action: str, func: Callable[..., R], *args: Any, **kwargs: Any) -> R:
    try:
        result = await asyncio.to_thread(func, *args, **kwargs)
    except HostsError as exc:
        record_hosts_operation(action=action, ok=False)
        _logger.warning("hosts.action.fail", "Hosts operation failed", action=action, error=exc.detail)
        raise
    record_hosts_operation(action=action, ok=True)
    return result


@router.get("", response_model=ApiResponse[HostPageOut])
async def list_records(
    page: int = Query(default=0, ge=0),
    page_size: int | None = Query(default=None),
    paths: HostsPaths = Depends(get_hosts_paths),
    settings: Settings = Depends(get_app_settings),
) -> ApiResponse[HostPageOut]:
    requested = settings.page_size_default if page_size is None else page_size
    effective = hosts_reader.clamp_page_size(
        requested,
        minimum=settings.page_size_min,
        maximum=settings.page_size_max,
    )
    result = await _run("read", hosts_reader.read_page, paths, page, effective)
    return ApiResponse[HostPageOut](success=True, data=HostPageOut.model_validate(result))


@router.post("", response_model=ApiResponse[HostRecordOut], status_code=status.HTTP_201_CREATED)
async def create_record(
    payload: HostRecordCreate,
    paths: HostsPaths = Depends(get_hosts_paths),
    settings: Settings = Depends(get_app_settings),
) -> ApiResponse[HostRecordOut]:
    record = await _run(
        "create",
        hosts_writer.create_record,
        paths,
        address=payload.address,
        name=payload.name,
        comment=payload.comment,
        enabled=True if payload.enabled is None else payload.enabled,
        batch_size=settings.write_batch_size,
    )
    return ApiResponse[HostRecordOut](
        success=True,
        data=HostRecordOut.model_validate(record),
        message="Host entry created successfully",
    )


@router.get("/count", response_model=ApiResponse[int])
async def count_records(paths: HostsPaths = Depends(get_hosts_paths)) -> ApiResponse[int]:
    total = await _run("count", hosts_reader.count, paths)
    return ApiResponse[int](success=True, data=total)


@router.get("/stream", response_model=ApiResponse[List[HostRecordOut]])
async def stream_records(
    chunk_size: int | None = Query(default=None, ge=0),
    offset: int = Query(default=0, ge=0),
    paths: HostsPaths = Depends(get_hosts_paths),
    settings: Settings = Depends(get_app_settings),
) -> ApiResponse[List[HostRecordOut]]:
    size = settings.stream_chunk_default if chunk_size is None else chunk_size
    records = await _run(
        "stream",
        hosts_reader.read_chunk,
        paths,
        offset,
        size,
        max_size=settings.stream_chunk_max,
    )
    return ApiResponse[List[HostRecordOut]](
        success=True,
        data=[HostRecordOut.model_validate(record) for record in records],
    )


@router.get("/status", response_model=ApiResponse[HostsStatusOut])
async def hosts_status(paths: HostsPaths = Depends(get_hosts_paths)) -> ApiResponse[HostsStatusOut]:
    current = await asyncio.to_thread(hosts_toggle.status, paths)
    return ApiResponse[HostsStatusOut](success=True, data=HostsStatusOut.model_validate(current))


@router.post("/disable", response_model=ApiResponse[HostsActionOut])
async def disable_hosts(
    paths: HostsPaths = Depends(get_hosts_paths),
    executor: ElevatedExecutor = Depends(get_executor),
) -> ApiResponse[HostsActionOut]:
    await _run("disable", hosts_toggle.disable, paths, executor)
    return ApiResponse[HostsActionOut](
        success=True,
        data=HostsActionOut(
            message="Hosts file disabled successfully",
            timestamp=datetime.now(timezone.utc),
        ),
        message="Hosts file disabled",
    )


@router.post("/enable", response_model=ApiResponse[HostsActionOut])
async def enable_hosts(
    paths: HostsPaths = Depends(get_hosts_paths),
    executor: ElevatedExecutor = Depends(get_executor),
) -> ApiResponse[HostsActionOut]:
    await _run("enable", hosts_toggle.enable, paths, executor)
    return ApiResponse[HostsActionOut](
        success=True,
        data=HostsActionOut(
            message="Hosts file enabled successfully",
            timestamp=datetime.now(timezone.utc),
        ),
        message="Hosts file enabled",
    )


@router.post("/build_and_save", response_model=ApiResponse[HostsActionOut])
async def build_and_save(
    paths: HostsPaths = Depends(get_hosts_paths),
    executor: ElevatedExecutor = Depends(get_executor),
    settings: Settings = Depends(get_app_settings),
) -> ApiResponse[HostsActionOut]:
    records = await _run("read", hosts_reader.load_records, paths)
    generated_at = await _run(
        "build_and_save",
        hosts_writer.build_and_save,
        paths,
        records,
        executor,
        batch_size=settings.write_batch_size,
    )
    return ApiResponse[HostsActionOut](
        success=True,
        data=HostsActionOut(
            message="Hosts file built and saved successfully",
            timestamp=generated_at,
        ),
        message="Hosts file updated",
    )
