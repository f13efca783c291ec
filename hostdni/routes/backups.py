from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, status

from hostdni.config import Settings
from hostdni.dependencies import get_app_settings, get_catalogs, get_hosts_paths
from hostdni.errors import HostsError
from hostdni.models.paths import HostsPaths
from hostdni.schemas.catalogs import BackupCreate, BackupFileOut, BackupFolderOut, BackupOut
from hostdni.schemas.envelope import ApiResponse
from hostdni.services import backups as backup_service
from hostdni.services import hosts_reader
from hostdni.services.catalogs import Catalogs

router = APIRouter(prefix="/api/backups", tags=["backups"])


@router.get("/folder-status", response_model=ApiResponse[BackupFolderOut])
async def folder_status(
    settings: Settings = Depends(get_app_settings),
) -> ApiResponse[BackupFolderOut]:
    folder = await asyncio.to_thread(backup_service.ensure_folder, backup_service.backups_dir(settings))
    return ApiResponse[BackupFolderOut](
        success=folder.error is None,
        data=BackupFolderOut(
            hosts_backups_exists=folder.exists,
            hosts_backups_path=folder.path,
            folder_created=folder.created,
            timestamp=datetime.now(timezone.utc),
        ),
        message="Hosts backups folder created successfully" if folder.created else None,
        error=folder.error,
    )


@router.get("/files", response_model=ApiResponse[List[BackupFileOut]])
async def backup_files(
    settings: Settings = Depends(get_app_settings),
) -> ApiResponse[List[BackupFileOut]]:
    files = await asyncio.to_thread(
        backup_service.list_backup_files, backup_service.backups_dir(settings)
    )
    return ApiResponse[List[BackupFileOut]](
        success=True,
        data=[BackupFileOut.model_validate(item) for item in files],
    )


@router.get("", response_model=ApiResponse[List[BackupOut]])
async def list_backups(catalogs: Catalogs = Depends(get_catalogs)) -> ApiResponse[List[BackupOut]]:
    return ApiResponse[List[BackupOut]](
        success=True,
        data=[BackupOut.model_validate(item) for item in catalogs.backups.list_items()],
    )


@router.post("", response_model=ApiResponse[BackupOut], status_code=status.HTTP_201_CREATED)
async def create_backup(
    payload: BackupCreate,
    catalogs: Catalogs = Depends(get_catalogs),
    paths: HostsPaths = Depends(get_hosts_paths),
) -> ApiResponse[BackupOut]:
    try:
        entries_count = await asyncio.to_thread(hosts_reader.count, paths)
    except HostsError:
        entries_count = 0
    backup = catalogs.record_backup(
        name=payload.name,
        description=payload.description,
        entries_count=entries_count,
    )
    return ApiResponse[BackupOut](
        success=True,
        data=BackupOut.model_validate(backup),
        message="Backup created successfully",
    )
