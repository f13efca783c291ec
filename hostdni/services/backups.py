from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from hostdni.config import Settings
from hostdni.errors import IOFailureError
from hostdni.logger import get_logger

_logger = get_logger("services.backups")

BACKUP_SUFFIX = ".backup"


@dataclass(frozen=True)
class BackupFile:
    filename: str
    file_path: str
    backup_date: str
    file_size: int
    created_timestamp: int


@dataclass(frozen=True)
class FolderStatus:
    path: str
    exists: bool
    created: bool
    error: Optional[str] = None


def backups_dir(settings: Settings) -> Path:
    if settings.hosts_backups_dir:
        return Path(settings.hosts_backups_dir).expanduser()
    return Path.home() / "hosts_backups"


def ensure_folder(path: Path) -> FolderStatus:
    if path.is_dir():
        return FolderStatus(path=str(path), exists=True, created=False)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        detail = IOFailureError.from_os_error("Failed to create hosts_backups folder", exc).detail
        _logger.warning("backups.folder.fail", "Could not create backups folder", path=str(path), error=detail)
        return FolderStatus(path=str(path), exists=False, created=False, error=detail)
    _logger.info("backups.folder.create", "Created backups folder", path=str(path))
    return FolderStatus(path=str(path), exists=True, created=True)


def list_backup_files(path: Path) -> List[BackupFile]:
    status = ensure_folder(path)
    if status.error:
        raise IOFailureError(status.error)

    files: List[BackupFile] = []
    try:
        entries = list(path.iterdir())
    except OSError as exc:
        raise IOFailureError.from_os_error("Failed to read hosts backups directory", exc) from exc

    for entry in entries:
        if entry.suffix != BACKUP_SUFFIX or not entry.is_file():
            continue
        try:
            stat = entry.stat()
        except OSError:
            continue
        created = int(getattr(stat, "st_birthtime", stat.st_mtime))
        files.append(
            BackupFile(
                filename=entry.name,
                file_path=str(entry),
                backup_date=datetime.fromtimestamp(created, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
                file_size=stat.st_size,
                created_timestamp=created,
            )
        )
    files.sort(key=lambda item: item.created_timestamp, reverse=True)
    return files
