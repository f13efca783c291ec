from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BackupCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None


class BackupOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str]
    entries_count: int
    created_at: datetime


class BackupFileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    filename: str
    file_path: str
    backup_date: str
    file_size: int
    created_timestamp: int


class BackupFolderOut(BaseModel):
    hosts_backups_exists: bool
    hosts_backups_path: str
    folder_created: bool
    timestamp: datetime


class ListEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    pattern: str
    description: Optional[str]
    enabled: bool
    created_at: datetime
