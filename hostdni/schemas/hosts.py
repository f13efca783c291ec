from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class HostRecordCreate(BaseModel):
    address: str
    name: str
    comment: Optional[str] = None
    enabled: Optional[bool] = None


class HostRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    address: str
    name: str
    comment: Optional[str]
    enabled: bool
    created_at: datetime
    updated_at: datetime


class HostPageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    records: List[HostRecordOut]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_prev: bool


class HostsStatusOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    state: str
    disabled: bool
    hosts_exists: bool
    disabled_exists: bool
    backup_exists: bool
    hosts_size: Optional[int]
    disabled_size: Optional[int]
    backup_size: Optional[int]
    timestamp: datetime


class HostsActionOut(BaseModel):
    message: str
    timestamp: datetime
