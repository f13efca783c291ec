from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class BackupConfig:
    id: str
    name: str
    description: Optional[str]
    entries_count: int
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class ListEntry:
    id: str
    pattern: str
    description: Optional[str] = None
    enabled: bool = True
    created_at: datetime = field(default_factory=_utcnow)
