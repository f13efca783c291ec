from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Tuple


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class HostRecord:
    id: str
    address: str
    name: str
    comment: Optional[str] = None
    enabled: bool = True
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def identity(self) -> Tuple[str, str, bool, Optional[str]]:
        # ids and timestamps are re-derived on every read
        return (self.address, self.name, self.enabled, self.comment)
