from __future__ import annotations

from threading import Lock
from typing import Dict, Generic, List, Optional, TypeVar
from uuid import uuid4

from hostdni.logger import get_logger
from hostdni.models.catalog import BackupConfig, ListEntry

_logger = get_logger("services.catalogs")

T = TypeVar("T", BackupConfig, ListEntry)


class Registry(Generic[T]):
    """Process-lifetime map guarded by a lock held only for copy-in/copy-out."""

    def __init__(self, kind: str) -> None:
        self._kind = kind
        self._items: Dict[str, T] = {}
        self._lock = Lock()

    def add(self, item: T) -> T:
        with self._lock:
            self._items[item.id] = item
        _logger.info("catalog.add", "Added catalog item", kind=self._kind, item_id=item.id)
        return item

    def list_items(self) -> List[T]:
        with self._lock:
            items = list(self._items.values())
        return sorted(items, key=lambda item: item.created_at)

    def get(self, item_id: str) -> Optional[T]:
        with self._lock:
            return self._items.get(item_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class Catalogs:
    def __init__(self) -> None:
        self.backups: Registry[BackupConfig] = Registry("backups")
        self.allow_lists: Registry[ListEntry] = Registry("allow_lists")
        self.block_lists: Registry[ListEntry] = Registry("block_lists")

    def record_backup(self, *, name: str, description: Optional[str], entries_count: int) -> BackupConfig:
        backup = BackupConfig(
            id=str(uuid4()),
            name=name,
            description=description,
            entries_count=entries_count,
        )
        return self.backups.add(backup)
