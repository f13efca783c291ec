from hostdni.models.catalog import BackupConfig, ListEntry
from hostdni.models.host_record import HostRecord
from hostdni.models.paths import HostsPaths

__all__ = [
    "BackupConfig",
    "HostRecord",
    "HostsPaths",
    "ListEntry",
]
