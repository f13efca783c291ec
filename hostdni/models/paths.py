from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from hostdni.config import Settings


@dataclass(frozen=True)
class HostsPaths:
    active: Path
    backup: Path
    disabled: Path

    @classmethod
    def from_settings(cls, settings: Settings) -> "HostsPaths":
        return cls(
            active=Path(settings.hosts_path),
            backup=Path(settings.hosts_backup_path),
            disabled=Path(settings.hosts_disabled_path),
        )
