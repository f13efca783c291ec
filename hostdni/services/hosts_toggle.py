"""Enable/disable the hosts file by moving it between two locations.

Availability is never stored as a flag; it is read from which of the two paths
exist. Both existing at once is a conflict: reads, writes and toggles all
refuse it and leave it for the operator to resolve.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from hostdni.errors import ConflictError, DisabledError, IOFailureError, NotFoundError
from hostdni.logger import get_logger
from hostdni.models.paths import HostsPaths
from hostdni.services.elevation import ElevatedExecutor

_logger = get_logger("services.hosts.toggle")

STATE_ACTIVE = "active"
STATE_DISABLED = "disabled"
STATE_MISSING = "missing"
STATE_INCONSISTENT = "inconsistent"


@dataclass(frozen=True)
class HostsStatus:
    state: str
    hosts_exists: bool
    disabled_exists: bool
    backup_exists: bool
    hosts_size: Optional[int]
    disabled_size: Optional[int]
    backup_size: Optional[int]
    timestamp: datetime

    @property
    def disabled(self) -> bool:
        return self.state == STATE_DISABLED


def _size(path: Path) -> Optional[int]:
    try:
        return path.stat().st_size
    except OSError:
        return None


def _state(active: bool, disabled: bool) -> str:
    if active and disabled:
        return STATE_INCONSISTENT
    if active:
        return STATE_ACTIVE
    if disabled:
        return STATE_DISABLED
    return STATE_MISSING


def availability(paths: HostsPaths) -> str:
    try:
        return _state(paths.active.exists(), paths.disabled.exists())
    except OSError as exc:
        raise IOFailureError.from_os_error("Failed to inspect hosts file location", exc) from exc


def status(paths: HostsPaths) -> HostsStatus:
    hosts_size = _size(paths.active)
    disabled_size = _size(paths.disabled)
    backup_size = _size(paths.backup)
    hosts_exists = hosts_size is not None
    disabled_exists = disabled_size is not None
    return HostsStatus(
        state=_state(hosts_exists, disabled_exists),
        hosts_exists=hosts_exists,
        disabled_exists=disabled_exists,
        backup_exists=backup_size is not None,
        hosts_size=hosts_size,
        disabled_size=disabled_size,
        backup_size=backup_size,
        timestamp=datetime.now(timezone.utc),
    )


def _conflict(paths: HostsPaths) -> ConflictError:
    _logger.error(
        "hosts.conflict",
        "Both active and disabled hosts files exist",
        active=str(paths.active),
        disabled=str(paths.disabled),
    )
    return ConflictError(
        f"Both {paths.active} and {paths.disabled} exist; resolve manually before continuing"
    )


def require_consistent(paths: HostsPaths) -> str:
    """Return the availability state, refusing the state where both files exist."""
    state = availability(paths)
    if state == STATE_INCONSISTENT:
        raise _conflict(paths)
    return state


def disable(paths: HostsPaths, executor: ElevatedExecutor) -> None:
    state = require_consistent(paths)
    if state == STATE_DISABLED:
        raise DisabledError(f"Hosts file is already disabled ({paths.disabled} exists)")
    if state == STATE_MISSING:
        raise NotFoundError(f"Hosts file not found at {paths.active}")

    try:
        executor.move(paths.active, paths.disabled)
    except IOFailureError as exc:
        raise IOFailureError(f"Failed to disable hosts file: {exc.detail}") from exc
    _logger.info(
        "hosts.toggle.disable",
        "Disabled hosts file",
        moved_to=str(paths.disabled),
        executor=executor.name,
    )


def enable(paths: HostsPaths, executor: ElevatedExecutor) -> None:
    state = require_consistent(paths)
    if state != STATE_DISABLED:
        raise NotFoundError(f"No disabled hosts file found at {paths.disabled}")

    try:
        executor.move(paths.disabled, paths.active)
    except IOFailureError as exc:
        raise IOFailureError(f"Failed to enable hosts file: {exc.detail}") from exc
    _logger.info(
        "hosts.toggle.enable",
        "Enabled hosts file",
        restored_to=str(paths.active),
        executor=executor.name,
    )
