from __future__ import annotations

import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional, Sequence

from hostdni.errors import DisabledError, IOFailureError, ValidationFailedError
from hostdni.logger import get_logger
from hostdni.models.host_record import HostRecord
from hostdni.models.paths import HostsPaths
from hostdni.services.elevation import ElevatedExecutor
from hostdni.services.hosts_parser import entry_id, is_valid_address, is_valid_name
from hostdni.services.hosts_reader import load_records
from hostdni.services.hosts_toggle import STATE_DISABLED, require_consistent

_logger = get_logger("services.hosts.writer")

PRODUCT_HEADER = "# HostDNI managed hosts file"
HEADER_LINE_COUNT = 3
DEFAULT_BATCH_SIZE = 1000
SCRATCH_MODE = 0o644


def render_line(record: HostRecord) -> str:
    # Trailing text is written as-is: parsed aliases stay aliases.
    line = f"{record.address} {record.name}"
    if record.comment:
        line = f"{line}\t{record.comment}"
    if not record.enabled:
        line = f"# {line}"
    return line


def render_header(generated_at: Optional[datetime] = None) -> list[str]:
    stamp = (generated_at or datetime.now(timezone.utc)).isoformat()
    return [PRODUCT_HEADER, f"# Generated on: {stamp}", ""]


def _batches(records: Sequence[HostRecord], size: int) -> Iterator[Sequence[HostRecord]]:
    for start in range(0, len(records), size):
        yield records[start : start + size]


def _ensure_writable(paths: HostsPaths) -> None:
    if require_consistent(paths) == STATE_DISABLED:
        raise DisabledError("Cannot write to hosts file while it is disabled")


def backup_active(paths: HostsPaths) -> bool:
    """Copy the active file over the single backup slot. Returns False if there was nothing to copy."""
    if not paths.active.exists():
        return False
    try:
        shutil.copyfile(paths.active, paths.backup)
    except OSError as exc:
        raise IOFailureError.from_os_error("Failed to create backup", exc) from exc
    _logger.info(
        "hosts.backup",
        "Backed up hosts file",
        source=str(paths.active),
        backup=str(paths.backup),
    )
    return True


def write_content(
    target: Path,
    records: Sequence[HostRecord],
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    generated_at: Optional[datetime] = None,
) -> None:
    """Truncate `target` and write header plus records, flushing after every batch."""
    try:
        with target.open("w", encoding="utf-8", newline="\n") as handle:
            for line in render_header(generated_at):
                handle.write(f"{line}\n")
            handle.flush()
            for batch in _batches(records, batch_size):
                handle.writelines(f"{render_line(record)}\n" for record in batch)
                handle.flush()
    except OSError as exc:
        raise IOFailureError.from_os_error("Failed to write hosts file", exc) from exc


def write_records(
    paths: HostsPaths,
    records: Sequence[HostRecord],
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> None:
    """Back up, then rewrite the active hosts file from `records` in order.

    A failed write leaves the previous content in the backup slot; it is not
    restored automatically.
    """
    _ensure_writable(paths)
    with _logger.operation(
        "hosts.write",
        "Rewriting hosts file",
        path=str(paths.active),
        records=len(records),
    ) as op:
        backed_up = backup_active(paths)
        op.step("backup", "Prepared backup slot", backed_up=backed_up)
        write_content(paths.active, records, batch_size=batch_size)
        op.step("flush", "Flushed all batches", batch_size=batch_size)


def build_and_save(
    paths: HostsPaths,
    records: Sequence[HostRecord],
    executor: ElevatedExecutor,
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> datetime:
    """Render `records` to a scratch file and copy it over the active path with elevation."""
    _ensure_writable(paths)
    generated_at = datetime.now(timezone.utc)
    fd, scratch_name = tempfile.mkstemp(prefix="hostdni_hosts_", suffix=".tmp")
    os.close(fd)
    scratch = Path(scratch_name)
    try:
        # mkstemp creates 0600; a fresh hosts file copied from it must stay world-readable.
        scratch.chmod(SCRATCH_MODE)
        with _logger.operation(
            "hosts.build_and_save",
            "Rebuilding hosts file",
            path=str(paths.active),
            records=len(records),
            executor=executor.name,
        ) as op:
            write_content(scratch, records, batch_size=batch_size, generated_at=generated_at)
            op.step("render", "Rendered scratch file", scratch=str(scratch))
            if paths.active.exists():
                executor.copy(paths.active, paths.backup)
                op.step("backup", "Backed up hosts file", backup=str(paths.backup))
            executor.copy(scratch, paths.active)
    finally:
        scratch.unlink(missing_ok=True)
    return generated_at


def normalize_comment(comment: Optional[str]) -> Optional[str]:
    text = " ".join((comment or "").split())
    if not text:
        return None
    if text.startswith("#"):
        return text
    return f"# {text}"


def create_record(
    paths: HostsPaths,
    *,
    address: str,
    name: str,
    comment: Optional[str] = None,
    enabled: bool = True,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> HostRecord:
    """Append one record and rewrite the file. Duplicate address/name pairs are allowed."""
    address = address.strip()
    name = name.strip()
    if not is_valid_address(address):
        raise ValidationFailedError(f"Invalid IP address: {address!r}")
    if not is_valid_name(name):
        raise ValidationFailedError(f"Invalid hostname: {name!r}")

    existing = load_records(paths)
    record = HostRecord(
        id=entry_id(HEADER_LINE_COUNT + len(existing)),
        address=address,
        name=name,
        comment=normalize_comment(comment),
        enabled=enabled,
    )
    write_records(paths, [*existing, record], batch_size=batch_size)
    _logger.info(
        "hosts.create",
        "Added host record",
        address=address,
        name=name,
        enabled=enabled,
    )
    return record
