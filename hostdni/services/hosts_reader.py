"""Read side of the hosts engine.

Reads never write or lock the file. Records are rebuilt from disk on every
call; there is no cached index.

Note: `clamp_page_size` raises any request below the configured minimum (1000
by default) to that minimum. Callers asking for small pages get large ones.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List

from hostdni.errors import DisabledError, IOFailureError, NotFoundError
from hostdni.logger import get_logger
from hostdni.models.host_record import HostRecord
from hostdni.models.paths import HostsPaths
from hostdni.services.hosts_parser import iter_records
from hostdni.services.hosts_toggle import STATE_DISABLED, STATE_MISSING, require_consistent

_logger = get_logger("services.hosts.reader")


@dataclass(frozen=True)
class Page:
    records: List[HostRecord]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size)

    @property
    def has_next(self) -> bool:
        return self.page + 1 < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 0


def clamp_page_size(requested: int, *, minimum: int, maximum: int) -> int:
    return min(max(requested, minimum), maximum)


def ensure_readable(paths: HostsPaths) -> None:
    state = require_consistent(paths)
    if state == STATE_DISABLED:
        raise DisabledError("Hosts file is currently disabled")
    if state == STATE_MISSING:
        raise NotFoundError(f"Hosts file not found at {paths.active}")


def load_records(paths: HostsPaths) -> List[HostRecord]:
    ensure_readable(paths)
    try:
        with paths.active.open("r", encoding="utf-8", errors="replace") as handle:
            records = list(iter_records(handle))
    except OSError as exc:
        raise IOFailureError.from_os_error("Failed to open hosts file", exc) from exc
    _logger.debug("hosts.read", "Parsed hosts file", path=str(paths.active), records=len(records))
    return records


def read_page(paths: HostsPaths, page: int, page_size: int) -> Page:
    if page < 0:
        page = 0
    if page_size < 1:
        page_size = 1
    records = load_records(paths)
    total = len(records)
    start = page * page_size
    end = min(total, start + page_size)
    window = records[start:end] if start < total else []
    return Page(records=window, total=total, page=page, page_size=page_size)


def count(paths: HostsPaths) -> int:
    return len(load_records(paths))


def read_chunk(paths: HostsPaths, offset: int, size: int, *, max_size: int) -> List[HostRecord]:
    """Slice the accepted-record sequence, not the byte stream."""
    size = max(0, min(size, max_size))
    offset = max(0, offset)
    ensure_readable(paths)
    if size == 0:
        return []

    chunk: List[HostRecord] = []
    try:
        with paths.active.open("r", encoding="utf-8", errors="replace") as handle:
            for index, record in enumerate(iter_records(handle)):
                if index < offset:
                    continue
                chunk.append(record)
                if len(chunk) >= size:
                    break
    except OSError as exc:
        raise IOFailureError.from_os_error("Failed to open hosts file", exc) from exc
    return chunk
