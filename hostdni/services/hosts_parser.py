"""Line-level parsing of hosts file records.

Every code path that reads the hosts file goes through `parse_line`, so the
paginated read, the count, the chunked stream and the write-back all agree on
which lines are records.
"""

from __future__ import annotations

import re
from typing import Iterable, Iterator, Optional

from hostdni.models.host_record import HostRecord

_OCTET = r"(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)"
_IPV4_RE = re.compile(rf"^(?:{_OCTET}\.){{3}}{_OCTET}$")

_H16 = r"[0-9a-fA-F]{1,4}"
_V4_TAIL = r"(?:(?:25[0-5]|(?:2[0-4]|1{0,1}[0-9]){0,1}[0-9])\.){3,3}(?:25[0-5]|(?:2[0-4]|1{0,1}[0-9]){0,1}[0-9])"
_IPV6_RE = re.compile(
    "^(?:"
    + "|".join(
        (
            rf"(?:{_H16}:){{7}}{_H16}",
            rf"(?:{_H16}:){{1,7}}:",
            rf"(?:{_H16}:){{1,6}}:{_H16}",
            rf"(?:{_H16}:){{1,5}}(?::{_H16}){{1,2}}",
            rf"(?:{_H16}:){{1,4}}(?::{_H16}){{1,3}}",
            rf"(?:{_H16}:){{1,3}}(?::{_H16}){{1,4}}",
            rf"(?:{_H16}:){{1,2}}(?::{_H16}){{1,5}}",
            rf"{_H16}:(?:(?::{_H16}){{1,6}})",
            rf":(?:(?::{_H16}){{1,7}}|:)",
            r"fe80:(?::[0-9a-fA-F]{0,4}){0,4}%[0-9a-zA-Z]{1,}",
            rf"::(?:ffff(?::0{{1,4}}){{0,1}}:){{0,1}}{_V4_TAIL}",
            rf"(?:{_H16}:){{1,4}}:{_V4_TAIL}",
        )
    )
    + ")$"
)

_NAME_EXTRA_CHARS = frozenset("-.%")

ENTRY_ID_PREFIX = "entry_"


def is_valid_address(address: str) -> bool:
    return bool(_IPV4_RE.match(address) or _IPV6_RE.match(address))


def is_valid_name(name: str) -> bool:
    if not name:
        return False
    return all(ch.isalnum() or ch in _NAME_EXTRA_CHARS for ch in name)


def entry_id(ordinal: int) -> str:
    return f"{ENTRY_ID_PREFIX}{ordinal}"


def parse_line(line: str, ordinal: int) -> Optional[HostRecord]:
    """Return the record on `line`, or None when the line holds no valid record.

    A single leading `#` marks a disabled record; `##` or a `#` followed only by
    prose is a plain comment. `ordinal` is the line number the id is built from.
    """
    working = line.strip()
    if not working:
        return None

    enabled = True
    if working.startswith("#"):
        enabled = False
        working = working[1:].strip()
        if not working or working.startswith("#"):
            return None

    parts = working.split()
    if len(parts) < 2:
        return None

    address, name = parts[0], parts[1]
    if not is_valid_address(address) or not is_valid_name(name):
        return None

    comment = " ".join(parts[2:]) or None
    return HostRecord(
        id=entry_id(ordinal),
        address=address,
        name=name,
        comment=comment,
        enabled=enabled,
    )


def iter_records(lines: Iterable[str]) -> Iterator[HostRecord]:
    """Yield accepted records in file order; ids follow the zero-based line number."""
    for line_number, line in enumerate(lines):
        record = parse_line(line, line_number)
        if record is not None:
            yield record
