from __future__ import annotations

from pathlib import Path

import pytest
from hypothesis import given
from hypothesis import strategies as st

from hostdni.errors import ConflictError, DisabledError, IOFailureError, NotFoundError
from hostdni.models.paths import HostsPaths
from hostdni.services.hosts_reader import (
    Page,
    clamp_page_size,
    count,
    read_chunk,
    read_page,
)

from conftest import SAMPLE_HOSTS, SAMPLE_RECORD_COUNT


def _write_five(paths: HostsPaths) -> None:
    lines = [f"10.0.0.{index} host{index}.lan" for index in range(5)]
    paths.active.write_text("# comment\n" + "\n".join(lines) + "\n", encoding="utf-8")


def test_first_page_metadata(hosts_paths: HostsPaths) -> None:
    _write_five(hosts_paths)

    page = read_page(hosts_paths, 0, 2)

    assert page.total == 5
    assert page.total_pages == 3
    assert page.has_next is True
    assert page.has_prev is False
    assert [record.name for record in page.records] == ["host0.lan", "host1.lan"]


def test_last_page_is_partial(hosts_paths: HostsPaths) -> None:
    _write_five(hosts_paths)

    page = read_page(hosts_paths, 2, 2)

    assert [record.name for record in page.records] == ["host4.lan"]
    assert page.has_next is False
    assert page.has_prev is True


def test_page_past_the_end_is_empty(hosts_paths: HostsPaths) -> None:
    _write_five(hosts_paths)

    page = read_page(hosts_paths, 9, 2)

    assert page.records == []
    assert page.total == 5


def test_count_matches_full_read(sample_hosts: HostsPaths) -> None:
    total = count(sample_hosts)

    assert total == SAMPLE_RECORD_COUNT
    assert len(read_page(sample_hosts, 0, total).records) == total


@pytest.mark.parametrize(
    ("requested", "expected"),
    [(1, 1000), (999, 1000), (1000, 1000), (5000, 5000), (20000, 20000), (20001, 20000), (10**9, 20000)],
)
def test_page_size_clamp(requested: int, expected: int) -> None:
    assert clamp_page_size(requested, minimum=1000, maximum=20000) == expected


@given(total=st.integers(min_value=0, max_value=5000), page_size=st.integers(min_value=1, max_value=500))
def test_total_pages_is_ceiling(total: int, page_size: int) -> None:
    page = Page(records=[], total=total, page=0, page_size=page_size)

    assert page.total_pages == -(-total // page_size)
    assert page.has_next == (page.total_pages > 1)


def test_reads_fail_when_disabled(hosts_paths: HostsPaths) -> None:
    hosts_paths.disabled.write_text("127.0.0.1 localhost\n", encoding="utf-8")

    with pytest.raises(DisabledError):
        read_page(hosts_paths, 0, 10)
    with pytest.raises(DisabledError):
        count(hosts_paths)
    with pytest.raises(DisabledError):
        read_chunk(hosts_paths, 0, 10, max_size=100)


def test_reads_fail_when_missing(hosts_paths: HostsPaths) -> None:
    with pytest.raises(NotFoundError):
        read_page(hosts_paths, 0, 10)
    with pytest.raises(NotFoundError):
        count(hosts_paths)


def test_chunk_slices_accepted_records(sample_hosts: HostsPaths) -> None:
    chunk = read_chunk(sample_hosts, 1, 2, max_size=10000)

    assert [record.name for record in chunk] == ["localhost", "blocked.example.com"]
    assert [record.address for record in chunk] == ["::1", "10.0.0.5"]


def test_chunk_size_is_capped(sample_hosts: HostsPaths) -> None:
    assert len(read_chunk(sample_hosts, 0, 50, max_size=3)) == 3
    assert read_chunk(sample_hosts, 40, 10, max_size=100) == []


def test_chunk_and_page_agree(sample_hosts: HostsPaths) -> None:
    paged = read_page(sample_hosts, 0, 100).records
    streamed = read_chunk(sample_hosts, 0, 100, max_size=100)

    assert [record.identity() for record in streamed] == [record.identity() for record in paged]
    assert [record.id for record in streamed] == [record.id for record in paged]


def test_reading_does_not_touch_the_file(sample_hosts: HostsPaths) -> None:
    before = sample_hosts.active.read_bytes()
    mtime = sample_hosts.active.stat().st_mtime_ns

    read_page(sample_hosts, 0, 100)
    count(sample_hosts)
    read_chunk(sample_hosts, 0, 100, max_size=100)

    assert sample_hosts.active.read_bytes() == before
    assert sample_hosts.active.stat().st_mtime_ns == mtime
    assert not sample_hosts.backup.exists()


def test_reads_refuse_both_files_present(sample_hosts: HostsPaths) -> None:
    sample_hosts.disabled.write_text("# stale\n", encoding="utf-8")

    with pytest.raises(ConflictError):
        count(sample_hosts)
    with pytest.raises(ConflictError):
        read_page(sample_hosts, 0, 10)
    with pytest.raises(ConflictError):
        read_chunk(sample_hosts, 0, 10, max_size=100)

    assert sample_hosts.active.read_text(encoding="utf-8") == SAMPLE_HOSTS
    assert sample_hosts.disabled.read_text(encoding="utf-8") == "# stale\n"


def test_unreadable_location_is_io_failure(sample_hosts: HostsPaths, monkeypatch: pytest.MonkeyPatch) -> None:
    real_exists = Path.exists

    def exists(self, *args, **kwargs):
        if self == sample_hosts.active:
            raise PermissionError(13, "Permission denied", str(self))
        return real_exists(self, *args, **kwargs)

    monkeypatch.setattr(Path, "exists", exists)

    with pytest.raises(IOFailureError) as exc_info:
        count(sample_hosts)

    assert exc_info.value.detail.startswith("Failed to inspect hosts file location: Permission denied")
