from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from hostdni.services.hosts_parser import (
    is_valid_address,
    is_valid_name,
    iter_records,
    parse_line,
)
from hostdni.services.hosts_writer import render_line


def test_enabled_line_keeps_trailing_comment() -> None:
    record = parse_line("127.0.0.1   myapp.local   # dev box", 0)

    assert record is not None
    assert record.address == "127.0.0.1"
    assert record.name == "myapp.local"
    assert record.comment == "# dev box"
    assert record.enabled is True


def test_commented_entry_is_disabled_record() -> None:
    record = parse_line("#10.0.0.5 blocked.example.com", 3)

    assert record is not None
    assert record.address == "10.0.0.5"
    assert record.name == "blocked.example.com"
    assert record.comment is None
    assert record.enabled is False
    assert record.id == "entry_3"


@pytest.mark.parametrize(
    "line",
    [
        "",
        "   \t ",
        "# just a note",
        "## 10.0.0.5 double.commented",
        "#",
        "127.0.0.1",
        "not-an-ip host.example",
        "10.1.1.1 bad_name",
        "256.1.1.1 overflow.example",
        "10.0.0.1 slash/name",
    ],
)
def test_lines_without_a_valid_record_are_skipped(line: str) -> None:
    assert parse_line(line, 0) is None


@pytest.mark.parametrize(
    "address",
    [
        "0.0.0.0",
        "255.255.255.255",
        "192.168.1.20",
        "::1",
        "::",
        "2001:db8::1",
        "2001:0db8:85a3:0000:0000:8a2e:0370:7334",
        "fe80::1%lo0",
        "::ffff:192.168.1.1",
        "64:ff9b::192.0.2.33",
    ],
)
def test_valid_addresses(address: str) -> None:
    assert is_valid_address(address)


@pytest.mark.parametrize(
    "address",
    ["", "1.2.3", "1.2.3.4.5", "999.1.1.1", "12345::1", "gggg::1", "localhost", "1.2.3.4/24"],
)
def test_invalid_addresses(address: str) -> None:
    assert not is_valid_address(address)


def test_name_charset() -> None:
    assert is_valid_name("my-host.example.com")
    assert is_valid_name("printer%eth0")
    assert not is_valid_name("")
    assert not is_valid_name("under_score")
    assert not is_valid_name("has space")


def test_ids_follow_line_numbers() -> None:
    lines = ["# header", "127.0.0.1 localhost", "", "10.0.0.1 box.lan"]

    records = list(iter_records(lines))

    assert [record.id for record in records] == ["entry_1", "entry_3"]


_ADDRESSES = st.sampled_from(
    ["127.0.0.1", "10.0.0.5", "192.168.1.20", "::1", "2001:db8::1", "fe80::1%en0", "::ffff:10.0.0.1"]
)
_NAMES = st.from_regex(r"[A-Za-z0-9][A-Za-z0-9.%-]{0,20}", fullmatch=True)
_WORDS = st.lists(st.from_regex(r"[#A-Za-z0-9_.!:-]{1,8}", fullmatch=True), max_size=4)


@given(
    prefix=st.sampled_from(["", "#", "# ", "  #  "]),
    address=_ADDRESSES,
    name=_NAMES,
    trailing=_WORDS,
    gap=st.sampled_from([" ", "\t", "   "]),
)
def test_render_then_parse_round_trips(
    prefix: str, address: str, name: str, trailing: list[str], gap: str
) -> None:
    line = prefix + gap.join([address, name, *trailing])
    parsed = parse_line(line, 0)
    assert parsed is not None

    reparsed = parse_line(render_line(parsed), 0)

    assert reparsed is not None
    assert reparsed.identity() == parsed.identity()
