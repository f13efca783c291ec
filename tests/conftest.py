from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from hostdni.config import Settings
from hostdni.errors import IOFailureError
from hostdni.main import create_app
from hostdni.models.paths import HostsPaths
from hostdni.security import TokenManager

SAMPLE_HOSTS = """\
# Static table lookup for hostnames.
127.0.0.1   localhost
::1         localhost ip6-localhost

#10.0.0.5 blocked.example.com
# just a note
192.168.1.20  nas.lan   # storage box
not-an-ip  somewhere.example
10.1.1.1 bad_name
fe80::1%lo0  link.local
"""
# accepted: localhost, ::1, blocked.example.com, nas.lan, link.local
SAMPLE_RECORD_COUNT = 5


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeExecutor:
    """Performs moves/copies in-process and records them; can be told to fail like a denied prompt."""

    name = "fake"

    def __init__(self, fail_with: Optional[str] = None) -> None:
        self.fail_with = fail_with
        self.calls: List[Tuple[str, Path, Path]] = []

    def move(self, src: Path, dst: Path) -> None:
        self.calls.append(("move", src, dst))
        if self.fail_with:
            raise IOFailureError(f"Failed to move {src} to {dst}: {self.fail_with}")
        os.rename(src, dst)

    def copy(self, src: Path, dst: Path) -> None:
        self.calls.append(("copy", src, dst))
        if self.fail_with:
            raise IOFailureError(f"Failed to copy {src} to {dst}: {self.fail_with}")
        shutil.copyfile(src, dst)


@pytest.fixture
def hosts_paths(tmp_path: Path) -> HostsPaths:
    etc = tmp_path / "etc"
    etc.mkdir()
    return HostsPaths(
        active=etc / "hosts",
        backup=etc / "hosts.backup",
        disabled=etc / "hosts.disabled",
    )


@pytest.fixture
def sample_hosts(hosts_paths: HostsPaths) -> HostsPaths:
    hosts_paths.active.write_text(SAMPLE_HOSTS, encoding="utf-8")
    return hosts_paths


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def settings(tmp_path: Path, hosts_paths: HostsPaths) -> Settings:
    return Settings(
        log_level="WARNING",
        hosts_path=str(hosts_paths.active),
        hosts_backup_path=str(hosts_paths.backup),
        hosts_disabled_path=str(hosts_paths.disabled),
        hosts_backups_dir=str(tmp_path / "hosts_backups"),
    )


@pytest.fixture
def tokens(clock: FakeClock) -> TokenManager:
    return TokenManager(clock=clock)


@pytest.fixture
def client(settings: Settings, tokens: TokenManager, executor: FakeExecutor) -> Iterator[TestClient]:
    app = create_app(settings, tokens=tokens, executor=executor)
    yield TestClient(app)


@pytest.fixture
def auth_headers(tokens: TokenManager) -> dict[str, str]:
    return {"Authorization": f"Bearer {tokens.current().token}"}
