from __future__ import annotations

from typing import Any, Dict, List

import pytest

from hostdni import cli


@pytest.fixture
def api_calls(monkeypatch: pytest.MonkeyPatch) -> List[Dict[str, Any]]:
    calls: List[Dict[str, Any]] = []

    def fake_request(**kwargs: Any) -> Dict[str, Any]:
        calls.append(kwargs)
        if kwargs["path"] == "/api/auth/token":
            return {"success": True, "data": {"token": "t" * 32, "expires_in": 600}}
        return {"success": True, "data": None}

    monkeypatch.setattr(cli, "_api_request", fake_request)
    return calls


def test_add_posts_record_with_token(api_calls, capsys: pytest.CaptureFixture[str]) -> None:
    args = cli.build_parser().parse_args(
        ["--api-url", "http://127.0.0.1:9", "add", "10.0.0.8", "cli.lan", "--comment", "note"]
    )

    assert args.func(args) == 0

    token_call, create_call = api_calls
    assert token_call["path"] == "/api/auth/token"
    assert create_call["path"] == "/api/etc/hosts"
    assert create_call["method"] == "POST"
    assert create_call["token"] == "t" * 32
    assert create_call["json_body"] == {
        "address": "10.0.0.8",
        "name": "cli.lan",
        "comment": "note",
        "enabled": True,
    }
    assert '"success": true' in capsys.readouterr().out


def test_list_builds_query(api_calls) -> None:
    args = cli.build_parser().parse_args(["list", "--page", "2", "--page-size", "5000"])

    args.func(args)

    assert api_calls[-1]["path"] == "/api/etc/hosts?page=2&page_size=5000"


@pytest.mark.parametrize(
    ("command", "path"),
    [
        ("disable", "/api/etc/hosts/disable"),
        ("enable", "/api/etc/hosts/enable"),
        ("rebuild", "/api/etc/hosts/build_and_save"),
    ],
)
def test_toggle_commands_post(api_calls, command: str, path: str) -> None:
    args = cli.build_parser().parse_args([command])

    args.func(args)

    assert api_calls[-1]["path"] == path
    assert api_calls[-1]["method"] == "POST"


def test_missing_token_is_an_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "_api_request", lambda **kwargs: {"success": True, "data": {}})
    args = cli.build_parser().parse_args(["count"])

    with pytest.raises(RuntimeError):
        args.func(args)


def test_main_reports_api_errors(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    def refuse(**kwargs: Any) -> Dict[str, Any]:
        raise cli.ApiError("HTTP 409: Hosts file is already disabled")

    monkeypatch.setattr(cli, "_api_request", refuse)

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["disable"])

    assert exc_info.value.code == 1
    assert "already disabled" in capsys.readouterr().err
