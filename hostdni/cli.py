"""Command line front end for a running hostdni service.

Every command except `serve` talks to the local API: it fetches the current
bearer token from the public token endpoint, then makes one call with it.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict, Optional
from urllib import error, request
from urllib.parse import urlencode

from hostdni.config import get_settings

_TIMEOUT_SECONDS = 120


class ApiError(RuntimeError):
    pass


def _error_text(exc: error.HTTPError) -> str:
    raw = exc.read().decode("utf-8", errors="replace")
    try:
        envelope = json.loads(raw)
    except json.JSONDecodeError:
        return raw or exc.reason
    if isinstance(envelope, dict) and envelope.get("error"):
        return str(envelope["error"])
    return raw


def _api_request(
    *,
    base_url: str,
    path: str,
    method: str = "GET",
    json_body: Optional[Dict[str, Any]] = None,
    token: Optional[str] = None,
) -> Dict[str, Any]:
    headers = {"Accept": "application/json"}
    payload = None
    if json_body is not None:
        payload = json.dumps(json_body).encode("utf-8")
        headers["Content-Type"] = "application/json"
    if token:
        headers["Authorization"] = f"Bearer {token}"

    req = request.Request(base_url.rstrip("/") + path, data=payload, headers=headers, method=method)
    try:
        with request.urlopen(req, timeout=_TIMEOUT_SECONDS) as response:
            text = response.read().decode("utf-8")
    except error.HTTPError as exc:
        raise ApiError(f"HTTP {exc.code}: {_error_text(exc)}") from exc
    except error.URLError as exc:
        raise ApiError(f"Cannot reach {base_url}: {exc.reason}") from exc
    return json.loads(text) if text else {}


def _fetch_token(base_url: str) -> str:
    envelope = _api_request(base_url=base_url, path="/api/auth/token")
    token = (envelope.get("data") or {}).get("token")
    if not token or not isinstance(token, str):
        raise ApiError("Authentication failed: no API token returned.")
    return token


def _emit(envelope: Dict[str, Any]) -> None:
    print(json.dumps(envelope, indent=2, sort_keys=True))


def _call(args: argparse.Namespace, path: str, *, method: str = "GET", json_body: Any = None) -> int:
    envelope = _api_request(
        base_url=args.api_url,
        path=path,
        method=method,
        json_body=json_body,
        token=_fetch_token(args.api_url),
    )
    _emit(envelope)
    return 0 if envelope.get("success") else 1


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "hostdni.main:app",
        host=args.host or settings.server_host,
        port=args.port or settings.server_port,
        log_config=None,
    )
    return 0


def cmd_token(args: argparse.Namespace) -> int:
    _emit(_api_request(base_url=args.api_url, path="/api/auth/token"))
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    query = urlencode({"page": args.page, "page_size": args.page_size})
    return _call(args, f"/api/etc/hosts?{query}")


def cmd_add(args: argparse.Namespace) -> int:
    record = {
        "address": args.address,
        "name": args.name,
        "comment": args.comment,
        "enabled": not args.disabled,
    }
    return _call(args, "/api/etc/hosts", method="POST", json_body=record)


# command -> (help, method, path) for calls that take no arguments
_SIMPLE_COMMANDS = {
    "status": ("Show hosts file availability", "GET", "/api/etc/hosts/status"),
    "count": ("Count host records", "GET", "/api/etc/hosts/count"),
    "disable": ("Move the hosts file to its disabled location", "POST", "/api/etc/hosts/disable"),
    "enable": ("Restore a disabled hosts file", "POST", "/api/etc/hosts/enable"),
    "rebuild": ("Rebuild and persist the hosts file", "POST", "/api/etc/hosts/build_and_save"),
}


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(prog="hostdni", description="Control the system hosts file")
    parser.add_argument("--api-url", default=f"http://{settings.server_host}:{settings.server_port}")
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the local control API")
    serve.add_argument("--host")
    serve.add_argument("--port", type=int)
    serve.set_defaults(func=cmd_serve)

    commands.add_parser("token", help="Print the current API token").set_defaults(func=cmd_token)

    listing = commands.add_parser("list", help="List host records")
    listing.add_argument("--page", type=int, default=0)
    listing.add_argument("--page-size", type=int, default=settings.page_size_default)
    listing.set_defaults(func=cmd_list)

    for name, (help_text, method, path) in _SIMPLE_COMMANDS.items():
        sub = commands.add_parser(name, help=help_text)
        sub.set_defaults(func=lambda args, m=method, p=path: _call(args, p, method=m))

    add = commands.add_parser("add", help="Add a host record")
    add.add_argument("address")
    add.add_argument("name")
    add.add_argument("--comment")
    add.add_argument("--disabled", action="store_true")
    add.set_defaults(func=cmd_add)
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    try:
        code = args.func(args)
    except ApiError as exc:
        print(f"hostdni: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    raise SystemExit(code)


if __name__ == "__main__":
    main()
