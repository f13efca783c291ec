from __future__ import annotations

import hmac
import math
import secrets
import string
import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Optional

TOKEN_ALPHABET = string.ascii_letters + string.digits
TOKEN_LENGTH = 32
TOKEN_ROTATION_SECONDS = 600
TOKEN_GRACE_SECONDS = 60
BEARER_PREFIX = "Bearer "


def generate_token(length: int = TOKEN_LENGTH) -> str:
    if length < TOKEN_LENGTH:
        raise ValueError(f"token length must be at least {TOKEN_LENGTH} characters")
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def extract_bearer(header_value: Optional[str]) -> Optional[str]:
    if not header_value or not header_value.startswith(BEARER_PREFIX):
        return None
    token = header_value[len(BEARER_PREFIX) :].strip()
    return token or None


@dataclass(frozen=True)
class TokenSnapshot:
    token: str
    expires_in: int


@dataclass
class _TokenState:
    current: str
    previous: Optional[str]
    last_rotation: float


class TokenManager:
    """Holds the API bearer token and the one it replaced.

    The superseded token keeps validating for `grace_seconds` after a rotation.
    Expiry is checked on read; the previous value is never cleared eagerly.
    """

    def __init__(
        self,
        *,
        rotation_seconds: int = TOKEN_ROTATION_SECONDS,
        grace_seconds: int = TOKEN_GRACE_SECONDS,
        token_length: int = TOKEN_LENGTH,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._rotation_seconds = rotation_seconds
        self._grace_seconds = grace_seconds
        self._token_length = token_length
        self._clock = clock
        self._lock = Lock()
        self._state = _TokenState(
            current=generate_token(token_length),
            previous=None,
            last_rotation=clock(),
        )

    @property
    def rotation_seconds(self) -> int:
        return self._rotation_seconds

    def rotate(self) -> str:
        fresh = generate_token(self._token_length)
        now = self._clock()
        with self._lock:
            self._state = _TokenState(
                current=fresh,
                previous=self._state.current,
                last_rotation=now,
            )
        return fresh

    def validate(self, token: Optional[str]) -> bool:
        if not token:
            return False
        with self._lock:
            state = self._state
        if hmac.compare_digest(token.encode("utf-8"), state.current.encode("utf-8")):
            return True
        if state.previous is None:
            return False
        elapsed = self._clock() - state.last_rotation
        if elapsed >= self._grace_seconds:
            return False
        return hmac.compare_digest(token.encode("utf-8"), state.previous.encode("utf-8"))

    def current(self) -> TokenSnapshot:
        with self._lock:
            state = self._state
        elapsed = max(0.0, self._clock() - state.last_rotation)
        remaining = self._rotation_seconds - math.floor(elapsed)
        return TokenSnapshot(
            token=state.current,
            expires_in=max(0, min(self._rotation_seconds, remaining)),
        )
