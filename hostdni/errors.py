from __future__ import annotations


class HostsError(RuntimeError):
    code = "hosts_error"
    status_code = 500

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class DisabledError(HostsError):
    """The hosts file is parked at its disabled location."""

    code = "disabled"
    status_code = 409


class NotFoundError(HostsError):
    code = "not_found"
    status_code = 404


class ConflictError(HostsError):
    """Active and disabled copies exist at the same time."""

    code = "conflict"
    status_code = 409


class ValidationFailedError(HostsError):
    code = "validation_failed"
    status_code = 422


class IOFailureError(HostsError):
    code = "io_failure"
    status_code = 500

    @classmethod
    def from_os_error(cls, action: str, exc: OSError) -> "IOFailureError":
        reason = exc.strerror or str(exc)
        if exc.filename:
            return cls(f"{action}: {reason}: {exc.filename}")
        return cls(f"{action}: {reason}")


class UnauthorizedError(HostsError):
    code = "unauthorized"
    status_code = 401
