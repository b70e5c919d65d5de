"""
errors.py

Failure kinds for a podsync run.

There is exactly one exception type. The kind tells callers how far the
failure propagates:

- config_error        fatal, raised before any remote call
- auth_error          fatal, token refresh failed
- transport_error     fatal for the snapshot, per-item everywhere else
- malformed_response  scoped to the pass that hit it
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    CONFIG = "config_error"
    AUTH = "auth_error"
    TRANSPORT = "transport_error"
    MALFORMED_RESPONSE = "malformed_response"

    @property
    def exit_code(self) -> int:
        return {
            ErrorKind.CONFIG: 2,
            ErrorKind.AUTH: 12,
        }.get(self, 20)


class PodsyncError(Exception):
    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"PodsyncError({self.kind.value}, {self.message!r})"


def config_error(message: str) -> PodsyncError:
    return PodsyncError(ErrorKind.CONFIG, message)


def auth_error(message: str, status_code: Optional[int] = None) -> PodsyncError:
    return PodsyncError(ErrorKind.AUTH, message, status_code)


def transport_error(message: str, status_code: Optional[int] = None) -> PodsyncError:
    return PodsyncError(ErrorKind.TRANSPORT, message, status_code)


def malformed_response(message: str) -> PodsyncError:
    return PodsyncError(ErrorKind.MALFORMED_RESPONSE, message)
