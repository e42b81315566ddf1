"""Shared protocol definitions."""

from collections.abc import Awaitable
from typing import Protocol

from fastapi import Response

from core.request_types import RelayParams


class RelayLogger(Protocol):
    """Protocol for relay observability hooks."""

    def log_request(self, params: RelayParams, in_flight: int) -> None: ...
    def log_response(self, url: str, status: int, in_flight: int) -> None: ...
    def log_redirect(self, url: str, status: int, replayed: bool) -> None: ...
    def log_rejected(self, endpoint: str | None) -> None: ...
    def log_error(self, url: str, message: str, in_flight: int) -> None: ...


class DispatchOverride(Protocol):
    """Replacement transport for a single HTTP method."""

    def __call__(self, params: RelayParams) -> Awaitable[Response | None]: ...
