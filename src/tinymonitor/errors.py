"""
Typed failures raised by the gateway pipeline stages.

Every stage raises its own subclass of :class:`GatewayError`; the connection
handler catches the first one and turns it into the terminal HTTP response.
The ``payload`` is what the client sees, everything else stays in the logs.
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, Optional


class GatewayError(Exception):
    """Base class for every failure that maps to an HTTP response."""

    status_code: ClassVar[int] = 500
    payload: ClassVar[Dict[str, str]] = {"error": "internal error"}

    def __init__(self, message: str = "", **context: Any) -> None:
        super().__init__(message or self.payload["error"])
        self.context = context


class MethodError(GatewayError):
    """Inbound request used a method other than GET."""

    status_code = 405
    payload = {"error": "method not allowed"}


class FetchError(GatewayError):
    """Upstream could not be reached, timed out or answered with an error status."""

    status_code = 502
    payload = {"error": "bad gateway", "detail": "fetch failed"}

    def __init__(self, message: str = "", *, url: Optional[str] = None, status: Optional[int] = None) -> None:
        super().__init__(message, url=url, status=status)
        self.url = url
        self.status = status


class ParseFailure(GatewayError):
    """Common parent of extraction and normalization failures."""

    status_code = 500
    payload = {"error": "parse failure"}


class ExtractError(ParseFailure):
    """A required label, marker or terminator was not found."""

    def __init__(self, message: str = "", *, field: Optional[str] = None, stage: Optional[str] = None) -> None:
        super().__init__(message, field=field, stage=stage)
        self.field = field
        self.stage = stage


class NormalizeError(ParseFailure):
    """A required field did not start with a decimal number."""

    def __init__(self, message: str = "", *, field: Optional[str] = None, value: Optional[str] = None) -> None:
        super().__init__(message, field=field, value=value)
        self.field = field
        self.value = value


class SerializationError(GatewayError):
    """The rendered body did not fit the bounded output buffer."""

    status_code = 500
    payload = {"error": "serialization failure"}

    def __init__(self, message: str = "", *, size: Optional[int] = None, limit: Optional[int] = None) -> None:
        super().__init__(message, size=size, limit=limit)
        self.size = size
        self.limit = limit
