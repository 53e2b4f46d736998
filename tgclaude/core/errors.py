"""Completion failure taxonomy and incident ids."""

from __future__ import annotations

import asyncio
import uuid


class UpstreamError(Exception):
    """The completion API call failed. Base class; also used for unmapped statuses."""

    category = "upstream"
    transient = True

    def __init__(self, message: str = "", status: int | None = None) -> None:
        super().__init__(message or self.__class__.__name__)
        self.status = status


class UpstreamAuthError(UpstreamError):
    """401: bad or missing API key. A configuration problem, not worth retrying."""

    category = "auth"
    transient = False


class UpstreamRateLimited(UpstreamError):
    category = "rate_limited"


class UpstreamServerError(UpstreamError):
    category = "server_error"


class UpstreamTimeout(UpstreamError):
    category = "timeout"


def error_for_status(status: int, message: str = "") -> UpstreamError:
    """Map an HTTP status from the completion API onto the taxonomy."""
    if status == 401:
        return UpstreamAuthError(message, status=status)
    if status == 429:
        return UpstreamRateLimited(message, status=status)
    if status >= 500:
        return UpstreamServerError(message, status=status)
    return UpstreamError(message, status=status)


def classify_failure(exc: BaseException) -> UpstreamError | None:
    """
    Return the taxonomy error for a failed completion call, or None if the
    failure is not recognisable as an upstream problem.
    """
    if isinstance(exc, UpstreamError):
        return exc
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return UpstreamTimeout(str(exc) or "Completion request timed out")
    status = getattr(exc, "status_code", None) or getattr(exc, "status", None)
    if isinstance(status, int):
        return error_for_status(status, str(exc))
    if "timeout" in str(exc).lower():
        return UpstreamTimeout(str(exc))
    return None


def new_incident_id() -> str:
    """Short opaque id quoted to the user and logged with the failure."""
    return uuid.uuid4().hex[:12]
