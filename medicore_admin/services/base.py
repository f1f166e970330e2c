"""
Shared plumbing for write flows.

A write flow calls the API, reports the outcome as a notice and, only when
the write succeeded, tells the rest of the console (invalidation or local
patch). Failures never publish.
"""

from dataclasses import dataclass

from medicore_admin.clients.medicore_api_client import MediCoreAPIError
from medicore_admin.core.notifications import NoticeBoard

DEFAULT_FAILURE_MESSAGE = "Something went wrong!"


@dataclass(frozen=True)
class WriteResult:
    ok: bool
    message: str
    error_code: str | None = None

    @classmethod
    def success(cls, message: str) -> "WriteResult":
        return cls(ok=True, message=message)

    @classmethod
    def failure(cls, message: str, error_code: str | None = None) -> "WriteResult":
        return cls(ok=False, message=message, error_code=error_code)


def failure_message(error: Exception, fallback: str = DEFAULT_FAILURE_MESSAGE) -> str:
    """Server-provided text when there is one, else ``fallback``."""
    if isinstance(error, MediCoreAPIError) and error.from_server and error.error_message:
        return error.error_message
    return fallback


class WriteService:
    """Base for services that perform writes against the API."""

    def __init__(self, notices: NoticeBoard) -> None:
        self._notices = notices

    def _succeeded(self, message: str, fallback: str) -> WriteResult:
        text = message or fallback
        self._notices.success(text)
        return WriteResult.success(text)

    def _failed(self, error: Exception, fallback: str = DEFAULT_FAILURE_MESSAGE) -> WriteResult:
        text = failure_message(error, fallback)
        self._notices.error(text)
        code = error.error_code if isinstance(error, MediCoreAPIError) else type(error).__name__
        return WriteResult.failure(text, code)
