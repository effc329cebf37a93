"""
Error taxonomy for a publish run.

Every error is fatal for the run: nothing is retried and nothing already
written to disk is rolled back.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class BoxPublishError(Exception):
    """
    Base class for all publish failures.

    Carries a stable reason code plus whatever context is known about the
    failure, so the CLI can print a single diagnostic line.
    """

    default_reason_code = "PUBLISH_FAILED"

    def __init__(
        self,
        message: str,
        *,
        reason_code: Optional[str] = None,
        path: Optional[str] = None,
        url: Optional[str] = None,
        name: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.reason_code = reason_code or self.default_reason_code
        self.path = path
        self.url = url
        self.name = name

    def __str__(self) -> str:
        return self.format_human()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reason_code": self.reason_code,
            "message": self.message,
            "path": self.path,
            "url": self.url,
            "name": self.name,
        }

    def format_human(self) -> str:
        parts = [f"[{self.reason_code}] {self.message}"]
        if self.name:
            parts.append(f"name={self.name}")
        if self.path:
            parts.append(f"path={self.path}")
        if self.url:
            parts.append(f"url={self.url}")
        return " ".join(parts)


class ConfigError(BoxPublishError):
    """Missing or malformed input."""

    default_reason_code = "CONFIG_ERROR"


class ConflictError(BoxPublishError):
    """A pre-existing file or directory would be clobbered."""

    default_reason_code = "CONFLICT"


class ExportFailure(BoxPublishError):
    """The external export process failed."""

    default_reason_code = "EXPORT_FAILED"

    def __init__(self, message: str, *, exit_code: Optional[int] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.exit_code = exit_code

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["exit_code"] = self.exit_code
        return data


class TransportError(BoxPublishError):
    """Fetching the remote index failed for a reason other than not-found."""

    default_reason_code = "TRANSPORT_ERROR"

    def __init__(self, message: str, *, status_code: Optional[int] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["status_code"] = self.status_code
        return data


class IndexCorrupt(BoxPublishError):
    """The fetched index could not be parsed."""

    default_reason_code = "INDEX_CORRUPT"


class IdentityMismatch(BoxPublishError):
    """The fetched index describes a different box than the one being published."""

    default_reason_code = "IDENTITY_MISMATCH"

    def __init__(self, message: str, *, expected: str, observed: Optional[str], **kwargs: Any):
        super().__init__(message, name=expected, **kwargs)
        self.expected = expected
        self.observed = observed

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["expected"] = self.expected
        data["observed"] = self.observed
        return data

    def format_human(self) -> str:
        return f"{super().format_human()} observed={self.observed}"
