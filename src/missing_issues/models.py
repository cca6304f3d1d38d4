"""Data types shared by the missing-issue handlers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Mapping, Sequence

Item = Mapping[str, Any]
Message = Mapping[str, Any]

ACTION_CREATED = "created"
ACTION_UPDATED = "updated"


class ErrorCode(str, Enum):
    """Machine-readable categories attached to failed results."""

    VALIDATION = "ERR_VALIDATION"
    API = "ERR_API"
    CONFIG = "ERR_CONFIG"
    SYSTEM = "ERR_SYSTEM"
    PARSE = "ERR_PARSE"


class ConfigError(RuntimeError):
    """Raised when runtime configuration or a message file is malformed."""


@dataclass(frozen=True)
class HandlerOptions:
    """Static wiring for one kind of missing-issue event."""

    handler_type: str
    default_title_prefix: str
    items_field: str
    template_path: Path
    template_list_key: str
    build_comment_header: Callable[[str], Sequence[str]]
    render_comment_item: Callable[[Item, int], Sequence[str]]
    render_issue_item: Callable[[Item, int], Sequence[str]]


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of handling a single message."""

    success: bool
    issue_number: int | None = None
    issue_url: str | None = None
    action: str | None = None
    error: str | None = None
    error_code: ErrorCode | None = None

    @classmethod
    def created(cls, number: int, url: str) -> "ProcessResult":
        return cls(success=True, issue_number=number, issue_url=url, action=ACTION_CREATED)

    @classmethod
    def updated(cls, number: int, url: str) -> "ProcessResult":
        return cls(success=True, issue_number=number, issue_url=url, action=ACTION_UPDATED)

    @classmethod
    def failure(cls, error: str, code: ErrorCode | None = None) -> "ProcessResult":
        return cls(success=False, error=error, error_code=code)

    def to_dict(self) -> dict[str, object]:
        if self.success:
            return {
                "success": True,
                "issue_number": self.issue_number,
                "issue_url": self.issue_url,
                "action": self.action,
            }
        payload: dict[str, object] = {"success": False, "error": self.error}
        if self.error_code is not None:
            payload["error_code"] = self.error_code.value
        return payload
