"""Turn agent-reported missing tools and data into deduplicated GitHub issues."""

from .config import RuntimeConfig, load_handler_configs
from .footer import DEFAULT_EXPIRES_HOURS, build_footer, parse_expiration
from .handler import (
    MissingIssueHandler,
    MissingIssueHandlerFactory,
    ThrottleCounter,
    build_missing_issue_handler,
)
from .handlers import default_factories, get_handler_factory
from .labels import normalize_labels
from .models import ConfigError, ErrorCode, HandlerOptions, ProcessResult
from .reconcile import IssueReconciler, build_issue_title
from .runner import BatchSummary, load_messages, process_messages
from .sanitize import sanitize_content
from .tracker import GitHubIssueTracker, InMemoryIssueTracker, IssueTracker

__all__ = [
    "BatchSummary",
    "ConfigError",
    "DEFAULT_EXPIRES_HOURS",
    "ErrorCode",
    "GitHubIssueTracker",
    "HandlerOptions",
    "InMemoryIssueTracker",
    "IssueReconciler",
    "IssueTracker",
    "MissingIssueHandler",
    "MissingIssueHandlerFactory",
    "ProcessResult",
    "RuntimeConfig",
    "ThrottleCounter",
    "build_footer",
    "build_issue_title",
    "build_missing_issue_handler",
    "default_factories",
    "get_handler_factory",
    "load_handler_configs",
    "load_messages",
    "normalize_labels",
    "parse_expiration",
    "process_messages",
    "sanitize_content",
]
