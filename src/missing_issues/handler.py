"""Handler factory binding event-specific renderers to the reconciliation engine."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Mapping

from .config import RuntimeConfig
from .labels import normalize_labels
from .models import ErrorCode, HandlerOptions, Message, ProcessResult
from .reconcile import IssueReconciler
from .sanitize import Sanitizer, sanitize_content
from .tracker import IssueTracker

logger = logging.getLogger(__name__)


class ThrottleCounter:
    """Counts messages processed during one execution; never decreases."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.count = 0

    @property
    def exhausted(self) -> bool:
        return self.count >= self.limit

    def increment(self) -> None:
        self.count += 1


class MissingIssueHandler:
    """Per-execution message handler.

    Instances own the throttle counter for the execution they were created
    for and must be called sequentially, one message at a time.
    """

    def __init__(
        self,
        options: HandlerOptions,
        reconciler: IssueReconciler,
        *,
        title_prefix: str,
        labels: list[str],
        max_count: int,
    ) -> None:
        self.options = options
        self.reconciler = reconciler
        self.title_prefix = title_prefix
        self.labels = labels
        self.counter = ThrottleCounter(max_count)
        self.processed_issues: list[ProcessResult] = []

    @property
    def max_count(self) -> int:
        return self.counter.limit

    def __call__(self, message: Message) -> ProcessResult:
        return self.handle(message)

    def handle(self, message: Message) -> ProcessResult:
        if self.counter.exhausted:
            logger.warning(
                "Skipping %s: max count of %s reached", self.options.handler_type, self.max_count
            )
            return ProcessResult.failure(
                f"Max count of {self.max_count} reached", ErrorCode.VALIDATION
            )

        # Invalid messages still consume a slot.
        self.counter.increment()

        fields: Mapping[str, Any] = message if isinstance(message, Mapping) else {}
        if not fields.get("workflow_name"):
            return self._invalid("Missing required field: workflow_name")

        items_field = self.options.items_field
        items = fields.get(items_field)
        if not isinstance(items, (list, tuple)) or not items:
            return self._invalid(f"Missing or empty {items_field} array")

        result = self.reconciler.reconcile(
            self.title_prefix,
            self.labels,
            str(fields["workflow_name"]),
            str(fields.get("workflow_source") or ""),
            str(fields.get("workflow_source_url") or ""),
            str(fields.get("run_url") or ""),
            list(items),
        )
        if result.success:
            self.processed_issues.append(result)
        return result

    @staticmethod
    def _invalid(error: str) -> ProcessResult:
        logger.warning(error)
        return ProcessResult.failure(error, ErrorCode.VALIDATION)


class MissingIssueHandlerFactory:
    """Immutable factory configured once per event kind."""

    def __init__(self, options: HandlerOptions) -> None:
        self.options = options

    @property
    def handler_type(self) -> str:
        return self.options.handler_type

    def create(
        self,
        config: RuntimeConfig | Mapping[str, Any] | None,
        tracker: IssueTracker,
        *,
        sanitizer: Sanitizer = sanitize_content,
        clock: Callable[[], datetime] | None = None,
    ) -> MissingIssueHandler:
        """Resolve ``config`` and return a fresh handler for one execution."""

        if not isinstance(config, RuntimeConfig):
            config = RuntimeConfig.from_mapping(config)

        title_prefix = config.title_prefix or self.options.default_title_prefix
        labels = normalize_labels(config.labels, dedupe=config.dedupe_labels)
        max_count = config.max or 1

        logger.info("Title prefix: %s", title_prefix)
        if labels:
            logger.info("Default labels: %s", ", ".join(labels))
        logger.info("Max count: %s", max_count)

        reconciler = IssueReconciler(self.options, tracker, sanitizer=sanitizer, clock=clock)
        return MissingIssueHandler(
            self.options,
            reconciler,
            title_prefix=title_prefix,
            labels=labels,
            max_count=max_count,
        )


def build_missing_issue_handler(
    options: HandlerOptions,
) -> Callable[..., MissingIssueHandler]:
    """Return the ``create`` function of a factory bound to ``options``."""

    return MissingIssueHandlerFactory(options).create


__all__ = [
    "MissingIssueHandler",
    "MissingIssueHandlerFactory",
    "ThrottleCounter",
    "build_missing_issue_handler",
]
