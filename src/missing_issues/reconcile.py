"""Search-then-branch reconciliation of one message against open issues.

For a given workflow the engine looks for an open issue titled
``"{title_prefix} {workflow_name}"``. When one exists the reported items are
appended as a comment; otherwise a new issue is rendered from the handler's
template and created with the configured labels. Every collaborator call is
routed through :func:`~src.missing_issues.tracker.attempt`, so failures come
back as values and the engine never raises.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Sequence

from src.integrations.github.issues import load_template, render_template

from .footer import DEFAULT_EXPIRES_HOURS, build_footer
from .models import ErrorCode, HandlerOptions, Item, ProcessResult
from .sanitize import MAX_BODY_CHARS, Sanitizer, sanitize_content, truncate_content
from .tracker import CallResult, IssueTracker, attempt

logger = logging.getLogger(__name__)

FOOTER_SEPARATOR = "\n\n"


def build_issue_title(title_prefix: str, workflow_name: str) -> str:
    return f"{title_prefix} {workflow_name}"


class IssueReconciler:
    """Creates or updates the tracking issue for a workflow's reported items."""

    def __init__(
        self,
        options: HandlerOptions,
        tracker: IssueTracker,
        *,
        sanitizer: Sanitizer = sanitize_content,
        expires_hours: float = DEFAULT_EXPIRES_HOURS,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.options = options
        self.tracker = tracker
        self.sanitizer = sanitizer
        self.expires_hours = expires_hours
        self._clock = clock

    def reconcile(
        self,
        title_prefix: str,
        labels: Sequence[str],
        workflow_name: str,
        workflow_source: str,
        workflow_source_url: str,
        run_url: str,
        items: Sequence[Item],
    ) -> ProcessResult:
        issue_title = build_issue_title(title_prefix, workflow_name)
        logger.info('Checking for existing issue with title: "%s"', issue_title)

        search = attempt(self.tracker.search_open_issues, issue_title, limit=1)
        if not search.ok:
            return self._failed(search)

        page = search.value
        existing = page.first if page is not None and page.total_count > 0 else None
        if existing is not None:
            logger.info("Found existing issue #%s: %s", existing.number, existing.url)
            return self._comment_on_existing(
                existing.number,
                existing.url,
                workflow_name,
                workflow_source_url,
                run_url,
                items,
            )

        logger.info("No existing issue found, creating a new one")
        return self._create_new(
            issue_title,
            labels,
            workflow_name,
            workflow_source,
            workflow_source_url,
            run_url,
            items,
        )

    def build_comment_body(
        self,
        workflow_name: str,
        workflow_source_url: str,
        run_url: str,
        items: Sequence[Item],
    ) -> str:
        lines = list(self.options.build_comment_header(run_url))
        for index, item in enumerate(items):
            lines.extend(self.options.render_comment_item(item, index))
        lines.append("---")
        lines.append(f"> Workflow: [{workflow_name}]({workflow_source_url})")
        lines.append(f"> Run: {run_url}")
        return self.sanitizer("\n".join(lines))

    def build_issue_body(
        self,
        template: str,
        workflow_name: str,
        workflow_source: str,
        workflow_source_url: str,
        run_url: str,
        items: Sequence[Item],
    ) -> str:
        item_lines: list[str] = []
        for index, item in enumerate(items):
            item_lines.extend(self.options.render_issue_item(item, index))

        variables = {
            "workflow_name": workflow_name,
            "workflow_source_url": workflow_source_url or "#",
            "run_url": run_url,
            "workflow_source": workflow_source,
            self.options.template_list_key: "\n".join(item_lines),
        }
        content = render_template(template, variables)
        footer = build_footer(
            f"> Workflow: [{workflow_name}]({workflow_source_url})",
            self.expires_hours,
            now=self._clock() if self._clock else None,
        )
        # Only the content is truncated; the footer carries the expiration marker.
        content = self.sanitizer(content)
        footer = self.sanitizer(footer)
        budget = MAX_BODY_CHARS - len(footer) - len(FOOTER_SEPARATOR)
        content = truncate_content(content, budget)
        return f"{content}{FOOTER_SEPARATOR}{footer}"

    def _comment_on_existing(
        self,
        number: int,
        url: str,
        workflow_name: str,
        workflow_source_url: str,
        run_url: str,
        items: Sequence[Item],
    ) -> ProcessResult:
        body = attempt(
            self.build_comment_body,
            workflow_name,
            workflow_source_url,
            run_url,
            items,
            code=ErrorCode.SYSTEM,
        )
        if not body.ok:
            return self._failed(body)

        posted = attempt(self.tracker.add_comment, number, body.value)
        if not posted.ok:
            return self._failed(posted)

        logger.info("Added comment to existing issue #%s", number)
        return ProcessResult.updated(number, url)

    def _create_new(
        self,
        issue_title: str,
        labels: Sequence[str],
        workflow_name: str,
        workflow_source: str,
        workflow_source_url: str,
        run_url: str,
        items: Sequence[Item],
    ) -> ProcessResult:
        template = attempt(load_template, self.options.template_path, code=ErrorCode.SYSTEM)
        if not template.ok:
            return self._failed(template)

        body = attempt(
            self.build_issue_body,
            template.value,
            workflow_name,
            workflow_source,
            workflow_source_url,
            run_url,
            items,
            code=ErrorCode.SYSTEM,
        )
        if not body.ok:
            return self._failed(body)

        created = attempt(self.tracker.create_issue, issue_title, body.value, list(labels))
        if not created.ok:
            return self._failed(created)

        outcome = created.value
        logger.info("Created new issue #%s: %s", outcome.number, outcome.html_url)
        return ProcessResult.created(outcome.number, outcome.html_url)

    @staticmethod
    def _failed(result: CallResult) -> ProcessResult:
        logger.warning("Failed to create or update issue: %s", result.error)
        return ProcessResult.failure(result.error or "Unknown error", result.code)


__all__ = ["IssueReconciler", "build_issue_title"]
