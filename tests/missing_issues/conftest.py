"""Shared fixtures for missing-issue handler tests."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable
from unittest.mock import MagicMock

import pytest

from src.integrations.github.issues import IssueOutcome
from src.integrations.github.search_issues import IssueSearchPage, IssueSearchResult
from src.missing_issues.models import HandlerOptions

FIXED_NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def template_path(tmp_path: Path) -> Path:
    path = tmp_path / "test_missing_issue_template.md"
    path.write_text("# Missing Items\n\n{{test_list}}\n", encoding="utf-8")
    return path


@pytest.fixture
def make_options(template_path: Path) -> Callable[..., HandlerOptions]:
    def _make(**overrides: Any) -> HandlerOptions:
        values: dict[str, Any] = {
            "handler_type": "create_test_issue",
            "default_title_prefix": "[test prefix]",
            "items_field": "test_items",
            "template_path": template_path,
            "template_list_key": "test_list",
            "build_comment_header": lambda run_url: ["## Test Header", "", f"Items from [run]({run_url}):", ""],
            "render_comment_item": lambda item, index: [
                f"### {index + 1}. {item['name']}",
                f"**Reason:** {item['reason']}",
                "",
            ],
            "render_issue_item": lambda item, index: [
                f"#### {index + 1}. {item['name']}",
                f"**Reason:** {item['reason']}",
                f"**Reported at:** {item['timestamp']}",
                "",
            ],
        }
        values.update(overrides)
        return HandlerOptions(**values)

    return _make


@pytest.fixture
def default_message() -> dict[str, Any]:
    return {
        "workflow_name": "My Workflow",
        "workflow_source": "my-workflow.md",
        "workflow_source_url": "https://github.com/owner/repo/blob/main/my-workflow.md",
        "run_url": "https://github.com/owner/repo/actions/runs/123",
        "test_items": [{"name": "item-one", "reason": "not found", "timestamp": "2026-01-01T00:00:00Z"}],
    }


def _search_hit(number: int) -> IssueSearchPage:
    return IssueSearchPage(
        total_count=1,
        items=(
            IssueSearchResult(
                number=number,
                title="[test prefix] My Workflow",
                state="open",
                url=f"https://github.com/owner/repo/issues/{number}",
            ),
        ),
    )


def _search_miss() -> IssueSearchPage:
    return IssueSearchPage(total_count=0)


@pytest.fixture
def search_hit() -> Callable[[int], IssueSearchPage]:
    return _search_hit


@pytest.fixture
def tracker() -> MagicMock:
    mock = MagicMock()
    mock.search_open_issues.return_value = _search_miss()
    mock.create_issue.return_value = IssueOutcome(
        number=1,
        url="https://api.github.com/repos/owner/repo/issues/1",
        html_url="https://github.com/owner/repo/issues/1",
    )
    mock.add_comment.return_value = None
    return mock


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW
