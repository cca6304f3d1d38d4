"""GitHub integration utilities."""

from .issues import (
    DEFAULT_API_URL,
    GitHubIssueError,
    IssueOutcome,
    add_issue_comment,
    create_issue,
    load_template,
    render_template,
    resolve_repository,
    resolve_token,
)
from .search_issues import GitHubIssueSearcher, IssueSearchPage, IssueSearchResult

__all__ = [
    "DEFAULT_API_URL",
    "GitHubIssueError",
    "GitHubIssueSearcher",
    "IssueOutcome",
    "IssueSearchPage",
    "IssueSearchResult",
    "add_issue_comment",
    "create_issue",
    "load_template",
    "render_template",
    "resolve_repository",
    "resolve_token",
]
