"""Issue tracker collaborators used by the reconciliation engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, Protocol, Sequence, TypeVar

from src.integrations.github.issues import (
    DEFAULT_API_URL,
    DEFAULT_TIMEOUT,
    IssueOutcome,
    add_issue_comment,
    create_issue,
)
from src.integrations.github.search_issues import (
    GitHubIssueSearcher,
    IssueSearchPage,
    IssueSearchResult,
)

from .models import ErrorCode

logger = logging.getLogger(__name__)

T = TypeVar("T")


class IssueTracker(Protocol):
    """Operations the reconciliation engine needs from an issue tracker."""

    def search_open_issues(self, title: str, *, limit: int = 1) -> IssueSearchPage: ...

    def add_comment(self, issue_number: int, body: str) -> None: ...

    def create_issue(self, title: str, body: str, labels: Sequence[str]) -> IssueOutcome: ...


@dataclass(frozen=True)
class CallResult(Generic[T]):
    """Either the value returned by a collaborator call or the error it raised."""

    value: T | None = None
    error: str | None = None
    code: ErrorCode | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def attempt(
    func: Callable[..., T],
    *args: object,
    code: ErrorCode = ErrorCode.API,
    **kwargs: object,
) -> CallResult[T]:
    """Invoke ``func`` and capture any exception it raises as a failed result."""

    try:
        return CallResult(value=func(*args, **kwargs))
    except Exception as exc:  # noqa: BLE001 - every collaborator failure becomes a result
        message = str(exc) or exc.__class__.__name__
        logger.debug("Collaborator call %s failed: %s", getattr(func, "__name__", func), message)
        return CallResult(error=message, code=code)


class GitHubIssueTracker:
    """Issue tracker backed by the GitHub REST API."""

    def __init__(
        self,
        *,
        token: str,
        repository: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._token = token
        self._repository = repository
        self._api_url = api_url
        self._timeout = timeout
        self._searcher = GitHubIssueSearcher(
            token=token, repository=repository, api_url=api_url, timeout=timeout
        )

    @property
    def repository(self) -> str:
        return self._repository

    def search_open_issues(self, title: str, *, limit: int = 1) -> IssueSearchPage:
        return self._searcher.search_by_title(title, limit=limit)

    def add_comment(self, issue_number: int, body: str) -> None:
        add_issue_comment(
            token=self._token,
            repository=self._repository,
            issue_number=issue_number,
            body=body,
            api_url=self._api_url,
            timeout=self._timeout,
        )

    def create_issue(self, title: str, body: str, labels: Sequence[str]) -> IssueOutcome:
        return create_issue(
            token=self._token,
            repository=self._repository,
            title=title,
            body=body,
            labels=labels,
            api_url=self._api_url,
            timeout=self._timeout,
        )


@dataclass
class RecordedIssue:
    number: int
    title: str
    body: str
    labels: list[str]
    comments: list[str] = field(default_factory=list)


class InMemoryIssueTracker:
    """Tracker that keeps issues in memory; used for dry runs.

    Title search mirrors GitHub's ``in:title`` qualifier: an issue matches when
    its title contains the searched text. Newest issues are returned first.
    """

    def __init__(self, repository: str = "local/dry-run", *, first_number: int = 1) -> None:
        self.repository = repository
        self.issues: list[RecordedIssue] = []
        self._next_number = first_number

    def _url(self, number: int) -> str:
        return f"https://github.com/{self.repository}/issues/{number}"

    def search_open_issues(self, title: str, *, limit: int = 1) -> IssueSearchPage:
        matches = [issue for issue in reversed(self.issues) if title in issue.title]
        results = tuple(
            IssueSearchResult(number=issue.number, title=issue.title, state="open", url=self._url(issue.number))
            for issue in matches[:limit]
        )
        return IssueSearchPage(total_count=len(matches), items=results)

    def add_comment(self, issue_number: int, body: str) -> None:
        for issue in self.issues:
            if issue.number == issue_number:
                issue.comments.append(body)
                return
        raise LookupError(f"Issue #{issue_number} does not exist")

    def create_issue(self, title: str, body: str, labels: Sequence[str]) -> IssueOutcome:
        number = self._next_number
        self._next_number += 1
        self.issues.append(RecordedIssue(number=number, title=title, body=body, labels=list(labels)))
        return IssueOutcome(
            number=number,
            url=f"https://api.github.com/repos/{self.repository}/issues/{number}",
            html_url=self._url(number),
        )


__all__ = [
    "CallResult",
    "GitHubIssueTracker",
    "InMemoryIssueTracker",
    "IssueTracker",
    "RecordedIssue",
    "attempt",
]
