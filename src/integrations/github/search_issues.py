"""Helpers for searching GitHub issues."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Sequence

from .issues import (
    DEFAULT_API_URL,
    DEFAULT_TIMEOUT,
    GitHubIssueError,
    github_request,
    normalize_repository,
)


@dataclass(frozen=True)
class IssueSearchResult:
    """Represents a single issue returned by the search API."""

    number: int
    title: str
    state: str
    url: str

    @classmethod
    def from_api_payload(cls, payload: Mapping[str, object]) -> "IssueSearchResult":
        try:
            number = int(payload["number"])  # type: ignore[arg-type]
            title = str(payload.get("title", ""))
            state = str(payload.get("state", ""))
            url = str(payload.get("html_url") or payload.get("url") or "")
        except (KeyError, TypeError, ValueError) as exc:  # pragma: no cover - protective
            raise GitHubIssueError("Unexpected GitHub response payload") from exc

        if not url:
            raise GitHubIssueError("Issue payload missing URL field")

        return cls(number=number, title=title, state=state, url=url)

    def to_dict(self) -> dict[str, object]:
        return {
            "number": self.number,
            "title": self.title,
            "state": self.state,
            "url": self.url,
        }


@dataclass(frozen=True)
class IssueSearchPage:
    """A page of search results together with the total match count."""

    total_count: int
    items: tuple[IssueSearchResult, ...] = field(default_factory=tuple)

    @property
    def first(self) -> IssueSearchResult | None:
        return self.items[0] if self.items else None


def build_title_query(owner: str, name: str, title: str) -> str:
    """Return the search query matching open issues with ``title`` in their title."""

    return f'repo:{owner}/{name} is:issue is:open in:title "{title}"'


class GitHubIssueSearcher:
    """Simple client for searching GitHub issues via the REST API."""

    def __init__(
        self,
        *,
        token: str,
        repository: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        if not token:
            raise GitHubIssueError("A GitHub token is required for searching issues.")
        self._token = token
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._owner, self._name = normalize_repository(repository)

    def search_by_title(self, title: str, *, limit: int = 1) -> IssueSearchPage:
        """Return open issues whose title contains the quoted ``title``."""

        if not title:
            raise GitHubIssueError("Title must be provided for title searches.")
        return self.search(build_title_query(self._owner, self._name, title), limit=limit)

    def search(self, query: str, *, limit: int) -> IssueSearchPage:
        if limit < 1:
            raise GitHubIssueError("Search limit must be a positive integer.")
        per_page = max(1, min(limit, 100))
        params = {"q": query, "per_page": str(per_page)}
        payload = github_request(
            "GET",
            f"{self._api_url}/search/issues",
            token=self._token,
            params=params,
            timeout=self._timeout,
        )
        if not isinstance(payload, Mapping):  # pragma: no cover - defensive
            raise GitHubIssueError("Unexpected GitHub search response payload.")

        items = payload.get("items", [])
        if not isinstance(items, Sequence):  # pragma: no cover - defensive
            raise GitHubIssueError("Unexpected GitHub search response payload.")

        results: list[IssueSearchResult] = []
        for item in items:
            if not isinstance(item, Mapping):  # pragma: no cover - defensive
                raise GitHubIssueError("Unexpected issue entry in search response.")
            results.append(IssueSearchResult.from_api_payload(item))

        try:
            total_count = int(payload.get("total_count", len(results)))
        except (TypeError, ValueError) as exc:
            raise GitHubIssueError("Unexpected GitHub search response payload.") from exc
        return IssueSearchPage(total_count=total_count, items=tuple(results[:limit]))
