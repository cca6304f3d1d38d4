"""Helpers for creating and commenting on GitHub issues programmatically."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Sequence

import requests

DEFAULT_API_URL = "https://api.github.com"
API_VERSION = "2022-11-28"
DEFAULT_TIMEOUT = 30

_PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*(\w+)\s*\}\}|\{(\w+)\}")


class GitHubIssueError(RuntimeError):
    """Raised when the GitHub API returns an error."""


@dataclass(frozen=True)
class IssueOutcome:
    """Represents the response from a successful issue creation."""

    number: int
    url: str
    html_url: str

    @classmethod
    def from_api_payload(cls, payload: Mapping[str, object]) -> "IssueOutcome":
        try:
            number = int(payload["number"])  # type: ignore[arg-type]
            url = str(payload["url"])
            html_url = str(payload.get("html_url", url))
        except (KeyError, TypeError, ValueError) as exc:  # pragma: no cover - protective
            raise GitHubIssueError("Unexpected GitHub response payload") from exc
        return cls(number=number, url=url, html_url=html_url)


def normalize_repository(repository: str | None) -> tuple[str, str]:
    """Split an ``owner/repo`` string into its two components."""

    if not repository:
        raise GitHubIssueError("Repository must be provided as 'owner/repo'.")
    owner, sep, name = repository.partition("/")
    if not sep or not owner or not name:
        raise GitHubIssueError(f"Invalid repository format: {repository!r}")
    return owner, name


def resolve_repository(explicit_repo: str | None) -> str:
    """Return the repository name, preferring explicit input over the environment."""

    if explicit_repo:
        return explicit_repo
    repo = os.environ.get("GITHUB_REPOSITORY")
    if not repo:
        raise GitHubIssueError(
            "Repository not provided; set --repo or the GITHUB_REPOSITORY environment variable."
        )
    return repo


def resolve_token(explicit_token: str | None) -> str:
    """Return the token, preferring explicit input over the environment."""

    if explicit_token:
        return explicit_token
    token = os.environ.get("GITHUB_TOKEN") or os.environ.get("GH_TOKEN")
    if not token:
        raise GitHubIssueError(
            "Token not provided; set --token or the GITHUB_TOKEN environment variable."
        )
    return token


def load_template(template_path: Path) -> str:
    """Read the template file as UTF-8 text."""

    template_path = Path(template_path)
    if not template_path.exists():
        raise GitHubIssueError(f"Template not found: {template_path}")
    try:
        return template_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise GitHubIssueError(f"Failed to read template {template_path}: {exc}") from exc


def render_template(template: str, variables: Mapping[str, object] | None = None) -> str:
    """Substitute ``{{name}}`` and ``{name}`` placeholders from ``variables``.

    Placeholders without a matching variable are left untouched, and variables
    that never appear in the template are ignored.
    """

    if not variables:
        return template

    def _substitute(match: re.Match[str]) -> str:
        key = match.group(1) or match.group(2)
        value = variables.get(key)
        if value is None:
            return match.group(0)
        return str(value)

    return _PLACEHOLDER_PATTERN.sub(_substitute, template)


def build_headers(token: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {token}",
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": API_VERSION,
    }


def github_request(
    method: str,
    url: str,
    *,
    token: str,
    payload: Mapping[str, Any] | None = None,
    params: Mapping[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Any:
    """Send a request to the GitHub REST API and return the decoded JSON body.

    Transport failures and non-2xx responses are raised as
    :class:`GitHubIssueError` carrying the API's own error text.
    """

    try:
        response = requests.request(
            method,
            url,
            headers=build_headers(token),
            json=payload,
            params=params,
            timeout=timeout,
        )
    except requests.RequestException as exc:
        raise GitHubIssueError(f"Failed to reach GitHub API: {exc}") from exc

    if response.status_code >= 400:
        raise GitHubIssueError(
            f"GitHub API error ({response.status_code}): {_error_text(response)}"
        )

    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError as exc:
        raise GitHubIssueError("Invalid JSON response from GitHub API") from exc


def _error_text(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text.strip()
    if isinstance(data, Mapping) and data.get("message"):
        return str(data["message"])
    return response.text.strip()


def create_issue(
    *,
    token: str,
    repository: str,
    title: str,
    body: str,
    api_url: str = DEFAULT_API_URL,
    labels: Sequence[str] | None = None,
    assignees: Sequence[str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> IssueOutcome:
    """Create a GitHub issue and return the result."""

    owner, name = normalize_repository(repository)
    payload: dict[str, object] = {"title": title, "body": body}
    if labels:
        payload["labels"] = list(labels)
    if assignees:
        payload["assignees"] = list(assignees)

    url = f"{api_url.rstrip('/')}/repos/{owner}/{name}/issues"
    data = github_request("POST", url, token=token, payload=payload, timeout=timeout)
    if not isinstance(data, Mapping):
        raise GitHubIssueError("Unexpected GitHub response payload")
    return IssueOutcome.from_api_payload(data)


def add_issue_comment(
    *,
    token: str,
    repository: str,
    issue_number: int,
    body: str,
    api_url: str = DEFAULT_API_URL,
    timeout: float = DEFAULT_TIMEOUT,
) -> None:
    """Post a comment on an existing issue."""

    owner, name = normalize_repository(repository)
    url = f"{api_url.rstrip('/')}/repos/{owner}/{name}/issues/{issue_number}/comments"
    github_request("POST", url, token=token, payload={"body": body}, timeout=timeout)
