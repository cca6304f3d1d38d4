#!/usr/bin/env python3

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from src.integrations.github.issues import (
    DEFAULT_API_URL,
    GitHubIssueError,
    load_template,
    resolve_repository,
    resolve_token,
)
from src.missing_issues.config import load_handler_configs
from src.missing_issues.handlers import UnknownHandlerError, default_factories, get_handler_factory
from src.missing_issues.models import ConfigError
from src.missing_issues.reconcile import IssueReconciler, build_issue_title
from src.missing_issues.runner import (
    BatchSummary,
    load_messages,
    process_messages,
    resolve_handler_type,
)
from src.missing_issues.tracker import GitHubIssueTracker, InMemoryIssueTracker, IssueTracker

OUTPUT_TEXT = "text"
OUTPUT_JSON = "json"


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--messages",
        type=Path,
        required=True,
        help="NDJSON (or JSON list) file with the messages reported by the agent.",
    )
    parser.add_argument(
        "--template-dir",
        type=Path,
        help="Directory holding the issue templates (defaults to the bundled templates).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )


def build_process_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Create or update GitHub issues for missing tools and data reported by agents.",
        prog="python -m main process",
    )
    _add_common_arguments(parser)
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML file with per-handler settings (default: config/missing_issues.yaml when present).",
    )
    parser.add_argument(
        "--repo",
        help="Target repository in owner/repo form. Defaults to $GITHUB_REPOSITORY.",
    )
    parser.add_argument(
        "--token",
        help="GitHub token. Defaults to $GITHUB_TOKEN.",
    )
    parser.add_argument(
        "--api-url",
        default=DEFAULT_API_URL,
        help="Base URL for the GitHub API (set for GitHub Enterprise).",
    )
    parser.add_argument(
        "--output",
        choices=[OUTPUT_TEXT, OUTPUT_JSON],
        default=OUTPUT_TEXT,
        help="Output format: friendly text or JSON.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Process messages against an in-memory tracker without calling GitHub.",
    )
    return parser


def build_render_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Preview the issue body the first message of a kind would create.",
        prog="python -m main render",
    )
    _add_common_arguments(parser)
    parser.add_argument(
        "--kind",
        required=True,
        help="Message type to preview (e.g. missing_tool or create_missing_data_issue).",
    )
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def format_summary(summary: BatchSummary, mode: str) -> str:
    if mode == OUTPUT_JSON:
        return json.dumps(summary.to_dict(), indent=2)

    lines = []
    for index, result in enumerate(summary.results, start=1):
        if result.success:
            lines.append(f"{index}. {result.action} #{result.issue_number}: {result.issue_url}")
        else:
            lines.append(f"{index}. failed: {result.error}")
    lines.append(
        f"Created: {summary.created}  Updated: {summary.updated}  Failed: {summary.failed}"
    )
    return "\n".join(lines)


def process_cli(args: argparse.Namespace) -> int:
    configure_logging(args.verbose)
    try:
        messages = load_messages(args.messages)
        configs = load_handler_configs(args.config)
    except (FileNotFoundError, ConfigError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    tracker: IssueTracker
    if args.dry_run:
        tracker = InMemoryIssueTracker()
    else:
        try:
            repository = resolve_repository(args.repo)
            token = resolve_token(args.token)
            tracker = GitHubIssueTracker(token=token, repository=repository, api_url=args.api_url)
        except GitHubIssueError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1

    summary = process_messages(messages, default_factories(args.template_dir), configs, tracker)
    print(format_summary(summary, args.output))
    return 0 if summary.success else 1


def render_cli(args: argparse.Namespace) -> int:
    configure_logging(args.verbose)
    handler_type = resolve_handler_type(args.kind)
    try:
        factory = get_handler_factory(handler_type, default_factories(args.template_dir))
        messages = load_messages(args.messages)
    except (UnknownHandlerError, FileNotFoundError, ConfigError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    options = factory.options
    for message in messages:
        if resolve_handler_type(str(message.get("type", ""))) != handler_type:
            continue
        items = message.get(options.items_field)
        if not message.get("workflow_name") or not isinstance(items, list) or not items:
            continue
        try:
            template = load_template(options.template_path)
        except GitHubIssueError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1
        reconciler = IssueReconciler(options, InMemoryIssueTracker())
        title = build_issue_title(options.default_title_prefix, str(message["workflow_name"]))
        print(f"Title: {title}\n")
        print(
            reconciler.build_issue_body(
                template,
                str(message["workflow_name"]),
                str(message.get("workflow_source") or ""),
                str(message.get("workflow_source_url") or ""),
                str(message.get("run_url") or ""),
                items,
            )
        )
        return 0

    print(f"No valid {handler_type} messages found in {args.messages}.", file=sys.stderr)
    return 1


def main(argv: list[str] | None = None) -> int:
    raw_args = sys.argv[1:] if argv is None else argv

    if raw_args and raw_args[0] == "render":
        parser = build_render_parser()
        try:
            args = parser.parse_args(raw_args[1:])
        except argparse.ArgumentError as exc:
            parser.error(str(exc))
        return render_cli(args)

    if raw_args and raw_args[0] == "process":
        raw_args = raw_args[1:]

    parser = build_process_parser()
    try:
        args = parser.parse_args(raw_args)
    except argparse.ArgumentError as exc:
        parser.error(str(exc))

    return process_cli(args)


if __name__ == "__main__":
    raise SystemExit(main())
