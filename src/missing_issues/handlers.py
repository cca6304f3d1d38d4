"""Built-in handler definitions for missing tools and missing data."""

from __future__ import annotations

import os
from pathlib import Path

from .handler import MissingIssueHandlerFactory
from .models import HandlerOptions, Item

TEMPLATE_DIR_ENV = "MISSING_ISSUES_TEMPLATE_DIR"
BUNDLED_TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

MISSING_TOOL_HANDLER_TYPE = "create_missing_tool_issue"
MISSING_DATA_HANDLER_TYPE = "create_missing_data_issue"


def get_template_dir() -> Path:
    """Return the template directory, honoring ``MISSING_ISSUES_TEMPLATE_DIR``."""

    env_path = os.getenv(TEMPLATE_DIR_ENV)
    if env_path:
        return Path(env_path)
    return BUNDLED_TEMPLATE_DIR


def _tool_comment_header(run_url: str) -> list[str]:
    return [
        "## Missing Tools Reported",
        "",
        f"The following tools were reported as missing during [workflow run]({run_url}):",
        "",
    ]


def _tool_lines(tool: Item, index: int, heading: str) -> list[str]:
    lines = [f"{heading} {index + 1}. `{tool.get('tool')}`", f"**Reason:** {tool.get('reason')}"]
    if tool.get("alternatives"):
        lines.append(f"**Alternatives:** {tool['alternatives']}")
    return lines


def render_tool_comment_item(tool: Item, index: int) -> list[str]:
    return [*_tool_lines(tool, index, "###"), ""]


def render_tool_issue_item(tool: Item, index: int) -> list[str]:
    return [*_tool_lines(tool, index, "####"), f"**Reported at:** {tool.get('timestamp')}", ""]


def _data_comment_header(run_url: str) -> list[str]:
    return [
        "## Missing Data Reported",
        "",
        f"The following data was reported as missing during [workflow run]({run_url}):",
        "",
    ]


def _data_lines(item: Item, index: int, heading: str) -> list[str]:
    lines = [f"{heading} {index + 1}. **{item.get('data_type')}**", f"**Reason:** {item.get('reason')}"]
    if item.get("context"):
        lines.append(f"**Context:** {item['context']}")
    if item.get("alternatives"):
        lines.append(f"**Alternatives:** {item['alternatives']}")
    return lines


def render_data_comment_item(item: Item, index: int) -> list[str]:
    return [*_data_lines(item, index, "###"), ""]


def render_data_issue_item(item: Item, index: int) -> list[str]:
    return [*_data_lines(item, index, "####"), f"**Reported at:** {item.get('timestamp')}", ""]


def missing_tool_options(template_dir: Path | None = None) -> HandlerOptions:
    base = template_dir or get_template_dir()
    return HandlerOptions(
        handler_type=MISSING_TOOL_HANDLER_TYPE,
        default_title_prefix="[missing tool]",
        items_field="missing_tools",
        template_path=base / "missing_tool_issue.md",
        template_list_key="missing_tools_list",
        build_comment_header=_tool_comment_header,
        render_comment_item=render_tool_comment_item,
        render_issue_item=render_tool_issue_item,
    )


def missing_data_options(template_dir: Path | None = None) -> HandlerOptions:
    base = template_dir or get_template_dir()
    return HandlerOptions(
        handler_type=MISSING_DATA_HANDLER_TYPE,
        default_title_prefix="[missing data]",
        items_field="missing_data",
        template_path=base / "missing_data_issue.md",
        template_list_key="missing_data_list",
        build_comment_header=_data_comment_header,
        render_comment_item=render_data_comment_item,
        render_issue_item=render_data_issue_item,
    )


class UnknownHandlerError(KeyError):
    """Raised when no handler is registered for a message type."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "Unknown handler type"


def default_factories(template_dir: Path | None = None) -> dict[str, MissingIssueHandlerFactory]:
    """Return factories for the built-in event kinds keyed by handler type."""

    return {
        MISSING_TOOL_HANDLER_TYPE: MissingIssueHandlerFactory(missing_tool_options(template_dir)),
        MISSING_DATA_HANDLER_TYPE: MissingIssueHandlerFactory(missing_data_options(template_dir)),
    }


def get_handler_factory(
    handler_type: str, factories: dict[str, MissingIssueHandlerFactory] | None = None
) -> MissingIssueHandlerFactory:
    registry = factories if factories is not None else default_factories()
    try:
        return registry[handler_type]
    except KeyError:
        known = ", ".join(sorted(registry))
        raise UnknownHandlerError(
            f"Unsupported message type: {handler_type} (expected one of: {known})"
        ) from None


__all__ = [
    "BUNDLED_TEMPLATE_DIR",
    "MISSING_DATA_HANDLER_TYPE",
    "MISSING_TOOL_HANDLER_TYPE",
    "TEMPLATE_DIR_ENV",
    "UnknownHandlerError",
    "default_factories",
    "get_handler_factory",
    "get_template_dir",
    "missing_data_options",
    "missing_tool_options",
]
