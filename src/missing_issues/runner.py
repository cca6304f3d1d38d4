"""Process a batch of agent messages for one execution."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping

from .config import RuntimeConfig
from .handler import MissingIssueHandler, MissingIssueHandlerFactory
from .handlers import MISSING_DATA_HANDLER_TYPE, MISSING_TOOL_HANDLER_TYPE
from .models import ACTION_CREATED, ACTION_UPDATED, ConfigError, ErrorCode, Message, ProcessResult
from .sanitize import Sanitizer, sanitize_content
from .tracker import IssueTracker

logger = logging.getLogger(__name__)

MESSAGE_TYPE_ALIASES = {
    "missing_tool": MISSING_TOOL_HANDLER_TYPE,
    "missing_data": MISSING_DATA_HANDLER_TYPE,
}


@dataclass
class BatchSummary:
    """Results for every message of a batch, in input order."""

    results: list[ProcessResult] = field(default_factory=list)

    @property
    def created(self) -> int:
        return sum(1 for result in self.results if result.action == ACTION_CREATED)

    @property
    def updated(self) -> int:
        return sum(1 for result in self.results if result.action == ACTION_UPDATED)

    @property
    def failed(self) -> int:
        return sum(1 for result in self.results if not result.success)

    @property
    def success(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> dict[str, object]:
        return {
            "created": self.created,
            "updated": self.updated,
            "failed": self.failed,
            "results": [result.to_dict() for result in self.results],
        }


def resolve_handler_type(message_type: str) -> str:
    return MESSAGE_TYPE_ALIASES.get(message_type, message_type)


def resolve_handler_configs(
    configs: Mapping[str, RuntimeConfig],
    factories: Mapping[str, MissingIssueHandlerFactory],
) -> dict[str, RuntimeConfig]:
    """Key ``configs`` by canonical handler type, dropping sections no factory handles.

    Sections may use the short message types (``missing_tool``). When both a
    short and a canonical key are present, the canonical section wins.
    """

    resolved: dict[str, RuntimeConfig] = {}
    for key, config in configs.items():
        handler_type = resolve_handler_type(key)
        if handler_type not in factories:
            logger.warning("Ignoring configuration for unknown handler type: %s", key)
            continue
        if handler_type in resolved and key != handler_type:
            logger.warning("Ignoring configuration for %s: %s is already configured", key, handler_type)
            continue
        resolved[handler_type] = config
    return resolved


def load_messages(path: Path) -> list[dict[str, Any]]:
    """Read messages from NDJSON, a JSON list, or a JSON object with ``items``."""

    resolved = Path(path).expanduser()
    if not resolved.exists():
        raise FileNotFoundError(f"Messages file '{resolved}' does not exist")
    raw = resolved.read_text(encoding="utf-8")
    stripped = raw.strip()
    if not stripped:
        return []

    if stripped[0] in "[{":
        try:
            document = json.loads(stripped)
        except json.JSONDecodeError:
            document = None
        if isinstance(document, list):
            return _require_objects(document, resolved)
        if isinstance(document, Mapping) and isinstance(document.get("items"), list):
            return _require_objects(document["items"], resolved)

    messages: list[dict[str, Any]] = []
    for line_number, line in enumerate(raw.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            entry = json.loads(line)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"{resolved}:{line_number}: invalid JSON ({exc.msg})") from exc
        if not isinstance(entry, dict):
            raise ConfigError(f"{resolved}:{line_number}: expected a JSON object")
        messages.append(entry)
    return messages


def _require_objects(entries: list[Any], source: Path) -> list[dict[str, Any]]:
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ConfigError(f"{source}: entry {index} is not a JSON object")
    return list(entries)


def process_messages(
    messages: Iterable[Message],
    factories: Mapping[str, MissingIssueHandlerFactory],
    configs: Mapping[str, RuntimeConfig],
    tracker: IssueTracker,
    *,
    sanitizer: Sanitizer = sanitize_content,
    clock: Callable[[], datetime] | None = None,
) -> BatchSummary:
    """Handle ``messages`` sequentially, one handler per kind for this execution."""

    configs = resolve_handler_configs(configs, factories)
    handlers: dict[str, MissingIssueHandler] = {}
    summary = BatchSummary()

    for message in messages:
        handler_type = resolve_handler_type(str(message.get("type", "")))
        factory = factories.get(handler_type)
        if factory is None:
            error = f"Unsupported message type: {message.get('type')}"
            logger.warning(error)
            summary.results.append(ProcessResult.failure(error, ErrorCode.VALIDATION))
            continue

        handler = handlers.get(handler_type)
        if handler is None:
            handler = factory.create(
                configs.get(handler_type), tracker, sanitizer=sanitizer, clock=clock
            )
            handlers[handler_type] = handler

        summary.results.append(handler(message))

    logger.info(
        "Processed %s message(s): %s created, %s updated, %s failed",
        len(summary.results),
        summary.created,
        summary.updated,
        summary.failed,
    )
    return summary


__all__ = [
    "BatchSummary",
    "MESSAGE_TYPE_ALIASES",
    "load_messages",
    "process_messages",
    "resolve_handler_configs",
    "resolve_handler_type",
]
