"""Tests for batch processing of agent messages."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from src.missing_issues.config import RuntimeConfig
from src.missing_issues.handlers import default_factories
from src.missing_issues.models import ConfigError
from src.missing_issues.runner import (
    load_messages,
    process_messages,
    resolve_handler_configs,
    resolve_handler_type,
)
from src.missing_issues.tracker import InMemoryIssueTracker


def _tool_message(workflow: str, tool: str) -> dict:
    return {
        "type": "missing_tool",
        "workflow_name": workflow,
        "run_url": "https://github.com/o/r/actions/runs/1",
        "missing_tools": [{"tool": tool, "reason": "not available", "timestamp": "2026-01-01T00:00:00Z"}],
    }


def _data_message(workflow: str) -> dict:
    return {
        "type": "create_missing_data_issue",
        "workflow_name": workflow,
        "missing_data": [{"data_type": "metrics", "reason": "empty bucket", "timestamp": "2026-01-01T00:00:00Z"}],
    }


def test_resolve_handler_type_aliases():
    assert resolve_handler_type("missing_tool") == "create_missing_tool_issue"
    assert resolve_handler_type("missing_data") == "create_missing_data_issue"
    assert resolve_handler_type("create_missing_data_issue") == "create_missing_data_issue"


def test_batch_creates_then_updates(clock):
    tracker = InMemoryIssueTracker("o/r")
    configs = {"create_missing_tool_issue": RuntimeConfig(max=5, labels="automation")}

    summary = process_messages(
        [_tool_message("Nightly", "docker"), _tool_message("Nightly", "jq"), _data_message("Nightly")],
        default_factories(),
        configs,
        tracker,
        clock=clock,
    )

    assert [result.action for result in summary.results] == ["created", "updated", "created"]
    assert (summary.created, summary.updated, summary.failed) == (2, 1, 0)
    assert summary.success

    tool_issue, data_issue = tracker.issues
    assert tool_issue.title == "[missing tool] Nightly"
    assert tool_issue.labels == ["automation"]
    assert "`jq`" in tool_issue.comments[0]
    assert data_issue.title == "[missing data] Nightly"


def test_throttle_is_per_kind(clock):
    tracker = InMemoryIssueTracker()
    summary = process_messages(
        [_tool_message("A", "x"), _tool_message("B", "y"), _data_message("A")],
        default_factories(),
        {},
        tracker,
        clock=clock,
    )

    assert summary.results[0].success
    assert summary.results[1].error == "Max count of 1 reached"
    assert summary.results[2].success
    assert summary.failed == 1
    assert not summary.success


def test_config_keyed_by_short_type_is_applied(clock):
    tracker = InMemoryIssueTracker()
    summary = process_messages(
        [_tool_message("W", "docker")],
        default_factories(),
        {"missing_tool": RuntimeConfig(title_prefix="[custom]", labels="tools")},
        tracker,
        clock=clock,
    )

    assert summary.results[0].action == "created"
    assert tracker.issues[0].title == "[custom] W"
    assert tracker.issues[0].labels == ["tools"]


def test_canonical_config_wins_over_short_type(caplog):
    configs = {
        "create_missing_tool_issue": RuntimeConfig(title_prefix="[canonical]"),
        "missing_tool": RuntimeConfig(title_prefix="[short]"),
    }
    with caplog.at_level(logging.WARNING):
        resolved = resolve_handler_configs(configs, default_factories())

    assert resolved == {"create_missing_tool_issue": RuntimeConfig(title_prefix="[canonical]")}
    assert "Ignoring configuration for missing_tool" in caplog.text


def test_unknown_config_section_is_reported(caplog):
    with caplog.at_level(logging.WARNING):
        resolved = resolve_handler_configs(
            {"create_missing_tools_issue": RuntimeConfig(max=3)}, default_factories()
        )

    assert resolved == {}
    assert "unknown handler type: create_missing_tools_issue" in caplog.text


def test_unknown_type_fails_without_tracker_calls():
    tracker = InMemoryIssueTracker()
    summary = process_messages([{"type": "noop", "workflow_name": "W"}], default_factories(), {}, tracker)

    assert summary.results[0].to_dict() == {
        "success": False,
        "error": "Unsupported message type: noop",
        "error_code": "ERR_VALIDATION",
    }
    assert tracker.issues == []


def test_summary_to_dict(clock):
    summary = process_messages(
        [_tool_message("A", "x")], default_factories(), {}, InMemoryIssueTracker("o/r"), clock=clock
    )
    assert summary.to_dict() == {
        "created": 1,
        "updated": 0,
        "failed": 0,
        "results": [
            {
                "success": True,
                "issue_number": 1,
                "issue_url": "https://github.com/o/r/issues/1",
                "action": "created",
            }
        ],
    }


def test_load_messages_ndjson(tmp_path: Path):
    path = tmp_path / "agent_output.jsonl"
    path.write_text(
        json.dumps(_tool_message("A", "x")) + "\n\n" + json.dumps(_data_message("B")) + "\n",
        encoding="utf-8",
    )
    messages = load_messages(path)
    assert [message["workflow_name"] for message in messages] == ["A", "B"]


def test_load_messages_json_document(tmp_path: Path):
    path = tmp_path / "agent_output.json"
    path.write_text(json.dumps({"items": [_tool_message("A", "x")]}), encoding="utf-8")
    assert load_messages(path)[0]["type"] == "missing_tool"

    path.write_text(json.dumps([_data_message("B")]), encoding="utf-8")
    assert load_messages(path)[0]["workflow_name"] == "B"


def test_load_messages_single_object_line(tmp_path: Path):
    path = tmp_path / "one.jsonl"
    path.write_text(json.dumps(_tool_message("A", "x")), encoding="utf-8")
    assert len(load_messages(path)) == 1


def test_load_messages_reports_bad_line(tmp_path: Path):
    path = tmp_path / "bad.jsonl"
    path.write_text(json.dumps(_tool_message("A", "x")) + "\n{not json\n", encoding="utf-8")
    with pytest.raises(ConfigError, match=":2: invalid JSON"):
        load_messages(path)


def test_load_messages_rejects_non_objects(tmp_path: Path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ConfigError, match="not a JSON object"):
        load_messages(path)


def test_load_messages_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_messages(tmp_path / "absent.jsonl")


def test_load_messages_empty_file(tmp_path: Path):
    path = tmp_path / "empty.jsonl"
    path.write_text("\n", encoding="utf-8")
    assert load_messages(path) == []
