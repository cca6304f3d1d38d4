from __future__ import annotations

from pathlib import Path

import pytest

from src.missing_issues.config import RuntimeConfig, load_handler_configs
from src.missing_issues.models import ConfigError


def test_from_mapping_defaults():
    assert RuntimeConfig.from_mapping(None) == RuntimeConfig()
    assert RuntimeConfig.from_mapping({}) == RuntimeConfig()


def test_from_mapping_values():
    config = RuntimeConfig.from_mapping(
        {"title_prefix": "[tools]", "labels": ["a", "b"], "max": 3, "dedupe_labels": True}
    )
    assert config == RuntimeConfig(title_prefix="[tools]", labels=("a", "b"), max=3, dedupe_labels=True)


def test_unknown_keys_ignored():
    assert RuntimeConfig.from_mapping({"github-token": "x", "max": 2}).max == 2


@pytest.mark.parametrize(
    "payload",
    [
        {"max": -1},
        {"max": "five"},
        {"max": True},
        {"labels": 7},
        {"labels": ["ok", 3]},
        {"title_prefix": 12},
    ],
)
def test_invalid_values_rejected(payload):
    with pytest.raises(ConfigError, match="Invalid handler configuration"):
        RuntimeConfig.from_mapping(payload)


def test_non_mapping_rejected():
    with pytest.raises(ConfigError):
        RuntimeConfig.from_mapping(["max", 1])  # type: ignore[arg-type]


def test_load_handler_configs(tmp_path: Path):
    path = tmp_path / "missing_issues.yaml"
    path.write_text(
        "create_missing_tool_issue:\n"
        "  title_prefix: '[missing tool]'\n"
        "  labels: 'automation, missing-tool'\n"
        "  max: 5\n"
        "create_missing_data_issue:\n"
        "  labels: [automation, missing-data]\n"
        "empty_section:\n",
        encoding="utf-8",
    )

    configs = load_handler_configs(path)

    assert configs["create_missing_tool_issue"].max == 5
    assert configs["create_missing_tool_issue"].labels == "automation, missing-tool"
    assert configs["create_missing_data_issue"].labels == ("automation", "missing-data")
    assert configs["empty_section"] == RuntimeConfig()


def test_load_handler_configs_missing_explicit_path(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_handler_configs(tmp_path / "absent.yaml")


def test_load_handler_configs_without_default(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    assert load_handler_configs(None) == {}


def test_load_handler_configs_reads_default(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "missing_issues.yaml").write_text(
        "create_missing_tool_issue:\n  max: 2\n", encoding="utf-8"
    )
    assert load_handler_configs(None)["create_missing_tool_issue"].max == 2


def test_load_handler_configs_reports_section(tmp_path: Path):
    path = tmp_path / "bad.yaml"
    path.write_text("create_missing_tool_issue:\n  max: -3\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="create_missing_tool_issue"):
        load_handler_configs(path)


def test_load_handler_configs_requires_mapping(tmp_path: Path):
    path = tmp_path / "list.yaml"
    path.write_text("- one\n- two\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="must be a mapping"):
        load_handler_configs(path)
