"""Runtime configuration for missing-issue handlers."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Sequence

import yaml
from jsonschema import Draft7Validator

from .models import ConfigError

_DEFAULT_CONFIG_PATH = Path("config/missing_issues.yaml")

RUNTIME_CONFIG_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "title_prefix": {"type": ["string", "null"]},
        "labels": {
            "anyOf": [
                {"type": "null"},
                {"type": "string"},
                {"type": "array", "items": {"type": "string"}},
            ]
        },
        "max": {"anyOf": [{"type": "null"}, {"type": "integer", "minimum": 0}]},
        "dedupe_labels": {"type": "boolean"},
    },
}

_VALIDATOR = Draft7Validator(RUNTIME_CONFIG_SCHEMA)


@dataclass(frozen=True)
class RuntimeConfig:
    """Per-execution tunables for a handler.

    ``max`` of ``None`` or ``0`` falls back to a single processed message.
    """

    title_prefix: str | None = None
    labels: str | Sequence[str] | None = None
    max: int | None = None
    dedupe_labels: bool = False

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> "RuntimeConfig":
        if payload is None:
            return cls()
        if not isinstance(payload, Mapping):
            raise ConfigError("Handler configuration must be a mapping")

        errors = sorted(_VALIDATOR.iter_errors(dict(payload)), key=lambda err: list(err.path))
        if errors:
            details = "; ".join(_describe(error) for error in errors)
            raise ConfigError(f"Invalid handler configuration: {details}")

        labels = payload.get("labels")
        if isinstance(labels, list):
            labels = tuple(labels)
        return cls(
            title_prefix=payload.get("title_prefix"),
            labels=labels,
            max=payload.get("max"),
            dedupe_labels=bool(payload.get("dedupe_labels", False)),
        )


def _describe(error: Any) -> str:
    location = ".".join(str(part) for part in error.path)
    return f"{location}: {error.message}" if location else error.message


def load_handler_configs(config_path: Path | None) -> dict[str, RuntimeConfig]:
    """Load per-handler runtime configuration keyed by handler type."""

    if config_path is not None:
        resolved = Path(config_path).expanduser()
        if not resolved.exists():
            raise FileNotFoundError(f"Handler config '{resolved}' does not exist")
    else:
        resolved = _DEFAULT_CONFIG_PATH
        if not resolved.exists():
            return {}

    try:
        data = yaml.safe_load(resolved.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Handler config '{resolved}' is not valid YAML: {exc}") from exc
    if not isinstance(data, Mapping):
        raise ConfigError("Handler config must be a mapping of handler type to settings")

    configs: dict[str, RuntimeConfig] = {}
    for handler_type, section in data.items():
        try:
            configs[str(handler_type)] = RuntimeConfig.from_mapping(section or {})
        except ConfigError as exc:
            raise ConfigError(f"{handler_type}: {exc}") from exc
    return configs


__all__ = [
    "RUNTIME_CONFIG_SCHEMA",
    "RuntimeConfig",
    "load_handler_configs",
]
