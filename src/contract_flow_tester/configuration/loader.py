"""Run configuration loader service."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from .runtime_settings import (
    DEFAULT_REPLY_TIMEOUT_MS,
    DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
    DEFAULT_VERIFICATION_TIMEOUT_MS,
    Configuration,
    DocumentStoreSettings,
    ExecutionSettings,
    KafkaSettings,
    PollPolicy,
    RelationalStoreSettings,
)


class ConfigurationError(Exception):
    """Raised when the run configuration is invalid."""


def load_configuration(config_path: Path | str) -> Configuration:
    """Load the YAML run configuration and validate every section."""
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}

    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")

    kafka_section = parsed.get("kafka")
    relational_section = parsed.get("relational_store")
    document_section = parsed.get("document_store")
    return Configuration(
        path=path,
        kafka=_parse_kafka_section(kafka_section) if kafka_section is not None else None,
        relational_store=(
            _parse_relational_store_section(relational_section)
            if relational_section is not None
            else None
        ),
        document_store=(
            _parse_document_store_section(document_section)
            if document_section is not None
            else None
        ),
        execution=_parse_execution_section(parsed.get("execution")),
    )


def _parse_kafka_section(value: Any) -> KafkaSettings:
    section = _require_mapping(value, "kafka")
    bootstrap_servers = _normalize_bootstrap_servers(section.get("bootstrap_servers"))
    group_id = _optional_string(section.get("group_id"), "kafka.group_id")
    security = section.get("security") or {}
    if not isinstance(security, Mapping):
        raise ConfigurationError("kafka.security must be a mapping.")
    poll_interval_ms = _require_positive_int(
        section.get("poll_interval_ms", 500), "kafka.poll_interval_ms"
    )
    publish_timeout_seconds = _require_positive_int(
        section.get("publish_timeout_seconds", 10), "kafka.publish_timeout_seconds"
    )
    return KafkaSettings(
        bootstrap_servers=bootstrap_servers,
        group_id=group_id,
        security=dict(security),
        poll_interval_ms=poll_interval_ms,
        publish_timeout_seconds=publish_timeout_seconds,
    )


def _parse_relational_store_section(value: Any) -> RelationalStoreSettings:
    section = _require_mapping(value, "relational_store")
    return RelationalStoreSettings(
        url=_require_non_empty_string(section.get("url"), "relational_store.url")
    )


def _parse_document_store_section(value: Any) -> DocumentStoreSettings:
    section = _require_mapping(value, "document_store")
    return DocumentStoreSettings(
        uri=_require_non_empty_string(section.get("uri"), "document_store.uri"),
        database=_require_non_empty_string(section.get("database"), "document_store.database"),
        server_selection_timeout_ms=_require_positive_int(
            section.get("server_selection_timeout_ms", DEFAULT_SERVER_SELECTION_TIMEOUT_MS),
            "document_store.server_selection_timeout_ms",
        ),
    )


def _parse_execution_section(value: Any) -> ExecutionSettings:
    if value is None:
        return ExecutionSettings()
    section = _require_mapping(value, "execution")
    initial_interval_ms = _require_positive_int(
        section.get("poll_initial_interval_ms", 100), "execution.poll_initial_interval_ms"
    )
    max_interval_ms = _require_positive_int(
        section.get("poll_max_interval_ms", 1_000), "execution.poll_max_interval_ms"
    )
    if max_interval_ms < initial_interval_ms:
        raise ConfigurationError(
            "execution.poll_max_interval_ms must not be lower than "
            "execution.poll_initial_interval_ms."
        )
    multiplier = section.get("poll_backoff_multiplier", 2.0)
    if isinstance(multiplier, bool) or not isinstance(multiplier, int | float) or multiplier < 1:
        raise ConfigurationError("execution.poll_backoff_multiplier must be a number >= 1.")
    strict_placeholders = section.get("strict_placeholders", False)
    if not isinstance(strict_placeholders, bool):
        raise ConfigurationError("execution.strict_placeholders must be a boolean.")
    return ExecutionSettings(
        reply_timeout_ms=_require_positive_int(
            section.get("reply_timeout_ms", DEFAULT_REPLY_TIMEOUT_MS),
            "execution.reply_timeout_ms",
        ),
        verification_timeout_ms=_require_positive_int(
            section.get("verification_timeout_ms", DEFAULT_VERIFICATION_TIMEOUT_MS),
            "execution.verification_timeout_ms",
        ),
        poll_policy=PollPolicy(
            initial_interval_ms=initial_interval_ms,
            max_interval_ms=max_interval_ms,
            multiplier=float(multiplier),
        ),
        strict_placeholders=strict_placeholders,
    )


def _normalize_bootstrap_servers(value: Any) -> tuple[str, ...]:
    if value is None:
        raise ConfigurationError("kafka.bootstrap_servers is required.")
    servers: list[str] = []
    if isinstance(value, str):
        servers = [item.strip() for item in value.split(",") if item.strip()]
    elif isinstance(value, Sequence):
        for item in value:
            if not isinstance(item, str):
                raise ConfigurationError("kafka.bootstrap_servers entries must be strings.")
            stripped = item.strip()
            if stripped:
                servers.append(stripped)
    else:
        raise ConfigurationError("kafka.bootstrap_servers must be a string or list of strings.")
    if not servers:
        raise ConfigurationError("kafka.bootstrap_servers must contain at least one server.")
    return tuple(servers)


def _require_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' must be a mapping.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None


def _require_positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if value <= 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return value
