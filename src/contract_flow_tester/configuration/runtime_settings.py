"""Configuration domain entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_REPLY_TIMEOUT_MS = 30_000
DEFAULT_VERIFICATION_TIMEOUT_MS = 10_000
DEFAULT_SERVER_SELECTION_TIMEOUT_MS = 5_000


@dataclass(frozen=True)
class PollPolicy:
    """Back-off between evaluations of a polled check."""

    initial_interval_ms: int = 100
    max_interval_ms: int = 1_000
    multiplier: float = 2.0


@dataclass(frozen=True)
class ExecutionSettings:
    """Timeouts and rendering policy applied to every test case."""

    reply_timeout_ms: int = DEFAULT_REPLY_TIMEOUT_MS
    verification_timeout_ms: int = DEFAULT_VERIFICATION_TIMEOUT_MS
    poll_policy: PollPolicy = field(default_factory=PollPolicy)
    strict_placeholders: bool = False


@dataclass(frozen=True)
class KafkaSettings:
    """Kafka producer and reply consumer configuration."""

    bootstrap_servers: tuple[str, ...]
    group_id: str | None
    security: Mapping[str, object]
    poll_interval_ms: int
    publish_timeout_seconds: int


@dataclass(frozen=True)
class RelationalStoreSettings:
    """Connection settings for the relational store adapter."""

    url: str


@dataclass(frozen=True)
class DocumentStoreSettings:
    """Connection settings for the document store adapter."""

    uri: str
    database: str
    server_selection_timeout_ms: int = DEFAULT_SERVER_SELECTION_TIMEOUT_MS


@dataclass(frozen=True)
class Configuration:
    """Top-level configuration aggregate."""

    path: Path
    kafka: KafkaSettings | None
    relational_store: RelationalStoreSettings | None
    document_store: DocumentStoreSettings | None
    execution: ExecutionSettings
