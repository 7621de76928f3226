"""Tests for the suite run use-case service."""

from __future__ import annotations

import json
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from contract_flow_tester.configuration import (
    DocumentStoreSettings,
    KafkaSettings,
    RelationalStoreSettings,
)
from contract_flow_tester.failures import ChannelTransportError, ReplyTimeoutError
from contract_flow_tester.run_execution import CaseStatus, FailurePhase, RunRequest
from contract_flow_tester.run_execution.suite_run_use_case import (
    RunExecutionError,
    execute_contract_suite_run,
)
from openpyxl import load_workbook


class EchoChannel:
    def __init__(self, settings: KafkaSettings) -> None:
        self.settings = settings
        self.closed = False
        self._pending: list[Any] = []

    def publish(self, destination: str, body: Any) -> None:
        self._pending.append({"tx": body["tx"], "status": "OK"})

    def subscribe(
        self,
        destination: str,
        timeout_ms: int,
        *,
        on_subscribed: Callable[[], None] | None = None,
    ) -> Any:
        if on_subscribed is not None:
            on_subscribed()
        deadline = time.monotonic() + timeout_ms / 1000.0
        while time.monotonic() < deadline:
            if self._pending:
                return self._pending.pop(0)
            time.sleep(0.005)
        raise ReplyTimeoutError(f"No reply on {destination}")

    def close(self) -> None:
        self.closed = True


class RecordingDocumentStore:
    def __init__(self, settings: DocumentStoreSettings) -> None:
        self.settings = settings
        self.closed = False
        self.calls: list[tuple[str, Any]] = []

    def find(self, collection: str, query_filter: Any) -> list[dict[str, Any]]:
        self.calls.append((collection, query_filter))
        return [{"reqId": query_filter["reqId"], "source": "InboundAccountingService"}]

    def close(self) -> None:
        self.closed = True


class RecordingStore:
    def __init__(self, settings: RelationalStoreSettings) -> None:
        self.settings = settings
        self.closed = False

    def query(self, query_text: str) -> list[dict[str, Any]]:
        return [{"status": "DONE"}]

    def close(self) -> None:
        self.closed = True


def _write_config(
    tmp_path: Path, *, kafka: bool = True, relational: bool = False, document: bool = False
) -> Path:
    lines = ["execution:", "  reply_timeout_ms: 500", "  verification_timeout_ms: 200"]
    if kafka:
        lines += ["kafka:", "  bootstrap_servers: localhost:9092"]
    if relational:
        lines += ["relational_store:", "  url: sqlite://"]
    if document:
        lines += ["document_store:", "  uri: mongodb://localhost:27017", "  database: ledger"]
    path = tmp_path / "config.yaml"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def _write_case(
    directory: Path,
    name: str,
    *,
    expected_status: str = "OK",
    groups: list[dict[str, Any]] | None = None,
    request_template: str = '{"tx": "${txId}"}',
    legacy_sections: dict[str, Any] | None = None,
) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    slug = name.replace(" ", "-")
    (directory / f"{slug}.request.json").write_text(request_template, encoding="utf-8")
    (directory / f"{slug}.response.json").write_text(
        json.dumps({"tx": "${txId}", "status": expected_status}), encoding="utf-8"
    )
    descriptor = {
        "metadata": {"name": name},
        "templateData": {"templatePath": f"{slug}.request.json"},
        "messaging": {
            "inputChannel": "requests",
            "reply": {"destination": "replies", "responseTemplatePath": f"{slug}.response.json"},
        },
        "storeVerifications": groups or [],
    }
    descriptor.update(legacy_sections or {})
    path = directory / f"{slug}.case.json"
    path.write_text(json.dumps(descriptor), encoding="utf-8")
    return path


def test_live_run_executes_cases_and_writes_workbook(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path, relational=True)
    cases_dir = tmp_path / "cases"
    _write_case(cases_dir, "a passes")
    _write_case(cases_dir, "b fails", expected_status="REJECTED")
    _write_case(
        cases_dir,
        "c store",
        groups=[
            {
                "name": "row",
                "store": "relational",
                "query": "SELECT status FROM t WHERE tx = '${txId}'",
                "assertions": [{"field": "status", "value": "DONE"}],
            }
        ],
    )
    channels: list[EchoChannel] = []
    stores: list[RecordingStore] = []

    def channel_factory(settings: KafkaSettings) -> EchoChannel:
        channels.append(EchoChannel(settings))
        return channels[-1]

    def store_factory(settings: RelationalStoreSettings) -> RecordingStore:
        stores.append(RecordingStore(settings))
        return stores[-1]

    outcome = execute_contract_suite_run(
        RunRequest(
            config_path=str(config_path),
            case_paths=(str(cases_dir),),
            output_dir=str(tmp_path / "out"),
        ),
        channel_factory=channel_factory,
        relational_store_factory=store_factory,
    )

    statuses = {case.name: case.status for case in outcome.outcomes}
    assert statuses == {
        "a passes": CaseStatus.PASSED,
        "b fails": CaseStatus.FAILED,
        "c store": CaseStatus.PASSED,
    }
    assert outcome.failed == 1
    assert channels[0].closed and stores[0].closed
    assert stores[0].settings.url == "sqlite://"
    assert outcome.output_path.parent == (tmp_path / "out").resolve()
    assert outcome.output_path.name.startswith("contract-results-")
    workbook = load_workbook(outcome.output_path)
    assert workbook["Results"].max_row == 4


def test_dry_run_renders_cases_without_adapters(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path, kafka=False)
    cases_dir = tmp_path / "cases"
    _write_case(cases_dir, "renders")
    _write_case(cases_dir, "broken", request_template='{"tx": ${txId}}')

    def unexpected_factory(_settings: Any) -> Any:
        raise AssertionError("adapters must not be created in dry-run mode")

    outcome = execute_contract_suite_run(
        RunRequest(
            config_path=str(config_path),
            case_paths=(str(cases_dir),),
            output_dir=None,
            dry_run=True,
        ),
        channel_factory=unexpected_factory,
        relational_store_factory=unexpected_factory,
    )

    by_name = {case.name: case for case in outcome.outcomes}
    assert by_name["renders"].status is CaseStatus.SKIPPED
    assert by_name["broken"].status is CaseStatus.FAILED
    assert by_name["broken"].phase is FailurePhase.MALFORMED_DOCUMENT
    assert outcome.dry_run is True
    assert outcome.output_path.parent == tmp_path.resolve()


def test_live_run_requires_kafka_section(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path, kafka=False)
    case_path = _write_case(tmp_path / "cases", "a")

    with pytest.raises(RunExecutionError, match="'kafka' is required"):
        execute_contract_suite_run(
            RunRequest(config_path=str(config_path), case_paths=(str(case_path),), output_dir=None)
        )


def test_live_run_requires_configured_store_for_relational_groups(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path)
    case_path = _write_case(
        tmp_path / "cases",
        "a",
        groups=[{"store": "relational", "query": "SELECT 1", "assertions": []}],
    )

    with pytest.raises(RunExecutionError, match="relational_store"):
        execute_contract_suite_run(
            RunRequest(config_path=str(config_path), case_paths=(str(case_path),), output_dir=None),
            channel_factory=EchoChannel,
        )


def test_live_run_builds_document_store_for_legacy_document_groups(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path, document=True)
    case_path = _write_case(
        tmp_path / "cases",
        "legacy documents",
        legacy_sections={
            "mongoVerification": [
                {
                    "collection": "payments",
                    "filter": {"reqId": "${txId}"},
                    "expectedCount": {"value": 1},
                    "verification": [{"field": "source", "value": "InboundAccountingService"}],
                }
            ]
        },
    )
    document_stores: list[RecordingDocumentStore] = []

    def document_store_factory(settings: DocumentStoreSettings) -> RecordingDocumentStore:
        document_stores.append(RecordingDocumentStore(settings))
        return document_stores[-1]

    outcome = execute_contract_suite_run(
        RunRequest(
            config_path=str(config_path),
            case_paths=(str(case_path),),
            output_dir=str(tmp_path / "out"),
        ),
        channel_factory=EchoChannel,
        document_store_factory=document_store_factory,
    )

    assert [case.status for case in outcome.outcomes] == [CaseStatus.PASSED]
    store = document_stores[0]
    assert store.settings.database == "ledger"
    assert store.calls[0][0] == "payments"
    assert store.closed


def test_live_run_requires_configured_store_for_document_groups(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path)
    case_path = _write_case(
        tmp_path / "cases",
        "a",
        groups=[{"store": "document", "collection": "payments", "assertions": []}],
    )

    with pytest.raises(RunExecutionError, match="document_store"):
        execute_contract_suite_run(
            RunRequest(config_path=str(config_path), case_paths=(str(case_path),), output_dir=None),
            channel_factory=EchoChannel,
        )


def test_channel_creation_failure_is_reported(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path)
    case_path = _write_case(tmp_path / "cases", "a")

    def failing_factory(_settings: KafkaSettings) -> Any:
        raise ChannelTransportError("Cannot create Kafka producer: bad config")

    with pytest.raises(RunExecutionError, match="bad config"):
        execute_contract_suite_run(
            RunRequest(config_path=str(config_path), case_paths=(str(case_path),), output_dir=None),
            channel_factory=failing_factory,
        )


def test_duplicate_case_names_are_rejected(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path)
    _write_case(tmp_path / "one", "same")
    _write_case(tmp_path / "two", "same")

    with pytest.raises(RunExecutionError, match="Duplicate test case names: same"):
        execute_contract_suite_run(
            RunRequest(
                config_path=str(config_path),
                case_paths=(str(tmp_path / "one"), str(tmp_path / "two")),
                output_dir=None,
            ),
            channel_factory=EchoChannel,
        )


def test_invalid_configuration_is_reported(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("kafka: {}\n", encoding="utf-8")
    case_path = _write_case(tmp_path / "cases", "a")

    with pytest.raises(RunExecutionError, match="bootstrap_servers"):
        execute_contract_suite_run(
            RunRequest(config_path=str(config_path), case_paths=(str(case_path),), output_dir=None)
        )
