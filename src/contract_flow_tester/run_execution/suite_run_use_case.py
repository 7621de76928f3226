"""Suite run use-case service."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from contextlib import ExitStack
from datetime import UTC, datetime
from pathlib import Path

from contract_flow_tester.configuration import (
    Configuration,
    ConfigurationError,
    DocumentStoreSettings,
    KafkaSettings,
    RelationalStoreSettings,
    load_configuration,
)
from contract_flow_tester.failures import MalformedDocumentError, TransportError
from contract_flow_tester.messaging import KafkaMessageChannel, MessageChannel
from contract_flow_tester.results_writing import RunMetadata, write_results_workbook
from contract_flow_tester.store_verification import (
    DocumentStore,
    PyMongoDocumentStore,
    RelationalStore,
    SqlAlchemyRelationalStore,
)
from contract_flow_tester.template_rendering import DynamicValueGenerator
from contract_flow_tester.testcase_ingestion import (
    DescriptorValidationError,
    StoreKind,
    TestCaseDescriptor,
    discover_descriptors,
    read_descriptor,
)

from .case_driver import TestCaseDriver, prepare_case
from .run_contracts import (
    CaseOutcome,
    CaseStatus,
    FailurePhase,
    RunArtifacts,
    RunRequest,
    SuiteOutcome,
)

logger = logging.getLogger(__name__)

ChannelFactory = Callable[[KafkaSettings], MessageChannel]
RelationalStoreFactory = Callable[[RelationalStoreSettings], RelationalStore]
DocumentStoreFactory = Callable[[DocumentStoreSettings], DocumentStore]


class RunExecutionError(Exception):
    """Raised when a suite run cannot be completed."""


def execute_contract_suite_run(
    request: RunRequest,
    *,
    channel_factory: ChannelFactory | None = None,
    relational_store_factory: RelationalStoreFactory | None = None,
    document_store_factory: DocumentStoreFactory | None = None,
    value_generator: DynamicValueGenerator | None = None,
) -> SuiteOutcome:
    """Execute every requested test case, write the results workbook and return the outcome.

    Adapters built from the configuration are closed after the last test case.
    """
    artifacts = _load_run_artifacts(request)
    resolved_value_generator = value_generator or DynamicValueGenerator()
    run_start = datetime.now(UTC)
    if request.dry_run:
        outcomes = _execute_dry_run(artifacts, resolved_value_generator)
    else:
        outcomes = _execute_live_run(
            artifacts,
            channel_factory=channel_factory or KafkaMessageChannel,
            relational_store_factory=(
                relational_store_factory or SqlAlchemyRelationalStore.from_settings
            ),
            document_store_factory=document_store_factory or PyMongoDocumentStore.from_settings,
            value_generator=resolved_value_generator,
        )

    output_path = _resolve_output_path(request.config_path, request.output_dir)
    written_path = write_results_workbook(
        output_path,
        outcomes,
        RunMetadata(
            run_start=run_start,
            config_path=Path(request.config_path).resolve(),
            output_path=output_path.resolve(),
            dry_run=request.dry_run,
        ),
    )
    return SuiteOutcome(output_path=written_path, outcomes=outcomes, dry_run=request.dry_run)


def _resolve_output_path(config_path: str, output_dir: str | None) -> Path:
    destination = Path(output_dir) if output_dir else Path(config_path).resolve().parent
    timestamp = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    return destination / f"contract-results-{timestamp}.xlsx"


def _load_run_artifacts(request: RunRequest) -> RunArtifacts:
    try:
        configuration = load_configuration(request.config_path)
        descriptors = tuple(
            read_descriptor(path) for path in discover_descriptors(request.case_paths)
        )
    except (ConfigurationError, DescriptorValidationError, OSError) as exc:
        raise RunExecutionError(str(exc)) from exc
    names = [descriptor.name for descriptor in descriptors]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise RunExecutionError(f"Duplicate test case names: {', '.join(duplicates)}")
    return RunArtifacts(configuration=configuration, descriptors=descriptors)


def _execute_dry_run(
    artifacts: RunArtifacts, value_generator: DynamicValueGenerator
) -> tuple[CaseOutcome, ...]:
    outcomes: list[CaseOutcome] = []
    for descriptor in artifacts.descriptors:
        try:
            prepared = prepare_case(
                descriptor,
                settings=artifacts.configuration.execution,
                value_generator=value_generator,
            )
        except MalformedDocumentError as exc:
            outcomes.append(
                CaseOutcome(
                    name=descriptor.name,
                    status=CaseStatus.FAILED,
                    duration_seconds=0.0,
                    payload={},
                    phase=FailurePhase.MALFORMED_DOCUMENT,
                    reason=str(exc),
                )
            )
            continue
        outcomes.append(
            CaseOutcome(
                name=descriptor.name,
                status=CaseStatus.SKIPPED,
                duration_seconds=0.0,
                payload=prepared.payload,
            )
        )
    return tuple(outcomes)


def _execute_live_run(
    artifacts: RunArtifacts,
    *,
    channel_factory: ChannelFactory,
    relational_store_factory: RelationalStoreFactory,
    document_store_factory: DocumentStoreFactory,
    value_generator: DynamicValueGenerator,
) -> tuple[CaseOutcome, ...]:
    configuration = artifacts.configuration
    if configuration.kafka is None:
        raise RunExecutionError("Configuration section 'kafka' is required for live runs.")
    _ensure_stores_available(artifacts.descriptors, configuration)

    with ExitStack() as resources:
        try:
            channel = channel_factory(configuration.kafka)
            resources.callback(channel.close)
            relational_store = None
            if configuration.relational_store is not None:
                relational_store = relational_store_factory(configuration.relational_store)
                resources.callback(relational_store.close)
            document_store = None
            if configuration.document_store is not None:
                document_store = document_store_factory(configuration.document_store)
                resources.callback(document_store.close)
        except TransportError as exc:
            raise RunExecutionError(str(exc)) from exc

        driver = TestCaseDriver(
            channel,
            relational_store=relational_store,
            document_store=document_store,
            settings=configuration.execution,
            value_generator=value_generator,
        )
        outcomes = tuple(driver.run(descriptor) for descriptor in artifacts.descriptors)
    logger.info(
        "suite finished: %d passed, %d failed",
        sum(1 for outcome in outcomes if outcome.passed),
        sum(1 for outcome in outcomes if not outcome.passed),
    )
    return outcomes


def _ensure_stores_available(
    descriptors: Sequence[TestCaseDescriptor],
    configuration: Configuration,
) -> None:
    needed = {group.store for descriptor in descriptors for group in descriptor.store_verifications}
    if StoreKind.RELATIONAL in needed and configuration.relational_store is None:
        raise RunExecutionError(
            "Test cases verify relational rows, but 'relational_store' is not configured."
        )
    if StoreKind.DOCUMENT in needed and configuration.document_store is None:
        raise RunExecutionError(
            "Test cases verify documents, but 'document_store' is not configured."
        )
