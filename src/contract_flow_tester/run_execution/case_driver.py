"""Execution of one declarative test case."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from types import MappingProxyType

from contract_flow_tester.configuration.runtime_settings import ExecutionSettings
from contract_flow_tester.failures import (
    GroupVerificationTimeoutError,
    MalformedDocumentError,
    ReplyTimeoutError,
    TransportError,
    VerificationTimeoutError,
)
from contract_flow_tester.messaging import MessageChannel, exchange_request_reply
from contract_flow_tester.response_comparison import (
    FieldMismatch,
    ResponseMismatchError,
    assert_responses_match,
)
from contract_flow_tester.store_verification import (
    DocumentStore,
    RelationalStore,
    StoreGroupCheck,
    poll_until,
)
from contract_flow_tester.template_rendering import (
    DynamicValueGenerator,
    build_payload,
    render_document,
)
from contract_flow_tester.testcase_ingestion.descriptor_models import (
    TestCaseDescriptor,
    VerificationGroup,
)

from .run_contracts import CaseOutcome, CaseStatus, FailurePhase, PreparedCase

logger = logging.getLogger(__name__)


def prepare_case(
    descriptor: TestCaseDescriptor,
    *,
    settings: ExecutionSettings,
    value_generator: DynamicValueGenerator,
) -> PreparedCase:
    """Build the payload and render the request and expected-response documents."""
    payload = build_payload(descriptor.static_parameters, value_generator.generate())
    request_body = render_document(
        descriptor.request_template,
        payload,
        strict=settings.strict_placeholders,
        source=f"request template {descriptor.request_template_path.name}",
    )
    expected_response = render_document(
        descriptor.reply.response_template,
        payload,
        strict=settings.strict_placeholders,
        source=f"response template {descriptor.reply.response_template_path.name}",
    )
    return PreparedCase(
        payload=payload,
        request_body=request_body,
        expected_response=expected_response,
    )


class TestCaseDriver:
    """Runs test cases against borrowed channel and store adapters.

    The driver holds no per-case state, so one instance can run any number of
    test cases one after another.
    """

    __test__ = False

    def __init__(
        self,
        channel: MessageChannel,
        *,
        relational_store: RelationalStore | None = None,
        document_store: DocumentStore | None = None,
        settings: ExecutionSettings | None = None,
        value_generator: DynamicValueGenerator | None = None,
    ) -> None:
        self._channel = channel
        self._relational_store = relational_store
        self._document_store = document_store
        self._settings = settings or ExecutionSettings()
        self._value_generator = value_generator or DynamicValueGenerator()

    def run(self, descriptor: TestCaseDescriptor) -> CaseOutcome:
        """Execute one test case and return Pass or Fail with the failing phase."""
        started = time.monotonic()
        payload: Mapping[str, str] = MappingProxyType({})
        logger.info("test case '%s': started", descriptor.name)
        try:
            prepared = prepare_case(
                descriptor, settings=self._settings, value_generator=self._value_generator
            )
            payload = prepared.payload
            actual_reply = exchange_request_reply(
                self._channel,
                request_destination=descriptor.input_channel,
                request_body=prepared.request_body,
                reply_destination=descriptor.reply.destination,
                reply_timeout_ms=descriptor.reply.timeout_ms or self._settings.reply_timeout_ms,
            )
            assert_responses_match(actual_reply, prepared.expected_response)
            for group in descriptor.store_verifications:
                self._verify_group(group, payload)
        except ReplyTimeoutError as exc:
            return self._failed(descriptor, payload, started, FailurePhase.EXCHANGE_TIMEOUT, exc)
        except ResponseMismatchError as exc:
            return self._failed(
                descriptor,
                payload,
                started,
                FailurePhase.RESPONSE_MISMATCH,
                exc,
                mismatch=exc.comparison.first_mismatch,
            )
        except GroupVerificationTimeoutError as exc:
            return self._failed(
                descriptor,
                payload,
                started,
                FailurePhase.STORE_VERIFICATION_TIMEOUT,
                exc,
                group_name=exc.group_name,
            )
        except MalformedDocumentError as exc:
            return self._failed(descriptor, payload, started, FailurePhase.MALFORMED_DOCUMENT, exc)
        except TransportError as exc:
            return self._failed(descriptor, payload, started, FailurePhase.TRANSPORT, exc)

        logger.info("test case '%s': passed", descriptor.name)
        return CaseOutcome(
            name=descriptor.name,
            status=CaseStatus.PASSED,
            duration_seconds=time.monotonic() - started,
            payload=payload,
        )

    def _verify_group(self, group: VerificationGroup, payload: Mapping[str, str]) -> None:
        check = StoreGroupCheck(
            group,
            payload,
            relational_store=self._relational_store,
            document_store=self._document_store,
            strict_placeholders=self._settings.strict_placeholders,
        )
        timeout_ms = group.timeout_ms or self._settings.verification_timeout_ms
        logger.info("verifying group '%s' (timeout %d ms)", group.name, timeout_ms)
        try:
            poll_until(
                check,
                timeout_ms=timeout_ms,
                description=f"Store verification '{group.name}'",
                policy=self._settings.poll_policy,
            )
        except VerificationTimeoutError as exc:
            message = str(exc)
            if check.last_observation:
                message = f"{message} Last observation: {check.last_observation}."
            raise GroupVerificationTimeoutError(group.name, message) from exc

    @staticmethod
    def _failed(  # pylint: disable=too-many-arguments
        descriptor: TestCaseDescriptor,
        payload: Mapping[str, str],
        started: float,
        phase: FailurePhase,
        error: Exception,
        *,
        group_name: str | None = None,
        mismatch: FieldMismatch | None = None,
    ) -> CaseOutcome:
        logger.warning("test case '%s': failed in %s: %s", descriptor.name, phase.value, error)
        return CaseOutcome(
            name=descriptor.name,
            status=CaseStatus.FAILED,
            duration_seconds=time.monotonic() - started,
            payload=payload,
            phase=phase,
            reason=str(error),
            group_name=group_name,
            mismatch=mismatch,
        )
