"""Predicate evaluating one verification group against its store."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from contract_flow_tester.failures import StoreTransportError
from contract_flow_tester.template_rendering import (
    Payload,
    render_document,
    render_json_value,
    render_template,
)
from contract_flow_tester.testcase_ingestion.descriptor_models import (
    StoreKind,
    VerificationGroup,
)

from .store_adapters import DocumentStore, RelationalStore

logger = logging.getLogger(__name__)


class StoreGroupCheck:
    """Callable check for one verification group; False means "not converged yet".

    Each call renders the group's query or filter, runs it on the matching store
    and compares every asserted field of the first returned record as text. The
    reason for the latest False result is kept in `last_observation`.
    """

    def __init__(
        self,
        group: VerificationGroup,
        payload: Payload,
        *,
        relational_store: RelationalStore | None = None,
        document_store: DocumentStore | None = None,
        strict_placeholders: bool = False,
    ) -> None:
        self._group = group
        self._payload = payload
        self._relational_store = relational_store
        self._document_store = document_store
        self._strict = strict_placeholders
        self.last_observation: str | None = None

    def __call__(self) -> bool:
        records = self._fetch_records()
        expected_count = self._group.expected_count
        if expected_count is not None and len(records) != expected_count:
            return self._not_yet(f"expected {expected_count} record(s), found {len(records)}")
        if not self._group.assertions:
            if expected_count is None and not records:
                return self._not_yet("no records returned")
            self.last_observation = None
            return True
        if not records:
            return self._not_yet("no records returned")

        first_record = records[0]
        for assertion in self._group.assertions:
            expected_value = render_template(
                assertion.value,
                self._payload,
                strict=self._strict,
                source=f"assertion '{assertion.field}' of group '{self._group.name}'",
            )
            if assertion.field not in first_record:
                return self._not_yet(f"field {assertion.field} missing from first record")
            actual_value = stringify_field_value(first_record[assertion.field])
            if actual_value != expected_value:
                return self._not_yet(
                    f"field {assertion.field} expected '{expected_value}', "
                    f"actual '{actual_value}'"
                )
        self.last_observation = None
        return True

    def _fetch_records(self) -> Sequence[Mapping[str, Any]]:
        if self._group.store is StoreKind.RELATIONAL:
            return self._query_relational()
        return self._find_documents()

    def _query_relational(self) -> Sequence[Mapping[str, Any]]:
        if self._relational_store is None:
            raise StoreTransportError(
                f"Verification group '{self._group.name}' needs a relational store, "
                "but none is configured."
            )
        query_text = render_template(
            self._group.query or "",
            self._payload,
            strict=self._strict,
            source=f"query of group '{self._group.name}'",
        )
        return self._relational_store.query(query_text)

    def _find_documents(self) -> Sequence[Mapping[str, Any]]:
        if self._document_store is None:
            raise StoreTransportError(
                f"Verification group '{self._group.name}' needs a document store, "
                "but none is configured."
            )
        source = f"filter of group '{self._group.name}'"
        raw_filter = self._group.filter
        if isinstance(raw_filter, str):
            rendered_filter = render_document(
                raw_filter, self._payload, strict=self._strict, source=source
            )
        else:
            rendered_filter = render_json_value(
                raw_filter, self._payload, strict=self._strict, source=source
            )
        return self._document_store.find(self._group.collection or "", rendered_filter)

    def _not_yet(self, observation: str) -> bool:
        logger.debug("group '%s' not converged: %s", self._group.name, observation)
        self.last_observation = observation
        return False


def stringify_field_value(value: Any) -> str:
    """Return the text form used to compare a stored field with its expected value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping | list | tuple):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)
    return str(value)
