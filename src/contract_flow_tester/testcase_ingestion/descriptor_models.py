"""Test-case descriptor entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any


class StoreKind(str, Enum):
    """Downstream store families a verification group can target."""

    RELATIONAL = "relational"
    DOCUMENT = "document"


@dataclass(frozen=True)
class FieldAssertion:
    """Expected value template for one field of the first returned row or document."""

    field: str
    value: str


@dataclass(frozen=True)
class VerificationGroup:  # pylint: disable=too-many-instance-attributes
    """One named check against one downstream store."""

    name: str
    store: StoreKind
    assertions: tuple[FieldAssertion, ...]
    query: str | None = None
    collection: str | None = None
    filter: Any = None
    expected_count: int | None = None
    timeout_ms: int | None = None


@dataclass(frozen=True)
class ReplyExpectation:
    """Where the reply arrives and what it should look like."""

    destination: str
    timeout_ms: int | None
    response_template_path: Path
    response_template: str


@dataclass(frozen=True)
class TestCaseDescriptor:  # pylint: disable=too-many-instance-attributes
    """Normalized representation of one declarative test case."""

    __test__ = False

    name: str
    source_path: Path | None
    request_template_path: Path
    request_template: str
    static_parameters: Mapping[str, str]
    input_channel: str
    reply: ReplyExpectation
    store_verifications: tuple[VerificationGroup, ...]
