"""Test-case ingestion exports."""

from .descriptor_models import (
    FieldAssertion,
    ReplyExpectation,
    StoreKind,
    TestCaseDescriptor,
    VerificationGroup,
)
from .descriptor_reader import (
    DESCRIPTOR_SUFFIX,
    DescriptorValidationError,
    discover_descriptors,
    parse_descriptor,
    read_descriptor,
)

__all__ = [
    "DESCRIPTOR_SUFFIX",
    "DescriptorValidationError",
    "FieldAssertion",
    "ReplyExpectation",
    "StoreKind",
    "TestCaseDescriptor",
    "VerificationGroup",
    "discover_descriptors",
    "parse_descriptor",
    "read_descriptor",
]
