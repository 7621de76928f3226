"""Test-case descriptor ingestion and validation service."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from .descriptor_models import (
    FieldAssertion,
    ReplyExpectation,
    StoreKind,
    TestCaseDescriptor,
    VerificationGroup,
)

DESCRIPTOR_SUFFIX = ".case.json"

# Legacy group keys and the store kind they imply.
_LEGACY_GROUP_KEYS: tuple[tuple[str, StoreKind], ...] = (
    ("databaseVerification", StoreKind.RELATIONAL),
    ("mongoVerification", StoreKind.DOCUMENT),
)


class DescriptorValidationError(Exception):
    """Raised when a test-case descriptor is invalid."""


def read_descriptor(descriptor_path: Path | str) -> TestCaseDescriptor:
    """Read a descriptor file, resolve its template paths and load the templates."""
    path = Path(descriptor_path)
    if not path.exists():
        raise DescriptorValidationError(f"Descriptor file not found: {path}")
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise DescriptorValidationError(f"Descriptor {path} is not valid JSON: {exc}") from exc
    return parse_descriptor(document, base_path=path.resolve().parent, source_path=path)


def discover_descriptors(paths: Sequence[Path | str]) -> tuple[Path, ...]:
    """Expand directories into their `*.case.json` files, keeping explicit files as given."""
    discovered: list[Path] = []
    for raw_path in paths:
        path = Path(raw_path)
        if path.is_dir():
            discovered.extend(sorted(path.rglob(f"*{DESCRIPTOR_SUFFIX}")))
        else:
            discovered.append(path)
    if not discovered:
        raise DescriptorValidationError("No test-case descriptors found.")
    return tuple(discovered)


def parse_descriptor(
    document: Any, *, base_path: Path, source_path: Path | None = None
) -> TestCaseDescriptor:
    """Validate a parsed descriptor document."""
    root = _require_mapping(document, "descriptor")
    name = _parse_name(root)
    template_data = _require_mapping(
        root.get("templateData", root.get("testTemplateData")), "templateData"
    )
    request_path = _resolve_path(
        base_path, _require_text(template_data.get("templatePath"), "templateData.templatePath")
    )
    static_parameters = _parse_static_parameters(template_data)

    messaging = _require_mapping(root.get("messaging"), "messaging")
    input_channel = _parse_input_channel(messaging)
    reply = _parse_reply(_require_mapping(messaging.get("reply"), "messaging.reply"), base_path)

    return TestCaseDescriptor(
        name=name,
        source_path=source_path,
        request_template_path=request_path,
        request_template=_read_template(request_path),
        static_parameters=static_parameters,
        input_channel=input_channel,
        reply=reply,
        store_verifications=_parse_store_verifications(root),
    )


def _parse_name(root: Mapping[str, Any]) -> str:
    metadata = root.get("metadata")
    if isinstance(metadata, Mapping):
        return _require_text(metadata.get("name"), "metadata.name")
    legacy_metadata = root.get("testMetadata")
    if isinstance(legacy_metadata, Mapping):
        return _require_text(legacy_metadata.get("testName"), "testMetadata.testName")
    raise DescriptorValidationError("Descriptor section 'metadata' is required.")


def _parse_static_parameters(template_data: Mapping[str, Any]) -> dict[str, str]:
    parameters = template_data.get("templateParameters") or {}
    if not isinstance(parameters, Mapping):
        raise DescriptorValidationError("templateData.templateParameters must be an object.")
    static = parameters.get("static") or {}
    if not isinstance(static, Mapping):
        raise DescriptorValidationError(
            "templateData.templateParameters.static must be an object."
        )
    return {
        str(key): _scalar_to_text(value, f"templateParameters.static.{key}")
        for key, value in static.items()
    }


def _parse_input_channel(messaging: Mapping[str, Any]) -> str:
    value = messaging.get("inputChannel", messaging.get("inputQueue"))
    if isinstance(value, Mapping):
        value = value.get("destination")
    return _require_text(value, "messaging.inputChannel")


def _parse_reply(section: Mapping[str, Any], base_path: Path) -> ReplyExpectation:
    destination = _require_text(section.get("destination"), "messaging.reply.destination")
    timeout_ms = _optional_positive_int(section.get("timeout"), "messaging.reply.timeout")
    response_path = _resolve_path(
        base_path,
        _require_text(
            section.get("responseTemplatePath"), "messaging.reply.responseTemplatePath"
        ),
    )
    return ReplyExpectation(
        destination=destination,
        timeout_ms=timeout_ms,
        response_template_path=response_path,
        response_template=_read_template(response_path),
    )


def _parse_store_verifications(root: Mapping[str, Any]) -> tuple[VerificationGroup, ...]:
    groups: list[VerificationGroup] = []
    entries = _require_list(root.get("storeVerifications"), "storeVerifications")
    for index, entry in enumerate(entries):
        label = f"storeVerifications[{index}]"
        section = _require_mapping(entry, label)
        store = _parse_store_kind(section.get("store"), f"{label}.store")
        groups.append(_parse_group(section, store, label))
    for key, store in _LEGACY_GROUP_KEYS:
        for index, entry in enumerate(_require_list(root.get(key), key)):
            label = f"{key}[{index}]"
            groups.append(_parse_group(_require_mapping(entry, label), store, label))
    names = [group.name for group in groups]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise DescriptorValidationError(
            f"Duplicate verification group names: {', '.join(duplicates)}"
        )
    return tuple(groups)


def _parse_group(
    section: Mapping[str, Any], store: StoreKind, label: str
) -> VerificationGroup:
    name = section.get("name")
    if name is None:
        name = label
    name = _require_text(name, f"{label}.name")
    assertions = _parse_assertions(
        section.get("assertions", section.get("verification")), f"{label}.assertions"
    )
    expected_count = _parse_expected_count(section.get("expectedCount"), f"{label}.expectedCount")
    timeout_ms = _optional_positive_int(section.get("timeout"), f"{label}.timeout")

    if store is StoreKind.RELATIONAL:
        return VerificationGroup(
            name=name,
            store=store,
            assertions=assertions,
            query=_require_text(section.get("query"), f"{label}.query"),
            expected_count=expected_count,
            timeout_ms=timeout_ms,
        )
    filter_value = section.get("filter")
    if filter_value is None:
        filter_value = {}
    if not isinstance(filter_value, Mapping | str):
        raise DescriptorValidationError(f"{label}.filter must be an object or a JSON string.")
    return VerificationGroup(
        name=name,
        store=store,
        assertions=assertions,
        collection=_require_text(section.get("collection"), f"{label}.collection"),
        filter=filter_value,
        expected_count=expected_count,
        timeout_ms=timeout_ms,
    )


def _parse_assertions(value: Any, label: str) -> tuple[FieldAssertion, ...]:
    assertions: list[FieldAssertion] = []
    for index, entry in enumerate(_require_list(value, label)):
        item = _require_mapping(entry, f"{label}[{index}]")
        assertions.append(
            FieldAssertion(
                field=_require_text(item.get("field"), f"{label}[{index}].field"),
                value=_scalar_to_text(item.get("value"), f"{label}[{index}].value"),
            )
        )
    return tuple(assertions)


def _parse_store_kind(value: Any, label: str) -> StoreKind:
    text = _require_text(value, label).lower()
    try:
        return StoreKind(text)
    except ValueError as exc:
        choices = ", ".join(kind.value for kind in StoreKind)
        raise DescriptorValidationError(f"{label} must be one of: {choices}.") from exc


def _parse_expected_count(value: Any, label: str) -> int | None:
    if isinstance(value, Mapping):
        value = value.get("value")
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise DescriptorValidationError(f"{label} must be a non-negative integer.")
    return value


def _read_template(path: Path) -> str:
    if not path.exists():
        raise DescriptorValidationError(f"Template file not found: {path}")
    return path.read_text(encoding="utf-8")


def _resolve_path(base_path: Path, raw_path: str) -> Path:
    candidate = Path(raw_path)
    if not candidate.is_absolute():
        return (base_path / candidate).resolve()
    return candidate


def _scalar_to_text(value: Any, label: str) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return str(value)
    raise DescriptorValidationError(f"{label} must be a string, number or boolean.")


def _require_mapping(value: Any, label: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise DescriptorValidationError(f"Descriptor section '{label}' is required.")
    return value


def _require_list(value: Any, label: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise DescriptorValidationError(f"{label} must be a list.")
    return value


def _require_text(value: Any, label: str) -> str:
    if not isinstance(value, str):
        raise DescriptorValidationError(f"{label} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise DescriptorValidationError(f"{label} must not be empty.")
    return stripped


def _optional_positive_int(value: Any, label: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise DescriptorValidationError(f"{label} must be a positive integer.")
    return value
