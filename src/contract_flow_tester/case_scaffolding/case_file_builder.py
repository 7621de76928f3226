"""Starter test-case file generation service."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

from contract_flow_tester.response_comparison import IGNORE_SENTINEL
from contract_flow_tester.template_rendering import (
    PROCESS_ID_KEY,
    TRANSACTION_ID_KEY,
    UTC_TIMESTAMP_KEY,
)
from contract_flow_tester.testcase_ingestion import DESCRIPTOR_SUFFIX

from .constants import REQUEST_TEMPLATE_SUFFIX, RESPONSE_TEMPLATE_SUFFIX

_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def slugify_case_name(name: str) -> str:
    """Turn a test-case name into a lower-case, dash separated file stem."""
    slug = _SLUG_PATTERN.sub("-", name.lower()).strip("-")
    if not slug:
        raise ValueError(f"Test case name '{name}' does not contain any letters or digits.")
    return slug


def build_case_documents(name: str) -> dict[str, dict[str, Any]]:
    """Return the descriptor, request template and response template keyed by file suffix."""
    slug = slugify_case_name(name)
    descriptor = {
        "metadata": {"name": name},
        "templateData": {
            "templatePath": f"{slug}{REQUEST_TEMPLATE_SUFFIX}",
            "templateParameters": {"static": {"customerId": "<REQUIRED>"}},
        },
        "messaging": {
            "inputChannel": {"destination": "<REQUIRED request topic>"},
            "reply": {
                "destination": "<REQUIRED reply topic>",
                "timeout": 30000,
                "responseTemplatePath": f"{slug}{RESPONSE_TEMPLATE_SUFFIX}",
            },
        },
        "storeVerifications": [
            {
                "name": "transaction-row",
                "store": "relational",
                "query": (
                    "SELECT status FROM transactions "
                    f"WHERE tx_id = '${{{TRANSACTION_ID_KEY}}}'"
                ),
                "expectedCount": 1,
                "timeout": 10000,
                "assertions": [{"field": "status", "value": "DONE"}],
            }
        ],
    }
    request = {
        "header": {
            "processId": f"${{{PROCESS_ID_KEY}}}",
            "transactionId": f"${{{TRANSACTION_ID_KEY}}}",
            "sentAt": f"${{{UTC_TIMESTAMP_KEY}}}",
        },
        "body": {"customerId": "${customerId}"},
    }
    response = {
        "header": {
            "transactionId": f"${{{TRANSACTION_ID_KEY}}}",
            "receivedAt": IGNORE_SENTINEL,
        },
        "body": {"status": "ACCEPTED"},
    }
    return {
        DESCRIPTOR_SUFFIX: descriptor,
        REQUEST_TEMPLATE_SUFFIX: request,
        RESPONSE_TEMPLATE_SUFFIX: response,
    }


def write_case_scaffold(output_dir: Path | str, name: str) -> tuple[Path, ...]:
    """Write starter descriptor and template files; refuse to overwrite existing files."""
    directory = Path(output_dir)
    slug = slugify_case_name(name)
    documents = build_case_documents(name)
    targets = {suffix: directory / f"{slug}{suffix}" for suffix in documents}
    existing = [str(path) for path in targets.values() if path.exists()]
    if existing:
        raise FileExistsError(f"Scaffold files already exist: {', '.join(existing)}")

    directory.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for suffix, document in documents.items():
        path = targets[suffix]
        path.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
        written.append(path.resolve())
    return tuple(written)
