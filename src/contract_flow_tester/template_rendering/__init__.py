"""Template rendering exports."""

from .dynamic_values import (
    PROCESS_ID_KEY,
    PROCESSING_DATE_KEY,
    TRANSACTION_ID_KEY,
    UTC_TIMESTAMP_KEY,
    DynamicValueGenerator,
    Payload,
    build_payload,
)
from .placeholder_renderer import (
    render_document,
    render_json_value,
    render_template,
)

__all__ = [
    "PROCESS_ID_KEY",
    "PROCESSING_DATE_KEY",
    "TRANSACTION_ID_KEY",
    "UTC_TIMESTAMP_KEY",
    "DynamicValueGenerator",
    "Payload",
    "build_payload",
    "render_document",
    "render_json_value",
    "render_template",
]
