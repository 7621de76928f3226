"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "config.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Run configuration template for contract-flow-tester.
# Replace every <REQUIRED> placeholder before running test cases.
# Replace <OPTIONAL> placeholders only when your setup needs them.

kafka:
  # Brokers used to publish requests and to read replies.
  bootstrap_servers:
    - "<REQUIRED>"
  group_id: "<OPTIONAL>"
  security:
    sasl.username: "<OPTIONAL>"
    sasl.password: "<OPTIONAL>"
    security.protocol: "<OPTIONAL>"
    sasl.mechanisms: "<OPTIONAL>"
  poll_interval_ms: "<OPTIONAL>"
  publish_timeout_seconds: "<OPTIONAL>"

relational_store:
  # SQLAlchemy database URL, required when a test case verifies relational rows.
  url: "<OPTIONAL>"

document_store:
  # MongoDB connection, required when a test case verifies documents.
  uri: "<OPTIONAL>"
  database: "<OPTIONAL>"
  server_selection_timeout_ms: "<OPTIONAL>"

execution:
  # Defaults for test cases that do not set their own timeouts.
  reply_timeout_ms: "<OPTIONAL>"
  verification_timeout_ms: "<OPTIONAL>"
  poll_initial_interval_ms: "<OPTIONAL>"
  poll_max_interval_ms: "<OPTIONAL>"
  poll_backoff_multiplier: "<OPTIONAL>"
  # true fails rendering when a template references an unknown ${key}.
  strict_placeholders: "<OPTIONAL>"
"""


def build_placeholder_configuration() -> str:
    """Build a YAML run configuration template with placeholders and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the placeholder run configuration template to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
