"""Configuration domain exports."""

from .config_scaffold_builder import (
    DEFAULT_CONFIG_FILENAME,
    build_placeholder_configuration,
    write_placeholder_configuration,
)
from .loader import ConfigurationError, load_configuration
from .runtime_settings import (
    DEFAULT_REPLY_TIMEOUT_MS,
    DEFAULT_VERIFICATION_TIMEOUT_MS,
    Configuration,
    DocumentStoreSettings,
    ExecutionSettings,
    KafkaSettings,
    PollPolicy,
    RelationalStoreSettings,
)

__all__ = [
    "Configuration",
    "DocumentStoreSettings",
    "ExecutionSettings",
    "KafkaSettings",
    "PollPolicy",
    "RelationalStoreSettings",
    "ConfigurationError",
    "load_configuration",
    "DEFAULT_CONFIG_FILENAME",
    "DEFAULT_REPLY_TIMEOUT_MS",
    "DEFAULT_VERIFICATION_TIMEOUT_MS",
    "build_placeholder_configuration",
    "write_placeholder_configuration",
]
