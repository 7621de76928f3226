"""Generation of per-run identifiers and timestamps."""

from __future__ import annotations

import secrets
import time
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from types import MappingProxyType

PROCESS_ID_KEY = "puId"
TRANSACTION_ID_KEY = "txId"
PROCESSING_DATE_KEY = "procDate"
UTC_TIMESTAMP_KEY = "utcDateTime"

PROCESSING_DATE_FORMAT = "%Y-%m-%d"

Payload = Mapping[str, str]


class DynamicValueGenerator:
    """Produces unique ids and current date values for one test-case run."""

    def __init__(
        self,
        *,
        now: Callable[[], datetime] | None = None,
        clock_ns: Callable[[], int] | None = None,
    ) -> None:
        self._now = now or (lambda: datetime.now(UTC))
        self._clock_ns = clock_ns or time.time_ns

    def new_process_id(self) -> str:
        return self._new_id("PU")

    def new_transaction_id(self) -> str:
        return self._new_id("TX")

    def new_processing_date(self) -> str:
        """Return today's date on the local clock."""
        return self._now().astimezone().strftime(PROCESSING_DATE_FORMAT)

    def new_utc_timestamp(self) -> str:
        """Return the current UTC time as ISO-8601 with millisecond precision."""
        moment = self._now().astimezone(UTC)
        return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def generate(self) -> dict[str, str]:
        """Return the four dynamic payload values."""
        return {
            PROCESS_ID_KEY: self.new_process_id(),
            TRANSACTION_ID_KEY: self.new_transaction_id(),
            PROCESSING_DATE_KEY: self.new_processing_date(),
            UTC_TIMESTAMP_KEY: self.new_utc_timestamp(),
        }

    def _new_id(self, prefix: str) -> str:
        # 64 random bits on top of the clock reading keep ids unique across a suite.
        return f"{prefix}{self._clock_ns():x}{secrets.token_hex(8).upper()}"


def build_payload(static_values: Mapping[str, str], dynamic_values: Mapping[str, str]) -> Payload:
    """Merge static and dynamic values; dynamic values win on key collision."""
    merged = {**static_values, **dynamic_values}
    return MappingProxyType(merged)
