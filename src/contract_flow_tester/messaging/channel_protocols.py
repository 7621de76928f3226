"""Message channel protocol consumed by the exchange coordinator."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol


class MessageChannel(Protocol):
    """Publish/subscribe transport for request and reply documents.

    `subscribe` calls `on_subscribed` once every message published from then on
    is guaranteed to reach it, and before it starts waiting for the reply.
    """

    def publish(self, destination: str, body: Any) -> None: ...

    def subscribe(
        self,
        destination: str,
        timeout_ms: int,
        *,
        on_subscribed: Callable[[], None] | None = None,
    ) -> Any: ...

    def close(self) -> None: ...
