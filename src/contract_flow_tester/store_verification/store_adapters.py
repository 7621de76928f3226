"""Store adapter protocols consumed by verification groups."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol


class RelationalStore(Protocol):
    """Executes rendered query text and returns rows as mappings."""

    def query(self, query_text: str) -> Sequence[Mapping[str, Any]]: ...

    def close(self) -> None: ...


class DocumentStore(Protocol):
    """Finds documents in a collection with a rendered filter."""

    def find(self, collection: str, query_filter: Any) -> Sequence[Mapping[str, Any]]: ...

    def close(self) -> None: ...
