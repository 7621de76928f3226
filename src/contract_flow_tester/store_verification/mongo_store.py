"""PyMongo-backed document store adapter."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from contract_flow_tester.configuration.runtime_settings import DocumentStoreSettings
from contract_flow_tester.failures import MalformedDocumentError, StoreTransportError

logger = logging.getLogger(__name__)


class PyMongoDocumentStore:
    """Runs rendered filters against collections of one MongoDB database."""

    def __init__(self, client: MongoClient[Any], database_name: str) -> None:
        self._client = client
        self._database_name = database_name

    @classmethod
    def from_settings(cls, settings: DocumentStoreSettings) -> PyMongoDocumentStore:
        try:
            client: MongoClient[Any] = MongoClient(
                settings.uri,
                serverSelectionTimeoutMS=settings.server_selection_timeout_ms,
            )
        except (PyMongoError, TypeError, ValueError) as exc:
            raise StoreTransportError(f"Cannot create document store client: {exc}") from exc
        return cls(client, settings.database)

    def find(self, collection: str, query_filter: Any) -> list[Mapping[str, Any]]:
        if not isinstance(query_filter, Mapping):
            raise MalformedDocumentError(
                f"Filter for collection '{collection}' must be a JSON object."
            )
        logger.debug("finding documents in %s with filter %s", collection, query_filter)
        try:
            cursor = self._client[self._database_name][collection].find(dict(query_filter))
            return [dict(document) for document in cursor]
        except PyMongoError as exc:
            raise StoreTransportError(f"Document query on '{collection}' failed: {exc}") from exc

    def close(self) -> None:
        self._client.close()
