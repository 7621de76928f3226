"""SQLAlchemy-backed relational store adapter."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from contract_flow_tester.configuration.runtime_settings import RelationalStoreSettings
from contract_flow_tester.failures import StoreTransportError

logger = logging.getLogger(__name__)


class SqlAlchemyRelationalStore:
    """Runs rendered query text through a shared SQLAlchemy engine."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @classmethod
    def from_settings(cls, settings: RelationalStoreSettings) -> SqlAlchemyRelationalStore:
        try:
            engine = sa.create_engine(settings.url)
        except (SQLAlchemyError, ImportError, ValueError) as exc:
            raise StoreTransportError(f"Cannot create relational store engine: {exc}") from exc
        return cls(engine)

    def query(self, query_text: str) -> list[Mapping[str, Any]]:
        logger.debug("executing relational query: %s", query_text)
        try:
            with self._engine.connect() as connection:
                rows = connection.execute(sa.text(query_text)).mappings().all()
        except SQLAlchemyError as exc:
            raise StoreTransportError(f"Relational query failed: {exc}") from exc
        return [dict(row) for row in rows]

    def close(self) -> None:
        self._engine.dispose()
