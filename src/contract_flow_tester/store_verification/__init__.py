"""Store verification exports."""

from .group_checks import StoreGroupCheck, stringify_field_value
from .mongo_store import PyMongoDocumentStore
from .polling import poll_until
from .sql_store import SqlAlchemyRelationalStore
from .store_adapters import DocumentStore, RelationalStore

__all__ = [
    "DocumentStore",
    "PyMongoDocumentStore",
    "RelationalStore",
    "SqlAlchemyRelationalStore",
    "StoreGroupCheck",
    "poll_until",
    "stringify_field_value",
]
