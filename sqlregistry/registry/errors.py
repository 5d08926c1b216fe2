"""
Errors raised by query lookups.

Load failures are never raised; they are recorded as LoadDiagnostic entries on
the registry instead (see store.py).
"""

from typing import Any


class QueryRegistryError(Exception):
    """Base class for lookup failures."""


class UnknownDatabaseType(QueryRegistryError, LookupError):
    def __init__(self, db_type: str) -> None:
        self.db_type = db_type
        super().__init__(f"no queries found for database type: {db_type}")


class QueryNotFound(QueryRegistryError, LookupError):
    def __init__(self, db_type: str, query_name: str) -> None:
        self.db_type = db_type
        self.query_name = query_name
        super().__init__(f"query not found: {query_name} (database type: {db_type})")


class DriverOpenError(QueryRegistryError):
    """The throwaway connection used to detect the database type could not be opened."""

    def __init__(self, cause: Any) -> None:
        self.cause = cause
        super().__init__(f"failed to get database driver: {cause}")


class UnsupportedDatabaseType(QueryRegistryError, ValueError):
    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f"unsupported database type: {type_name}")
