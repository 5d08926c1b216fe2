"""
File-backed registry of named SQL queries.

Exports: QueryRegistry, get_registry, get_query, get_query_for_db and the lookup errors.
"""

from .errors import (
    DriverOpenError,
    QueryNotFound,
    QueryRegistryError,
    UnknownDatabaseType,
    UnsupportedDatabaseType,
)
from .parser import count_query_parameters, describe_query_parameters, parse_query_blocks
from .resolver import (
    canonical_database_type,
    detect_database_type,
    get_query,
    get_query_for_db,
)
from .store import LoadDiagnostic, QueryRegistry, get_registry, load_sql_queries

__all__ = [
    "QueryRegistry",
    "LoadDiagnostic",
    "get_registry",
    "load_sql_queries",
    "get_query",
    "get_query_for_db",
    "detect_database_type",
    "canonical_database_type",
    "parse_query_blocks",
    "count_query_parameters",
    "describe_query_parameters",
    "QueryRegistryError",
    "UnknownDatabaseType",
    "QueryNotFound",
    "DriverOpenError",
    "UnsupportedDatabaseType",
]
