"""
Query lookups by database type, or by a live connection handle.

A handle may declare its kind explicitly (``database_kind`` attribute, enum or
string). Otherwise the kind is inferred from the concrete class of its DB-API
connection:
- SQLAlchemy Connection: the pooled connection it already holds (``.connection``)
- Engine or anything with ``raw_connection()``: a throwaway connection, closed again
"""

import logging
from contextlib import closing
from typing import Any

from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from sqlregistry.models import DatabaseTypeEnum

from .errors import DriverOpenError, UnsupportedDatabaseType
from .store import QueryRegistry, get_registry

_log = logging.getLogger(__name__)

# Checked in order; first substring hit wins.
_TYPE_MARKERS: tuple[tuple[tuple[str, ...], DatabaseTypeEnum], ...] = (
    (("mysql",), DatabaseTypeEnum.MYSQL),
    (("postgres", "psycopg", "pg8000"), DatabaseTypeEnum.POSTGRES),
    (("sqlite",), DatabaseTypeEnum.SQLITE),
)


def canonical_database_type(type_name: str) -> str:
    """Map a driver/type identifier to "mysql", "postgres" or "sqlite" by substring."""
    lowered = type_name.lower()
    for markers, db_type in _TYPE_MARKERS:
        if any(m in lowered for m in markers):
            return db_type.value
    raise UnsupportedDatabaseType(lowered)


def connection_type_name(conn: Any) -> str:
    """Lowercase ``module.Class`` of the driver-level connection behind conn."""
    raw = getattr(conn, "driver_connection", None) or conn
    cls = type(raw)
    return f"{cls.__module__}.{cls.__qualname__}".lower()


def detect_database_type(handle: Any) -> str:
    """
    Return the canonical database type of handle.

    Raises DriverOpenError when the introspection connection cannot be opened,
    UnsupportedDatabaseType when the type is not recognised and TypeError for
    handles that are neither an Engine nor a Connection. The introspection
    connection opened for an Engine is always closed before returning.
    """
    declared = getattr(handle, "database_kind", None)
    if declared is not None:
        return canonical_database_type(str(getattr(declared, "value", declared)))

    if isinstance(handle, Connection):
        try:
            type_name = connection_type_name(handle.connection)
        except SQLAlchemyError as e:
            raise DriverOpenError(e) from e
    else:
        open_raw = getattr(handle, "raw_connection", None)
        if open_raw is None:
            raise TypeError(
                f"cannot determine database type of {type(handle).__name__!r}: "
                "expected a SQLAlchemy Engine or Connection"
            )
        try:
            raw = open_raw()
        except Exception as e:
            raise DriverOpenError(e) from e
        with closing(raw):
            type_name = connection_type_name(raw)
    _log.debug("Introspected connection type %s", type_name)
    return canonical_database_type(type_name)


def get_query(
    db_type: str, query_name: str, *, registry: QueryRegistry | None = None
) -> str:
    """Return query_name for db_type, loading the registry on first use."""
    return (registry or get_registry()).get_query(db_type, query_name)


def get_query_for_db(
    connection: Any, query_name: str, *, registry: QueryRegistry | None = None
) -> str:
    """Like get_query, with the database type taken from a live connection handle."""
    return get_query(detect_database_type(connection), query_name, registry=registry)
