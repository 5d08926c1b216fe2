"""Unit tests for registry.resolver: type detection and get_query_for_db."""

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import create_engine

from sqlregistry.models import DatabaseTypeEnum
from sqlregistry.registry import (
    DriverOpenError,
    QueryNotFound,
    QueryRegistry,
    UnsupportedDatabaseType,
    canonical_database_type,
    detect_database_type,
    get_query_for_db,
)
from tests.utils.sql_files import write_sql_file


class MySQLConnection:
    """Stand-in driver connection; only its class name matters."""

    def __init__(self) -> None:
        self.closed = False

    def close(self) -> None:
        self.closed = True


class OracleConnection(MySQLConnection):
    pass


class FakeEngine:
    def __init__(self, conn: object) -> None:
        self.conn = conn

    def raw_connection(self) -> object:
        return self.conn


@pytest.mark.parametrize(
    ("type_name", "expected"),
    [
        ("pymysql.connections.connection", "mysql"),
        ("MySQLdb.connections.Connection", "mysql"),
        ("*pq.postgresDriver", "postgres"),
        ("psycopg.connection.Connection", "postgres"),
        ("psycopg2.extensions.connection", "postgres"),
        ("sqlite3.Connection", "sqlite"),
        ("mysql_over_postgres_over_sqlite", "mysql"),
        ("postgres_sqlite", "postgres"),
    ],
)
def test_canonical_database_type(type_name: str, expected: str) -> None:
    assert canonical_database_type(type_name) == expected


def test_canonical_database_type_unsupported() -> None:
    with pytest.raises(UnsupportedDatabaseType) as exc_info:
        canonical_database_type("cx_Oracle.Connection")
    assert "cx_oracle.connection" in str(exc_info.value)


def test_detect_sqlite_engine() -> None:
    engine = create_engine("sqlite://")
    try:
        assert detect_database_type(engine) == "sqlite"
    finally:
        engine.dispose()


def test_detect_mysql_by_class_name_and_closes_connection() -> None:
    conn = MySQLConnection()
    assert detect_database_type(FakeEngine(conn)) == "mysql"
    assert conn.closed is True


def test_detect_unsupported_still_closes_connection() -> None:
    conn = OracleConnection()
    with pytest.raises(UnsupportedDatabaseType):
        detect_database_type(FakeEngine(conn))
    assert conn.closed is True


def test_detect_driver_open_error() -> None:
    engine = MagicMock(spec=["raw_connection"])
    engine.raw_connection.side_effect = OSError("connection refused")
    with pytest.raises(DriverOpenError) as exc_info:
        detect_database_type(engine)
    assert isinstance(exc_info.value.__cause__, OSError)
    assert "connection refused" in str(exc_info.value)


def test_detect_uses_declared_kind_without_connecting() -> None:
    handle = MagicMock(spec=["database_kind", "raw_connection"])
    handle.database_kind = DatabaseTypeEnum.POSTGRES
    assert detect_database_type(handle) == "postgres"
    handle.raw_connection.assert_not_called()

    handle.database_kind = "MySQL"
    assert detect_database_type(handle) == "mysql"


def test_get_query_for_db_mysql(tmp_path) -> None:
    write_sql_file(tmp_path, "mysql", "users.sql", "-- get_user\nSELECT * FROM users WHERE id = ?;")
    write_sql_file(tmp_path, "postgres", "users.sql", "-- get_user\nSELECT * FROM users WHERE id = $1;")
    registry = QueryRegistry(tmp_path)

    q = get_query_for_db(FakeEngine(MySQLConnection()), "get_user", registry=registry)

    assert q == "SELECT * FROM users WHERE id = ?;"


def test_get_query_for_db_sqlite_engine(registry: QueryRegistry) -> None:
    engine = create_engine("sqlite://")
    try:
        q = get_query_for_db(engine, "list_items", registry=registry)
        assert q == "SELECT id, name FROM items ORDER BY id"
        with pytest.raises(QueryNotFound):
            get_query_for_db(engine, "get_user", registry=registry)
    finally:
        engine.dispose()


def test_detect_sqlalchemy_connection_without_new_connection() -> None:
    engine = create_engine("sqlite://")
    try:
        with engine.connect() as conn:
            with patch.object(engine, "raw_connection") as raw:
                assert detect_database_type(conn) == "sqlite"
            raw.assert_not_called()
            assert conn.exec_driver_sql("SELECT 1").scalar() == 1
    finally:
        engine.dispose()


def test_get_query_for_db_sqlalchemy_connection(registry: QueryRegistry) -> None:
    engine = create_engine("sqlite://")
    try:
        with engine.connect() as conn:
            q = get_query_for_db(conn, "list_items", registry=registry)
        assert q == "SELECT id, name FROM items ORDER BY id"
    finally:
        engine.dispose()


def test_detect_closed_connection_is_driver_open_error() -> None:
    engine = create_engine("sqlite://")
    try:
        conn = engine.connect()
        conn.close()
        with pytest.raises(DriverOpenError):
            detect_database_type(conn)
    finally:
        engine.dispose()


def test_detect_rejects_unknown_handle() -> None:
    with pytest.raises(TypeError) as exc_info:
        detect_database_type(object())
    assert "Engine or Connection" in str(exc_info.value)
