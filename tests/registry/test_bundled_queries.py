"""The statement files shipped under data/ load cleanly and run on SQLite."""

from pathlib import Path

import pytest
from sqlalchemy import create_engine

from sqlregistry.engines import execute_named_query
from sqlregistry.models import ExecuteRequest
from sqlregistry.registry import QueryRegistry

DATA_DIR = Path(__file__).resolve().parents[2] / "data"

EXPECTED = ["GetDatabaseVersion", "GetTableColumns", "ListDatabaseTables"]


@pytest.fixture(scope="module")
def bundled() -> QueryRegistry:
    return QueryRegistry(DATA_DIR)


def test_bundled_files_load_without_diagnostics(bundled: QueryRegistry) -> None:
    assert bundled.load() == ()
    for db_type in ("postgres", "mysql", "sqlite"):
        assert bundled.query_names(db_type) == EXPECTED


def test_bundled_param_counts(bundled: QueryRegistry) -> None:
    infos = {i.name: i for i in bundled.list_queries("postgres")}
    assert infos["ListDatabaseTables"].param_count == 1
    assert infos["GetTableColumns"].param_count == 2
    assert infos["GetDatabaseVersion"].param_count == 0


def test_bundled_sqlite_queries_run(bundled: QueryRegistry) -> None:
    engine = create_engine("sqlite://")
    try:
        with engine.begin() as conn:
            conn.exec_driver_sql("CREATE TABLE users (id INTEGER PRIMARY KEY, email TEXT NOT NULL)")

        tables = execute_named_query(
            engine, ExecuteRequest(query_name="ListDatabaseTables"), registry=bundled
        )
        assert tables.success is True
        assert tables.rows == [["main", "users"]]

        columns = execute_named_query(
            engine,
            ExecuteRequest(query_name="GetTableColumns", params=["users"]),
            registry=bundled,
        )
        assert columns.success is True
        assert [r[0] for r in columns.rows] == ["id", "email"]
    finally:
        engine.dispose()
