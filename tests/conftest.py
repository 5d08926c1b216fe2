from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from sqlregistry.api.deps import get_query_registry
from sqlregistry.main import app
from sqlregistry.registry import QueryRegistry
from tests.utils.sql_files import write_sql_file

USERS_SQL = """\
-- get_user
SELECT * FROM users WHERE id = $1;

-- list_users
SELECT id, email
FROM users
ORDER BY id;
"""

SQLITE_SQL = """\
-- create_items
CREATE TABLE items (id INTEGER PRIMARY KEY, name TEXT)
-- add_item
INSERT INTO items (name) VALUES (?)
-- list_items
SELECT id, name FROM items ORDER BY id
"""


@pytest.fixture
def sql_dir(tmp_path: Path) -> Path:
    """SQL root with a postgres users file and a sqlite items file; no mysql directory."""
    root = tmp_path / "data"
    write_sql_file(root, "postgres", "users.sql", USERS_SQL)
    write_sql_file(root, "sqlite", "items.sql", SQLITE_SQL)
    return root


@pytest.fixture
def registry(sql_dir: Path) -> QueryRegistry:
    return QueryRegistry(sql_dir)


@pytest.fixture
def client(registry: QueryRegistry) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_query_registry] = lambda: registry
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
