"""
Run a registered query against a SQLAlchemy engine.

The query is looked up for the engine's database type, executed with the given
positional parameters (no templating) and summarised in an ExecuteResponse.
Failures are reported in the response, not raised:
- statements that return rows: columns + rows
- INSERT / UPDATE / DELETE (also inside WITH): rows affected (committed)
- anything else: rows if the statement returned any, otherwise rows affected

Statement files may use $1..$N placeholders for every database type; they are
rewritten to the driver's paramstyle before execution.
"""

import logging
import re
import time
from typing import Any

from sqlalchemy.engine import Connection, Engine, Result
from sqlalchemy.exc import SQLAlchemyError

from sqlregistry.core.config import settings
from sqlregistry.models import ExecuteRequest, ExecuteResponse
from sqlregistry.registry import QueryRegistry, QueryRegistryError, get_query_for_db
from sqlregistry.registry.parser import PLACEHOLDER_RE, count_query_parameters

_log = logging.getLogger(__name__)

_MODIFY_KEYWORDS = ("INSERT", "UPDATE", "DELETE")
_MODIFY_RE = re.compile(r"\b(?:INSERT|UPDATE|DELETE)\b", re.IGNORECASE)
_NUMBERED_RE = re.compile(r"\$\d+")


def _first_keyword(sql: str) -> str:
    s = re.sub(r"^[\s;(]+", "", sql)
    return s.split(None, 1)[0].upper() if s else ""


def _strip_literals(sql: str) -> str:
    return re.sub(r"'(?:[^']|'')*'", "''", sql)


def classify_statement(sql: str) -> str:
    """Return "SELECT", "MODIFY" or "EXEC" from the statement's leading keyword."""
    first = _first_keyword(sql)
    if first == "WITH":
        return "MODIFY" if _MODIFY_RE.search(_strip_literals(sql)) else "SELECT"
    if first == "SELECT":
        return "SELECT"
    if first in _MODIFY_KEYWORDS:
        return "MODIFY"
    return "EXEC"


def bind_positional(
    sql: str, params: list[Any] | tuple[Any, ...], paramstyle: str
) -> tuple[str, tuple[Any, ...] | dict[str, Any]]:
    """
    Rewrite $N placeholders for a DB-API paramstyle and order params to match.

    $N inside quoted literals is left alone. Statements without $N (already in
    the driver's style) pass through unchanged, as does the "numeric_dollar"
    style. A literal % is doubled for the format/pyformat styles.
    """
    params = tuple(params)
    if paramstyle == "numeric_dollar" or not _NUMBERED_RE.search(sql):
        return sql, params

    if paramstyle in ("format", "pyformat"):
        sql = sql.replace("%", "%%")

    ordered: list[Any] = []

    def placeholder(m: re.Match[str]) -> str:
        if m.group(1) is None:
            return m.group(0)
        n = int(m.group(1))
        if n < 1 or n > len(params):
            raise ValueError(f"placeholder ${n} has no parameter ({len(params)} given)")
        ordered.append(params[n - 1])
        i = len(ordered)
        if paramstyle == "qmark":
            return "?"
        if paramstyle in ("format", "pyformat"):
            return "%s"
        if paramstyle == "numeric":
            return f":{i}"
        if paramstyle == "named":
            return f":p{i}"
        raise ValueError(f"unsupported paramstyle: {paramstyle}")

    converted = PLACEHOLDER_RE.sub(placeholder, sql)
    if paramstyle == "named":
        return converted, {f"p{i}": v for i, v in enumerate(ordered, start=1)}
    return converted, tuple(ordered)


def add_default_parameters(
    query_name: str, params: list[Any], expected: int, schema: str | None = None
) -> list[Any]:
    """
    Fill in the schema argument of the metadata queries when the caller omits it.

    ListDatabaseTables with no params gets [schema]; GetTableColumns with only a
    table name gets [schema, table]. Anything else is returned unchanged.
    """
    schema = schema or settings.SQL_DEFAULT_SCHEMA
    if query_name == "ListDatabaseTables" and not params and expected >= 1:
        return [schema]
    if query_name == "GetTableColumns" and len(params) == 1 and expected >= 2:
        return [schema, *params]
    return list(params)


def _rows_response(result: Result, kind: str) -> ExecuteResponse:
    columns = list(result.keys())
    rows = [list(r) for r in result.fetchall()]
    return ExecuteResponse(
        success=True,
        columns=columns,
        rows=rows,
        row_count=len(rows),
        query_type="SELECT" if kind == "EXEC" else kind,
        rows_affected=len(rows) if kind == "MODIFY" else None,
    )


def _run(conn: Connection, sql: str, params: tuple[Any, ...] | dict[str, Any]) -> ExecuteResponse:
    kind = classify_statement(sql)
    result = conn.exec_driver_sql(sql, params) if params else conn.exec_driver_sql(sql)
    if result.returns_rows:
        response = _rows_response(result, kind)
    else:
        affected = result.rowcount if result.rowcount is not None and result.rowcount >= 0 else 0
        response = ExecuteResponse(
            success=True,
            row_count=affected,
            rows_affected=affected,
            query_type="MODIFY" if kind == "SELECT" else kind,
        )
    if kind != "SELECT":
        conn.commit()
    return response


def execute_named_query(
    engine: Engine,
    request: ExecuteRequest,
    *,
    registry: QueryRegistry | None = None,
) -> ExecuteResponse:
    """Look up request.query_name for engine's database type and execute it."""
    try:
        sql = get_query_for_db(engine, request.query_name, registry=registry)
    except QueryRegistryError as e:
        return ExecuteResponse(success=False, error=str(e))

    params = add_default_parameters(
        request.query_name, request.params, count_query_parameters(sql)
    )
    start = time.perf_counter()
    try:
        bound_sql, bound = bind_positional(sql, params, engine.dialect.paramstyle)
        with engine.connect() as conn:
            response = _run(conn, bound_sql, bound)
    except (SQLAlchemyError, ValueError) as e:
        _log.warning("Query %s failed: %s", request.query_name, e)
        response = ExecuteResponse(
            success=False,
            error=f"Error executing query '{request.query_name}': {e}",
        )
    response.duration = f"{time.perf_counter() - start:.6f}s"
    return response
