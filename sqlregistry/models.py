"""
Models shared by the registry, the executor and the HTTP API.

Nothing here is a table: the registry is file-backed and lives in memory.
"""

from enum import Enum
from typing import Any

from sqlmodel import Field, SQLModel


class DatabaseTypeEnum(str, Enum):
    """Canonical database-type identifiers (keys of the query store)."""

    POSTGRES = "postgres"
    MYSQL = "mysql"
    SQLITE = "sqlite"


# ---------------------------------------------------------------------------
# Registry listings
# ---------------------------------------------------------------------------


class QueryInfo(SQLModel):
    """One registered query, as listed for a database type."""

    name: str
    param_count: int = 0
    param_details: str = ""
    query: str


class QueryPublic(SQLModel):
    db_type: str
    name: str
    param_count: int = 0
    param_details: str = ""
    query: str


class QuerySetSummary(SQLModel):
    db_type: str
    count: int


class QueryStoreSummary(SQLModel):
    """Body for GET /queries/: loaded database types plus suppressed load failures."""

    db_types: list[QuerySetSummary] = Field(default_factory=list)
    diagnostics: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


class ExecuteRequest(SQLModel):
    """Body for POST /queries/execute."""

    query_name: str = Field(..., min_length=1, max_length=255)
    params: list[Any] = Field(
        default_factory=list,
        description="Positional parameters: $1 is params[0], and so on.",
    )


class ExecuteResponse(SQLModel):
    success: bool
    error: str | None = None
    columns: list[str] = Field(default_factory=list)
    rows: list[list[Any]] = Field(default_factory=list)
    row_count: int = 0
    duration: str = ""
    query_type: str = ""
    rows_affected: int | None = None
