"""
Read-only access to the query registry, plus execution of a named query.

Endpoints: list database types, list queries of a type, get one query, execute.
"""

from fastapi import APIRouter

from sqlregistry.api.deps import EngineDep, RegistryDep
from sqlregistry.engines import execute_named_query
from sqlregistry.models import (
    ExecuteRequest,
    ExecuteResponse,
    QueryInfo,
    QueryPublic,
    QuerySetSummary,
    QueryStoreSummary,
)
from sqlregistry.registry import count_query_parameters, describe_query_parameters

router = APIRouter(prefix="/queries", tags=["queries"])


@router.get("/", response_model=QueryStoreSummary)
def list_database_types(registry: RegistryDep) -> QueryStoreSummary:
    """Loaded database types with their query counts, and suppressed load failures."""
    registry.load()
    return QueryStoreSummary(
        db_types=[
            QuerySetSummary(db_type=t, count=len(registry.query_set(t)))
            for t in registry.db_types()
        ],
        diagnostics=[str(d) for d in registry.diagnostics],
    )


@router.post("/execute", response_model=ExecuteResponse)
def execute_query(
    body: ExecuteRequest, registry: RegistryDep, engine: EngineDep
) -> ExecuteResponse:
    """
    Run a registered query on the configured database.

    The query is looked up for the database's own type. Lookup and execution
    errors are reported in the body with success=false.
    """
    return execute_named_query(engine, body, registry=registry)


@router.get("/{db_type}", response_model=list[QueryInfo])
def list_queries(db_type: str, registry: RegistryDep) -> list[QueryInfo]:
    """Queries of db_type; an unknown type is answered with 404 by the app handler."""
    return registry.list_queries(db_type)


@router.get("/{db_type}/{query_name}", response_model=QueryPublic)
def get_query(db_type: str, query_name: str, registry: RegistryDep) -> QueryPublic:
    query = registry.get_query(db_type, query_name)
    return QueryPublic(
        db_type=db_type,
        name=query_name,
        param_count=count_query_parameters(query),
        param_details=describe_query_parameters(query),
        query=query,
    )
