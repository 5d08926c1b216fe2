from typing import Annotated

from fastapi import Depends, HTTPException, status
from sqlalchemy.engine import Engine

from sqlregistry.core.db import get_engine
from sqlregistry.registry import QueryRegistry, get_registry


def get_query_registry() -> QueryRegistry:
    return get_registry()


def get_db_engine() -> Engine:
    engine = get_engine()
    if engine is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="DATABASE_URL is not configured",
        )
    return engine


RegistryDep = Annotated[QueryRegistry, Depends(get_query_registry)]
EngineDep = Annotated[Engine, Depends(get_db_engine)]
