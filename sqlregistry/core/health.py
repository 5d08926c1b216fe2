"""
Health-check helpers for liveness and readiness checks.

Liveness  — is the process alive?  (cheap, no I/O)
Readiness — can it serve lookups?  (registry loaded cleanly + database reachable when configured)
"""

import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from sqlregistry.core.db import get_engine
from sqlregistry.registry import get_registry

logger = logging.getLogger(__name__)


def check_registry() -> list[str]:
    """Trigger the one-time load; return suppressed load failures as strings."""
    return [str(d) for d in get_registry().load()]


def check_database() -> bool:
    """SELECT 1 on DATABASE_URL. True when ok or when no database is configured."""
    engine = get_engine()
    if engine is None:
        return True
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        logger.warning("Database check failed", exc_info=True)
        return False


def liveness_check() -> tuple[bool, list[str]]:
    return True, []


def readiness_check() -> tuple[bool, list[str]]:
    """Return (ok, failures). failures lists registry diagnostics and "database" if down."""
    failures = check_registry()
    if not check_database():
        failures.append("database")
    return not failures, failures
