"""
Query registry: database type -> {query name -> query text}.

Populated once, on first lookup, from ``<sql_dir>/<db_type>/*.sql``. Loading is
best-effort: an unreadable directory or file never fails the load; it is logged
and kept as a LoadDiagnostic so callers and health checks can inspect it.
After loading the store is read-only and lookups take no lock.
"""

import logging
import threading
from collections.abc import Iterable, Mapping
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import NamedTuple

from sqlregistry.core.config import settings
from sqlregistry.models import DatabaseTypeEnum, QueryInfo

from .errors import QueryNotFound, UnknownDatabaseType
from .parser import count_query_parameters, describe_query_parameters, parse_query_blocks

_log = logging.getLogger(__name__)

DEFAULT_DB_TYPES: tuple[str, ...] = tuple(t.value for t in DatabaseTypeEnum)


class LoadDiagnostic(NamedTuple):
    db_type: str
    path: Path
    error: str

    def __str__(self) -> str:
        return f"{self.db_type}: {self.path}: {self.error}"


def _key(db_type: str) -> str:
    return db_type.value if isinstance(db_type, Enum) else str(db_type)


def load_query_directory(
    directory: Path, db_type: str, suffix: str = ".sql"
) -> tuple[dict[str, str], list[LoadDiagnostic]]:
    """
    Parse every ``*suffix`` file of directory (sorted by name) into one query set.

    Later definitions of a name overwrite earlier ones. Read errors are returned
    as diagnostics, never raised.
    """
    queries: dict[str, str] = {}
    diagnostics: list[LoadDiagnostic] = []
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        diagnostics.append(LoadDiagnostic(db_type, directory, str(e)))
        return queries, diagnostics

    for path in entries:
        if not path.name.endswith(suffix):
            continue
        try:
            if path.is_dir():
                continue
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            diagnostics.append(LoadDiagnostic(db_type, path, str(e)))
            continue
        for name, query in parse_query_blocks(content):
            queries[name] = query
    return queries, diagnostics


class QueryRegistry:
    """Lazily loaded, thread-safe, read-only store of named SQL queries."""

    def __init__(
        self,
        sql_dir: Path | str,
        db_types: Iterable[str] = DEFAULT_DB_TYPES,
        *,
        suffix: str = ".sql",
    ) -> None:
        self.sql_dir = Path(sql_dir)
        self.suffix = suffix
        self._db_types = tuple(_key(t) for t in db_types)
        self._queries: Mapping[str, Mapping[str, str]] = MappingProxyType({})
        self._diagnostics: tuple[LoadDiagnostic, ...] = ()
        self._loaded = False
        self._lock = threading.Lock()

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def diagnostics(self) -> tuple[LoadDiagnostic, ...]:
        """Load failures that were suppressed (empty until loaded)."""
        return self._diagnostics

    def load(self) -> tuple[LoadDiagnostic, ...]:
        """
        Populate the store exactly once; return the diagnostics of that single attempt.

        Concurrent callers block until the first one finishes. The outcome is cached
        even when the attempt failed part-way: there is no retry.
        """
        if self._loaded:
            return self._diagnostics
        with self._lock:
            if self._loaded:
                return self._diagnostics
            queries: dict[str, Mapping[str, str]] = {}
            diagnostics: list[LoadDiagnostic] = []
            try:
                for db_type in self._db_types:
                    directory = self.sql_dir / db_type
                    try:
                        query_set, problems = load_query_directory(
                            directory, db_type, self.suffix
                        )
                    except OSError as e:
                        query_set, problems = {}, [LoadDiagnostic(db_type, directory, str(e))]
                    queries[db_type] = MappingProxyType(query_set)
                    diagnostics.extend(problems)
            finally:
                self._queries = MappingProxyType(queries)
                self._diagnostics = tuple(diagnostics)
                self._loaded = True
            for d in diagnostics:
                _log.warning("Skipped SQL source %s", d)
            _log.info(
                "Loaded SQL queries from %s: %s",
                self.sql_dir,
                ", ".join(f"{t}={len(q)}" for t, q in queries.items()) or "none",
            )
            return self._diagnostics

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_query(self, db_type: str, query_name: str) -> str:
        """Return the stored text of query_name for db_type."""
        query_set = self.query_set(db_type)
        try:
            return query_set[query_name]
        except KeyError:
            raise QueryNotFound(_key(db_type), query_name) from None

    def query_set(self, db_type: str) -> Mapping[str, str]:
        self.load()
        key = _key(db_type)
        query_set = self._queries.get(key)
        if query_set is None:
            raise UnknownDatabaseType(key)
        return query_set

    def db_types(self) -> list[str]:
        self.load()
        return list(self._queries)

    def query_names(self, db_type: str) -> list[str]:
        return sorted(self.query_set(db_type))

    def list_queries(self, db_type: str) -> list[QueryInfo]:
        """All queries of db_type sorted by name, with their positional parameter count and names."""
        query_set = self.query_set(db_type)
        return [
            QueryInfo(
                name=name,
                param_count=count_query_parameters(query_set[name]),
                param_details=describe_query_parameters(query_set[name]),
                query=query_set[name],
            )
            for name in sorted(query_set)
        ]


_registry: QueryRegistry | None = None
_registry_lock = threading.Lock()


def get_registry() -> QueryRegistry:
    """Return the process-wide QueryRegistry built from settings (thread-safe, lazy)."""
    global _registry
    if _registry is None:
        with _registry_lock:
            if _registry is None:
                _registry = QueryRegistry(
                    settings.SQL_DIR,
                    settings.SQL_DATABASE_TYPES,
                    suffix=settings.SQL_FILE_SUFFIX,
                )
    return _registry


def load_sql_queries() -> tuple[LoadDiagnostic, ...]:
    """Trigger the one-time load of the process-wide registry."""
    return get_registry().load()
