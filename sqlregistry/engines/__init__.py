"""
Named-query execution.

Exports: execute_named_query, classify_statement.
"""

from sqlregistry.engines.executor import classify_statement, execute_named_query

__all__ = [
    "execute_named_query",
    "classify_statement",
]
