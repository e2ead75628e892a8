"""Predicate evaluation over loosely-structured records.

Filters a record collection with a document-database style query
expression (field path -> operator -> operand).

Main components:
- SearchEngine: full-scan search returning a MatchResult
- QueryMatcher: per-record matching of a query expression
- MatchOptions: case/accent folding, fuzzy threshold, date operator
"""

from .core import (
    MISSING,
    InvalidOptionsError,
    InvalidQueryError,
    MatchOptions,
    OperatorRegistry,
    QueryError,
    QueryMatcher,
    UnsupportedOperatorError,
)
from .engine import MatchResult, SearchEngine

__all__ = [
    "SearchEngine",
    "MatchResult",
    "QueryMatcher",
    "MatchOptions",
    "OperatorRegistry",
    "MISSING",
    "QueryError",
    "InvalidQueryError",
    "UnsupportedOperatorError",
    "InvalidOptionsError",
]

__version__ = "1.0.0"
