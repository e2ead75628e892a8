"""Query matching core.

Main components:
- normalize: accent/case folding and numeric/timestamp coercion
- fields: dotted field path resolution with the MISSING sentinel
- fuzzy: subsequence-based approximate string matching
- operators: the operator table and OperatorRegistry
- matcher: recursive QueryMatcher
"""

from .exceptions import (
    InvalidOptionsError,
    InvalidQueryError,
    QueryError,
    RecordSourceError,
    UnsupportedOperatorError,
)
from .fields import MISSING, resolve_path
from .fuzzy import fuzzy_match, fuzzy_score
from .matcher import QueryMatcher
from .normalize import fold_accents, is_equal, to_number, to_timestamp
from .operators import (
    BUILTIN_OPERATORS,
    DEFAULT_REGISTRY,
    OperatorFunction,
    OperatorRegistry,
    is_operator_token,
)
from .options import MatchOptions

__all__ = [
    "QueryMatcher",
    "MatchOptions",
    # Operators
    "OperatorRegistry",
    "OperatorFunction",
    "BUILTIN_OPERATORS",
    "DEFAULT_REGISTRY",
    "is_operator_token",
    # Values
    "MISSING",
    "resolve_path",
    "fold_accents",
    "is_equal",
    "to_number",
    "to_timestamp",
    "fuzzy_match",
    "fuzzy_score",
    # Errors
    "QueryError",
    "InvalidQueryError",
    "UnsupportedOperatorError",
    "InvalidOptionsError",
    "RecordSourceError",
]
