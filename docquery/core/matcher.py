"""Recursive matching of query expressions against records.

A query expression maps field paths to conditions. A condition is either
a literal (implicit ``$eq``), a map of operator tokens to operands, or a
map of field names that is matched structurally against a nested map.
All conditions at one level must hold.
"""

from collections.abc import Mapping
from typing import Any

from .exceptions import InvalidQueryError, UnsupportedOperatorError
from .fields import resolve_path
from .normalize import is_mapping
from .operators import (
    DEFAULT_REGISTRY,
    OperatorRegistry,
    compile_pattern,
    is_operator_token,
)
from .options import MatchOptions, coerce_options

DEFAULT_MAX_DEPTH = 32


class QueryMatcher:
    """Evaluates query expressions against individual records."""

    def __init__(
        self,
        registry: OperatorRegistry | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        """Initialize matcher.

        Args:
            registry: Operator table (default: built-in operators)
            max_depth: Maximum nesting of structural sub-queries
        """
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self.registry = DEFAULT_REGISTRY if registry is None else registry
        self.max_depth = max_depth

    def validate(self, query: Any) -> None:
        """Check a query expression without looking at any record.

        Raises:
            InvalidQueryError: If the query is not a mapping, has a bad key,
                mixes operators and field names in one condition, nests too
                deeply, or carries a regular expression that does not compile
            UnsupportedOperatorError: If an operator token is not registered
        """
        if not is_mapping(query):
            raise InvalidQueryError(
                f"query must be a mapping, got {type(query).__name__}"
            )
        self._validate_expression(query, "", 0)

    def matches(
        self,
        record: Any,
        query: Mapping[str, Any],
        options: MatchOptions | Mapping[str, Any] | None = None,
        validate: bool = True,
    ) -> bool:
        """Check whether a record satisfies a query expression.

        Args:
            record: Record to test
            query: Query expression
            options: Match options (struct or wire-form mapping)
            validate: Validate the query first; callers that already
                validated it once for a whole scan pass False

        Returns:
            True if every condition holds
        """
        if validate:
            self.validate(query)
        return self._match(record, query, query, coerce_options(options))

    def _match(
        self,
        record: Any,
        expression: Mapping[str, Any],
        root: Mapping[str, Any],
        options: MatchOptions,
    ) -> bool:
        for path, condition in expression.items():
            value = resolve_path(record, path)
            if not self._match_condition(value, condition, root, options):
                return False
        return True

    def _match_condition(
        self,
        value: Any,
        condition: Any,
        root: Mapping[str, Any],
        options: MatchOptions,
    ) -> bool:
        if is_mapping(condition):
            if _is_operator_map(condition):
                return all(
                    self.registry.evaluate(name, value, operand, root, options)
                    for name, operand in condition.items()
                )

            if is_mapping(value):
                return self._match(value, condition, root, options)

        return self.registry.evaluate("$eq", value, condition, root, options)

    def _validate_expression(
        self, expression: Mapping[str, Any], prefix: str, depth: int
    ) -> None:
        if depth >= self.max_depth:
            raise InvalidQueryError(
                f"nesting deeper than {self.max_depth} levels", prefix or None
            )

        for key, condition in expression.items():
            if not isinstance(key, str) or not key:
                raise InvalidQueryError(
                    f"field paths must be non-empty strings, got {key!r}",
                    prefix or None,
                )
            if is_operator_token(key):
                # Operators are only valid inside a field's condition
                raise UnsupportedOperatorError(key)

            path = f"{prefix}.{key}" if prefix else key
            if is_mapping(condition):
                self._validate_condition(condition, path, depth)

    def _validate_condition(
        self, condition: Mapping[str, Any], path: str, depth: int
    ) -> None:
        if not _is_operator_map(condition):
            self._validate_expression(condition, path, depth + 1)
            return

        if not all(is_operator_token(key) for key in condition):
            raise InvalidQueryError("condition mixes operators and field names", path)

        for name, operand in condition.items():
            self.registry.get(name)
            if name == "$regex" and isinstance(operand, str):
                compile_pattern(operand)


def _is_operator_map(condition: Mapping[str, Any]) -> bool:
    return any(is_operator_token(key) for key in condition)
