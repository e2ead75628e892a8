"""Operator table for leaf conditions.

Every operator is a pure function ``(value, operand, query, options)``
returning a bool, where ``value`` is the resolved field value (possibly
``MISSING``), ``operand`` is the right-hand side from the query, and
``query`` is the top-level query expression under evaluation.

Type mismatches never raise: an operator that cannot compare its inputs
returns False.
"""

import functools
import operator as op
import re
from collections.abc import Callable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

from .exceptions import InvalidQueryError, UnsupportedOperatorError
from .fields import MISSING
from .fuzzy import fuzzy_match
from .normalize import (
    fold_accents,
    is_equal,
    is_number,
    is_sequence,
    normalize_text,
    parse_numeric_string,
    strict_equal,
    to_number,
    to_timestamp,
)
from .options import MatchOptions

OPERATOR_PREFIX = "$"

OperatorFunction = Callable[[Any, Any, Mapping[str, Any], MatchOptions], bool]


def is_operator_token(key: Any) -> bool:
    """Check whether a query key is an operator token rather than a field name."""
    return isinstance(key, str) and key.startswith(OPERATOR_PREFIX)


@functools.lru_cache(maxsize=256)
def compile_pattern(pattern: str, flags: int = 0) -> re.Pattern:
    """Compile and cache a regular expression.

    Raises:
        InvalidQueryError: If the pattern does not compile
    """
    try:
        return re.compile(pattern, flags)
    except re.error as e:
        raise InvalidQueryError(f"bad regular expression {pattern!r}: {e}") from e


def _compare_numbers(value: Any, operand: Any, compare: Callable) -> bool:
    left = to_number(value)
    right = to_number(operand)
    if left is None or right is None:
        return False
    return compare(left, right)


# Membership


def _normalize_member(value: Any, options: MatchOptions) -> Any:
    if isinstance(value, str):
        value = normalize_text(value, options)
        number = parse_numeric_string(value)
        if number is not None:
            return number
    return value


def _members(value: Any, options: MatchOptions) -> list[Any]:
    if is_sequence(value):
        return [_normalize_member(item, options) for item in value]
    return [_normalize_member(value, options)]


def _member_equal(value1: Any, value2: Any) -> bool:
    if is_number(value1) and is_number(value2):
        return value1 == value2
    return strict_equal(value1, value2)


def matches_any(value: Any, operand: Any, options: MatchOptions) -> bool:
    """Check whether any member of value equals any member of operand.

    Either side may be a scalar (a one-member set) or a sequence.
    Strings are folded per options and numeric strings compare as numbers.
    """
    operand_members = _members(operand, options)
    return any(
        _member_equal(member, candidate)
        for member in _members(value, options)
        for candidate in operand_members
    )


# Strings


def _string_pair(
    value: Any, operand: Any, options: MatchOptions
) -> tuple[str, str] | None:
    if not (isinstance(value, str) and isinstance(operand, str)):
        return None
    if options.ignore_accents:
        return fold_accents(value), fold_accents(operand)
    return value, operand


def _flags(options: MatchOptions) -> int:
    return re.IGNORECASE if options.ignore_case else 0


def matches_pattern(value: Any, operand: Any, options: MatchOptions) -> bool:
    """Search value for the operand pattern."""
    pair = _string_pair(value, operand, options)
    if pair is None:
        return False
    text, pattern = pair
    return compile_pattern(pattern, _flags(options)).search(text) is not None


def starts_with(value: Any, operand: Any, options: MatchOptions) -> bool:
    """Check that value begins with the operand, taken literally."""
    pair = _string_pair(value, operand, options)
    if pair is None:
        return False
    text, prefix = pair
    pattern = compile_pattern(re.escape(prefix), _flags(options))
    return pattern.match(text) is not None


def ends_with(value: Any, operand: Any, options: MatchOptions) -> bool:
    """Check that value ends with the operand, taken literally."""
    pair = _string_pair(value, operand, options)
    if pair is None:
        return False
    text, suffix = pair
    pattern = compile_pattern(re.escape(suffix) + r"\Z", _flags(options))
    return pattern.search(text) is not None


def contains_text(value: Any, operand: Any, options: MatchOptions) -> bool:
    """Check that value contains the operand anywhere, taken literally."""
    pair = _string_pair(value, operand, options)
    if pair is None:
        return False
    text, fragment = pair
    pattern = compile_pattern(re.escape(fragment), _flags(options))
    return pattern.search(text) is not None


# Dates


def compare_dates(
    value: Any,
    operand: Any,
    query: Mapping[str, Any],
    options: MatchOptions,
    lookup: Callable[[str], OperatorFunction] | None = None,
) -> bool:
    """Compare two timestamps with ``options.date_comparison_operator``.

    The comparison is looked up with ``lookup``, which an
    ``OperatorRegistry`` binds to its own table. Unbound, the built-in
    operators are used.
    """
    left = to_timestamp(value)
    right = to_timestamp(operand)
    if left is None or right is None:
        return False
    if lookup is None:
        lookup = BUILTIN_OPERATORS.__getitem__
    compare = lookup(options.date_comparison_operator)
    return compare(left, right, query, options)


BUILTIN_OPERATORS: Mapping[str, OperatorFunction] = MappingProxyType(
    {
        "$eq": lambda a, b, query, opts: is_equal(a, b, opts),
        "$ne": lambda a, b, query, opts: not is_equal(a, b, opts),
        "$gt": lambda a, b, query, opts: _compare_numbers(a, b, op.gt),
        "$lt": lambda a, b, query, opts: _compare_numbers(a, b, op.lt),
        "$gte": lambda a, b, query, opts: _compare_numbers(a, b, op.ge),
        "$lte": lambda a, b, query, opts: _compare_numbers(a, b, op.le),
        "$in": lambda a, b, query, opts: matches_any(a, b, opts),
        "$nin": lambda a, b, query, opts: not matches_any(a, b, opts),
        "$exists": lambda a, b, query, opts: (
            isinstance(b, bool) and (a is not MISSING) == b
        ),
        "$regex": lambda a, b, query, opts: matches_pattern(a, b, opts),
        "$startsWith": lambda a, b, query, opts: starts_with(a, b, opts),
        "$endsWith": lambda a, b, query, opts: ends_with(a, b, opts),
        "$contains": lambda a, b, query, opts: contains_text(a, b, opts),
        "$size": lambda a, b, query, opts: (
            is_sequence(a) and is_number(b) and len(a) == b
        ),
        "$fuzz": lambda a, b, query, opts: (
            isinstance(a, str)
            and isinstance(b, str)
            and fuzzy_match(a, b, opts.fuzzy_threshold)
        ),
        "$date": compare_dates,
    }
)


class OperatorRegistry:
    """Read-only mapping from operator token to operator function."""

    def __init__(self, operators: Mapping[str, OperatorFunction] | None = None):
        """Initialize with an operator table (default: the built-in operators)."""
        table = dict(BUILTIN_OPERATORS if operators is None else operators)
        for name, func in table.items():
            if not is_operator_token(name) or len(name) == 1:
                raise ValueError(
                    f"Operator names must start with '{OPERATOR_PREFIX}': {name!r}"
                )
            if not callable(func):
                raise TypeError(f"Operator {name} is not callable")
        if _is_date_comparison(table.get("$date")):
            table["$date"] = functools.partial(compare_dates, lookup=self.get)
        self._operators = MappingProxyType(table)

    def get(self, name: str) -> OperatorFunction:
        """Look up an operator.

        Raises:
            UnsupportedOperatorError: If the operator is not registered
        """
        try:
            return self._operators[name]
        except KeyError:
            raise UnsupportedOperatorError(name) from None

    def evaluate(
        self,
        name: str,
        value: Any,
        operand: Any,
        query: Mapping[str, Any],
        options: MatchOptions,
    ) -> bool:
        """Apply a named operator to a field value and operand."""
        return bool(self.get(name)(value, operand, query, options))

    def with_operators(
        self, operators: Mapping[str, OperatorFunction]
    ) -> "OperatorRegistry":
        """Return a new registry extended (or overridden) with extra operators."""
        return OperatorRegistry({**self._operators, **operators})

    def names(self) -> list[str]:
        """Get registered operator names."""
        return sorted(self._operators)

    def __contains__(self, name: object) -> bool:
        return name in self._operators

    def __iter__(self) -> Iterator[str]:
        return iter(self._operators)

    def __len__(self) -> int:
        return len(self._operators)


def _is_date_comparison(func: Any) -> bool:
    if isinstance(func, functools.partial):
        func = func.func
    return func is compare_dates


DEFAULT_REGISTRY = OperatorRegistry()
