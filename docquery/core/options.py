"""Match options controlling value normalization during a search."""

from collections.abc import Mapping
from typing import Any

import msgspec

from .exceptions import InvalidOptionsError

DEFAULT_FUZZY_THRESHOLD = 0.8
DEFAULT_DATE_OPERATOR = "$eq"

# Operators that can be applied to a pair of timestamps by $date
DATE_COMPARISON_OPERATORS = frozenset({"$eq", "$ne", "$gt", "$gte", "$lt", "$lte"})


class MatchOptions(msgspec.Struct, frozen=True, kw_only=True, rename="camel"):
    """Read-only options for one search call.

    Wire form uses camelCase keys (``ignoreCase``, ``ignoreAccents``,
    ``fuzzyThreshold``, ``dateComparisonOperator``).
    """

    ignore_case: bool = False
    ignore_accents: bool = False
    fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD
    date_comparison_operator: str = DEFAULT_DATE_OPERATOR

    def __post_init__(self):
        if isinstance(self.fuzzy_threshold, bool) or not (
            0.0 <= self.fuzzy_threshold <= 1.0
        ):
            raise InvalidOptionsError(
                f"fuzzyThreshold must be between 0 and 1, got {self.fuzzy_threshold!r}"
            )
        if self.date_comparison_operator not in DATE_COMPARISON_OPERATORS:
            allowed = ", ".join(sorted(DATE_COMPARISON_OPERATORS))
            raise InvalidOptionsError(
                f"dateComparisonOperator must be one of {allowed}, "
                f"got {self.date_comparison_operator!r}"
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "MatchOptions":
        """Create options from their wire form.

        Accepts the nested ``{"date": {"operator": ...}}`` form as an alias
        for ``dateComparisonOperator``. Unrecognized keys are ignored.

        Raises:
            InvalidOptionsError: If a recognized option has a bad value.
        """
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise InvalidOptionsError(
                f"options must be a mapping, got {type(data).__name__}"
            )

        data = dict(data)
        if "date" in data:
            date_options = data.pop("date")
            if not isinstance(date_options, Mapping):
                raise InvalidOptionsError("'date' must be a mapping with an 'operator'")
            if "operator" in date_options:
                data.setdefault("dateComparisonOperator", date_options["operator"])

        try:
            return msgspec.convert(data, cls)
        except msgspec.ValidationError as e:
            # Errors from __post_init__ arrive already prefixed
            message = str(e).removeprefix(InvalidOptionsError.PREFIX)
            raise InvalidOptionsError(message) from e

    def to_dict(self) -> dict[str, Any]:
        """Convert to wire form."""
        return msgspec.to_builtins(self)


def coerce_options(options: "MatchOptions | Mapping[str, Any] | None") -> MatchOptions:
    """Accept options as a struct, a wire-form mapping, or None."""
    if isinstance(options, MatchOptions):
        return options
    return MatchOptions.from_mapping(options)
