"""Tests for the operator table and registry."""

from datetime import date, datetime

import pytest

from docquery.core.exceptions import InvalidQueryError, UnsupportedOperatorError
from docquery.core.fields import MISSING
from docquery.core.operators import (
    BUILTIN_OPERATORS,
    DEFAULT_REGISTRY,
    OperatorRegistry,
    is_operator_token,
)
from docquery.core.options import MatchOptions

DEFAULT = MatchOptions()
NOCASE = MatchOptions(ignore_case=True)
NOACCENT = MatchOptions(ignore_accents=True)


def check(name, value, operand, options=DEFAULT):
    """Evaluate one built-in operator."""
    return DEFAULT_REGISTRY.evaluate(name, value, operand, {}, options)


class TestEquality:
    """Test $eq and $ne."""

    def test_eq_strings(self):
        """String equality honours case and accent options."""
        assert check("$eq", "Alice", "Alice")
        assert not check("$eq", "Alice", "alice")
        assert check("$eq", "Alice", "alice", NOCASE)
        assert check("$eq", "café", "cafe", NOACCENT)

    def test_eq_non_strings(self):
        """Other values compare strictly."""
        assert check("$eq", 30, 30.0)
        assert not check("$eq", 1, True)
        assert not check("$eq", "30", 30)
        assert check("$eq", None, None)
        assert not check("$eq", MISSING, None)

    def test_eq_folds_sequence_elements(self):
        """Strings inside sequences and maps are folded like scalars."""
        assert check("$eq", ["Dev", "Ops"], ["dev", "ops"], NOCASE)
        assert not check("$eq", ["Dev", "Ops"], ["dev", "ops"])
        assert check("$eq", {"city": "São Paulo"}, {"city": "Sao Paulo"}, NOACCENT)
        assert check("$eq", [{"name": "ATLAS"}], [{"name": "atlas"}], NOCASE)
        assert not check("$eq", ["Dev"], ["dev", "ops"], NOCASE)
        assert not check("$eq", [True], [1], NOCASE)

    @pytest.mark.parametrize(
        "value,operand,options",
        [
            ("A", "a", NOCASE),
            (["A", "B"], ["a", "b"], NOCASE),
            ({"city": "São"}, {"city": "sao"}, NOACCENT),
            ("A", "a", DEFAULT),
            (1, 1.0, DEFAULT),
            (MISSING, None, DEFAULT),
            (["a"], ["a"], DEFAULT),
            ("é", "e", NOACCENT),
            (True, 1, DEFAULT),
        ],
    )
    def test_ne_is_complement(self, value, operand, options):
        """$ne is always the negation of $eq."""
        assert check("$ne", value, operand, options) is not check(
            "$eq", value, operand, options
        )


class TestNumericComparison:
    """Test $gt, $gte, $lt, $lte."""

    def test_numbers(self):
        """Plain numbers compare by value."""
        assert check("$gt", 30, 26)
        assert not check("$gt", 26, 26)
        assert check("$gte", 26, 26)
        assert check("$lt", 1.5, 2)
        assert check("$lte", 2, 2.0)

    def test_numeric_strings_coerce(self):
        """Numeric strings are compared as numbers on either side."""
        assert check("$gt", "41", 40)
        assert check("$gt", "10", "9")
        assert check("$lte", 5, "5.0")

    def test_non_coercible_is_false(self):
        """Values without a numeric reading never compare."""
        for name in ("$gt", "$gte", "$lt", "$lte"):
            assert not check(name, "abc", 1)
            assert not check(name, 1, "abc")
            assert not check(name, True, 0)
            assert not check(name, MISSING, 0)
            assert not check(name, None, 0)

    def test_huge_integers(self):
        """Integers beyond float range compare as infinities."""
        assert check("$gt", 10**400, 1)
        assert check("$lt", -(10**400), 1)
        assert not check("$lte", 10**400, 1)
        assert not check("$gt", 1, 10**400)


class TestMembership:
    """Test $in and $nin."""

    def test_scalar_in_list(self):
        """A scalar matches when any operand member equals it."""
        assert check("$in", "dev", ["admin", "dev"])
        assert not check("$in", "ops", ["admin", "dev"])

    def test_list_in_list(self):
        """Sequences on both sides match on any shared member."""
        assert check("$in", ["admin", "dev"], ["dev", "ops"])
        assert not check("$in", ["admin"], ["dev", "ops"])
        assert not check("$in", [], ["dev"])

    def test_list_against_scalar(self):
        """A scalar operand is a one-member set."""
        assert check("$in", ["admin", "dev"], "dev")

    def test_numeric_strings_match_numbers(self):
        """Numeric strings and numbers meet as numbers."""
        assert check("$in", "42", [41, 42])
        assert check("$in", 42, ["42.0"])

    def test_folding(self):
        """Case and accent options apply to every member."""
        assert not check("$in", ["Dev"], ["dev"])
        assert check("$in", ["Dev"], ["dev"], NOCASE)
        assert check("$in", "São Paulo", ["sao paulo"], MatchOptions(
            ignore_case=True, ignore_accents=True
        ))

    def test_missing_never_in(self):
        """An absent field is in nothing."""
        assert not check("$in", MISSING, [None, "", 0])
        assert check("$nin", MISSING, [None, "", 0])

    @pytest.mark.parametrize(
        "value,operand",
        [("a", ["a"]), ("a", ["b"]), (["x", "y"], "y"), (1, ["1"]), (None, [None])],
    )
    def test_nin_is_complement(self, value, operand):
        """$nin is always the negation of $in."""
        assert check("$nin", value, operand) is not check("$in", value, operand)


class TestExists:
    """Test $exists."""

    def test_present_and_absent(self):
        """Presence is compared to the boolean operand."""
        assert check("$exists", "x", True)
        assert not check("$exists", "x", False)
        assert check("$exists", MISSING, False)
        assert not check("$exists", MISSING, True)

    def test_none_counts_as_present(self):
        """A None value is present."""
        assert check("$exists", None, True)

    def test_non_boolean_operand(self):
        """Only a boolean operand can be satisfied."""
        assert not check("$exists", "x", 1)
        assert not check("$exists", MISSING, 0)


class TestStringOperators:
    """Test $regex, $startsWith, $endsWith, $contains."""

    def test_regex(self):
        """Patterns search anywhere in the value."""
        assert check("$regex", "alice@example.com", r"@example\.com$")
        assert not check("$regex", "Hello", "^h")
        assert check("$regex", "Hello", "^h", NOCASE)
        assert check("$regex", "São", "^Sao$", NOACCENT)

    def test_regex_type_mismatch(self):
        """Non-string sides never match."""
        assert not check("$regex", 5, "5")
        assert not check("$regex", "5", 5)
        assert not check("$regex", MISSING, ".*")

    def test_invalid_regex(self):
        """A pattern that does not compile is a query error."""
        with pytest.raises(InvalidQueryError):
            check("$regex", "text", "(")

    def test_starts_with(self):
        """Prefixes are literal."""
        assert check("$startsWith", "bob", "b")
        assert not check("$startsWith", "Bob", "b")
        assert check("$startsWith", "Bob", "b", NOCASE)
        assert check("$startsWith", "a.b", "a.")
        assert not check("$startsWith", "abc", ".")

    def test_ends_with(self):
        """Suffixes are literal and anchored at the very end."""
        assert check("$endsWith", "report.txt", ".txt")
        assert not check("$endsWith", "reporttxt", ".txt")
        assert not check("$endsWith", "line\n", "line")
        assert check("$endsWith", "CAFÉ", "cafe", MatchOptions(
            ignore_case=True, ignore_accents=True
        ))

    def test_contains(self):
        """Fragments match anywhere, literally."""
        assert check("$contains", "Hello World", "o W")
        assert not check("$contains", "Hello World", "o w")
        assert check("$contains", "Hello World", "o w", NOCASE)
        assert check("$contains", "1+1=2", "1+1")
        assert not check("$contains", "11=2", "1+1")

    def test_string_operators_reject_non_strings(self):
        """Lists and numbers are not searched."""
        for name in ("$startsWith", "$endsWith", "$contains"):
            assert not check(name, ["abc"], "a")
            assert not check(name, 123, "1")


class TestSize:
    """Test $size."""

    def test_sequence_length(self):
        """Sequences match on exact length."""
        assert check("$size", [1, 2], 2)
        assert check("$size", [], 0)
        assert not check("$size", [1, 2], 3)

    @pytest.mark.parametrize("value", ["ab", {"a": 1, "b": 2}, 2, None, MISSING])
    def test_non_sequence_never_matches(self, value):
        """Strings, maps, and scalars have no size."""
        assert not check("$size", value, 2)
        assert not check("$size", value, 1)
        assert not check("$size", value, 0)

    def test_boolean_operand(self):
        """True is not a length."""
        assert not check("$size", [1], True)


class TestFuzz:
    """Test $fuzz."""

    def test_uses_threshold_from_options(self):
        """The option threshold decides non-substring matches."""
        assert not check("$fuzz", "hello world", "hlo")
        assert check("$fuzz", "hello world", "hlo", MatchOptions(fuzzy_threshold=0.7))

    def test_substring(self):
        """Substrings always match."""
        assert check("$fuzz", "Hello World", "WORLD")

    def test_type_mismatch(self):
        """Only strings are fuzzy matched."""
        assert not check("$fuzz", 123, "1")
        assert not check("$fuzz", MISSING, "a")


class TestDate:
    """Test $date."""

    def test_default_equality(self):
        """Without an option, timestamps compare for equality."""
        assert check("$date", "2023-11-14T22:13:20Z", 1700000000000)
        assert check("$date", datetime(2024, 1, 1), "2024-01-01")
        assert check("$date", date(2024, 1, 1), "2024-01-01T00:00:00Z")
        assert not check("$date", "2024-01-02", "2024-01-01")

    def test_comparison_operator_option(self):
        """The date operator option selects the comparison."""
        after = MatchOptions(date_comparison_operator="$gt")
        assert check("$date", "2024-01-02", "2024-01-01", after)
        assert not check("$date", "2023-12-31", "2024-01-01", after)

        before = MatchOptions(date_comparison_operator="$lte")
        assert check("$date", "2024-01-01", "2024-01-01", before)

        differs = MatchOptions(date_comparison_operator="$ne")
        assert check("$date", "2024-01-02", "2024-01-01", differs)

    def test_unparseable_is_false(self):
        """Bad dates never match, even under $ne."""
        differs = MatchOptions(date_comparison_operator="$ne")
        assert not check("$date", "not a date", "2024-01-01")
        assert not check("$date", "not a date", "2024-01-01", differs)
        assert not check("$date", MISSING, "2024-01-01")
        assert not check("$date", True, 1)
        assert not check("$date", 10**400, "2024-01-01")
        assert not check("$date", "2024-01-01", -(10**400), differs)


class TestOperatorRegistry:
    """Test registry lookup and extension."""

    def test_builtin_names(self):
        """The default registry carries every built-in operator."""
        expected = {
            "$eq", "$ne", "$gt", "$lt", "$gte", "$lte", "$in", "$nin",
            "$exists", "$regex", "$startsWith", "$endsWith", "$contains",
            "$size", "$fuzz", "$date",
        }  # fmt: skip
        assert set(DEFAULT_REGISTRY.names()) == expected
        assert len(DEFAULT_REGISTRY) == len(BUILTIN_OPERATORS) == 16
        assert "$eq" in DEFAULT_REGISTRY
        assert "eq" not in DEFAULT_REGISTRY

    def test_unknown_operator(self):
        """Unknown tokens raise UnsupportedOperatorError."""
        with pytest.raises(UnsupportedOperatorError) as exc_info:
            DEFAULT_REGISTRY.get("$or")
        assert exc_info.value.operator == "$or"
        assert "$or" in str(exc_info.value)

    def test_with_operators(self):
        """Extension returns a new registry and leaves the original alone."""
        registry = DEFAULT_REGISTRY.with_operators(
            {"$even": lambda a, b, query, opts: isinstance(a, int) and (a % 2 == 0) == b}
        )
        assert registry.evaluate("$even", 4, True, {}, DEFAULT) is True
        assert registry.evaluate("$even", 3, True, {}, DEFAULT) is False
        assert "$even" not in DEFAULT_REGISTRY
        assert "$eq" in registry

    def test_invalid_names_rejected(self):
        """Operator names need the $ prefix and a callable."""
        with pytest.raises(ValueError):
            OperatorRegistry({"even": lambda a, b, q, o: True})
        with pytest.raises(ValueError):
            OperatorRegistry({"$": lambda a, b, q, o: True})
        with pytest.raises(TypeError):
            OperatorRegistry({"$even": "not callable"})

    def test_is_operator_token(self):
        """Only $-prefixed strings are operator tokens."""
        assert is_operator_token("$eq")
        assert not is_operator_token("eq")
        assert not is_operator_token(1)

    def test_date_uses_registry_comparisons(self):
        """$date applies the comparison registered in its own registry."""
        always = DEFAULT_REGISTRY.with_operators({"$eq": lambda a, b, q, o: True})
        extended = always.with_operators({"$even": lambda a, b, q, o: False})

        for registry in (always, extended):
            assert registry.evaluate("$date", "2024-01-01", "1999-01-01", {}, DEFAULT)
            assert not registry.evaluate("$date", "soon", "1999-01-01", {}, DEFAULT)
        assert not check("$date", "2024-01-01", "1999-01-01")
