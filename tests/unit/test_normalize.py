"""
Unit tests for attribute value normalization.
"""

import itertools

import pytest

from snapdiff.snapshot.normalize import JsonNumber, build_separator_pattern, normalize_values, to_text


@pytest.mark.unit
class TestNormalizeStrings:
    """Delimited string values."""

    def test_mixed_case_duplicates(self):
        """Case-insensitive dedup keeps the first spelling, then sorts."""
        assert normalize_values("x;y;X") == ("x", "y")

    def test_all_default_separators(self):
        assert normalize_values("b|a;c\nd") == ("a", "b", "c", "d")

    def test_line_endings_normalized(self):
        assert normalize_values("one\r\ntwo\rthree") == ("one", "three", "two")

    def test_trim_and_drop_empty(self):
        assert normalize_values("  a ; ;\n  ;b  ") == ("a", "b")

    def test_blank_string(self):
        assert normalize_values("   ") == ()

    def test_single_value(self):
        assert normalize_values("CN=Admins,DC=corp") == ("CN=Admins,DC=corp",)

    def test_custom_separators_single_pass(self):
        """Separators are alternatives in one split, not sequential passes."""
        assert normalize_values("a,b;c", [","]) == ("a", "b;c")
        assert normalize_values("a,b;c", [",", ";"]) == ("a", "b", "c")

    def test_multichar_separator_preferred(self):
        pattern = build_separator_pattern(["|", "||"])
        assert normalize_values("a||b|c", pattern) == ("a", "b", "c")

    def test_regex_metacharacters_escaped(self):
        assert normalize_values("a.b*c", ["*"]) == ("a.b", "c")


@pytest.mark.unit
class TestNormalizeOtherKinds:
    """Arrays, scalars and ignored kinds."""

    def test_array_of_strings(self):
        assert normalize_values(["b", "A", "a", " c "]) == ("A", "b", "c")

    def test_array_elements_not_split(self):
        """Array elements are whole values; separators inside them are kept."""
        assert normalize_values(["a;b"]) == ("a;b",)

    def test_array_with_non_strings(self):
        assert normalize_values([1, True, None, 2.5]) == ("1", "2.5", "true")

    def test_array_with_nested_object(self):
        assert normalize_values([{"b": 1, "a": 2}]) == ('{"a":2,"b":1}',)

    def test_number(self):
        assert normalize_values(42) == ("42",)

    def test_boolean(self):
        assert normalize_values(False) == ("false",)

    def test_null_and_object_ignored(self):
        assert normalize_values(None) == ()
        assert normalize_values({"nested": "value"}) == ()

    def test_to_text(self):
        assert to_text("As-Is ") == "As-Is "
        assert to_text(True) == "true"
        assert to_text(None) is None

    def test_json_number_keeps_source_text(self):
        assert to_text(JsonNumber("1e3")) == "1e3"
        assert to_text(1e3) == "1000.0"
        assert normalize_values([JsonNumber("2.50"), 3]) == ("2.50", "3")


@pytest.mark.unit
class TestNormalizeProperties:
    """Idempotence and order/case independence."""

    @pytest.mark.parametrize("raw", [
        "x;y;X",
        ["Zeta", "alpha", "Beta", "ALPHA"],
        "CN=b,DC=x|CN=a,DC=x\nCN=A,DC=x",
    ])
    def test_idempotent(self, raw):
        once = normalize_values(raw)
        assert normalize_values(list(once)) == once

    def test_permutations_normalize_identically(self):
        values = ["admin", "user", "guest"]
        results = {normalize_values(list(p)) for p in itertools.permutations(values)}
        assert results == {("admin", "guest", "user")}

    def test_case_variants_collapse(self):
        assert len(normalize_values(["Admin", "ADMIN", "admin"])) == 1

    def test_sorted_case_insensitively(self):
        assert normalize_values(["b", "C", "a"]) == ("a", "b", "C")
