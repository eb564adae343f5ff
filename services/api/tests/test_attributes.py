"""Tests for attribute resolution."""

from repricer.services.attributes import ParseDiagnostic, parse_float, resolve, resolve_numeric
from repricer.services.catalog import AttributeRecord


def _attrs(*items: tuple[str, str, str]) -> tuple[AttributeRecord, ...]:
    return tuple(AttributeRecord(namespace=ns, key=k, value=v) for ns, k, v in items)


class TestResolve:
    """Tests for raw attribute lookup."""

    def test_first_match_in_custom_namespace(self):
        attrs = _attrs(
            ("global", "weight", "9"),
            ("custom", "weight", "5"),
            ("custom", "weight", "7"),
        )
        assert resolve(attrs, "weight") == "5"

    def test_missing_key(self):
        assert resolve(_attrs(("custom", "diamond_1", "Gemstones")), "diamond_2") is None

    def test_other_namespace_only(self):
        assert resolve(_attrs(("specs", "weight", "5")), "weight") is None


class TestResolveNumeric:
    """Tests for numeric attribute normalization."""

    def test_plain_number(self):
        assert resolve_numeric(_attrs(("custom", "weight", "5.25")), "weight") == 5.25

    def test_unit_tagged_json_object(self):
        attrs = _attrs(("custom", "weight", '{"value": 5, "unit": "GRAMS"}'))
        assert resolve_numeric(attrs, "weight") == 5.0

    def test_json_object_with_string_value(self):
        attrs = _attrs(("custom", "weight", ' {"value": "3.5", "unit": "GRAMS"} '))
        assert resolve_numeric(attrs, "weight") == 3.5

    def test_numeric_prefix_is_accepted(self):
        assert resolve_numeric(_attrs(("custom", "weight", "4.5 g")), "weight") == 4.5

    def test_missing_is_zero_without_diagnostic(self):
        diagnostics: list[ParseDiagnostic] = []
        assert resolve_numeric((), "weight", diagnostics) == 0.0
        assert resolve_numeric(_attrs(("custom", "weight", "  ")), "weight", diagnostics) == 0.0
        assert diagnostics == []

    def test_garbage_is_zero_with_diagnostic(self):
        diagnostics: list[ParseDiagnostic] = []
        assert resolve_numeric(_attrs(("custom", "weight", "heavy")), "weight", diagnostics) == 0.0
        assert len(diagnostics) == 1
        assert diagnostics[0].key == "weight"
        assert diagnostics[0].raw_value == "heavy"

    def test_broken_json_is_zero_with_diagnostic(self):
        diagnostics: list[ParseDiagnostic] = []
        attrs = _attrs(("custom", "diamond_weight_1", '{"value": 1.5, '))
        assert resolve_numeric(attrs, "diamond_weight_1", diagnostics) == 0.0
        assert [d.key for d in diagnostics] == ["diamond_weight_1"]

    def test_json_without_value_field(self):
        diagnostics: list[ParseDiagnostic] = []
        attrs = _attrs(("custom", "weight", '{"amount": 2}'))
        assert resolve_numeric(attrs, "weight", diagnostics) == 0.0
        assert len(diagnostics) == 1

    def test_json_with_non_numeric_value(self):
        diagnostics: list[ParseDiagnostic] = []
        attrs = _attrs(("custom", "weight", '{"value": "n/a", "unit": "GRAMS"}'))
        assert resolve_numeric(attrs, "weight", diagnostics) == 0.0
        assert diagnostics[0].reason == "structured value is not numeric"

    def test_nan_resolves_to_zero(self):
        assert resolve_numeric(_attrs(("custom", "weight", "NaN")), "weight") == 0.0


def test_parse_float():
    assert parse_float("12") == 12.0
    assert parse_float("-0.5kg") == -0.5
    assert parse_float(".75") == 0.75
    assert parse_float("abc") is None
    assert parse_float("") is None


def test_deeply_nested_json_is_zero_with_diagnostic():
    diagnostics: list[ParseDiagnostic] = []
    attrs = _attrs(("custom", "weight", "[" * 100000))
    assert resolve_numeric(attrs, "weight", diagnostics) == 0.0
    assert [d.reason for d in diagnostics] == ["malformed structured value"]


def test_namespace_is_configurable():
    attrs = _attrs(("custom", "weight", "5"), ("specs", "weight", "7"))
    assert resolve_numeric(attrs, "weight", namespace="specs") == 7.0
