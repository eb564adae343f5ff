"""Tests for variant classification."""

from repricer.services.catalog import Variant
from repricer.services.classifier import (
    StructuredClassifier,
    TitleClassifier,
    classify,
    extract_discount_token,
)
from repricer.services.pricing import DEFAULT_ALLOWED_FINISH_TAGS, DEFAULT_PURITY_MULTIPLIERS


def _variant(title: str, **tags: str) -> Variant:
    return Variant(id="gid://shopify/ProductVariant/1", title=title, **tags)


class TestTitleClassifier:
    """Tests for free-text classification."""

    def test_qualifies_with_finish_and_purity(self):
        variant = _variant("18k Yellow Gold")
        assert TitleClassifier().classify(variant, {"yellow gold"}, {"18k": 0.76}) == "18k"

    def test_no_finish_match(self):
        assert TitleClassifier().classify(_variant("Platinum"), {"yellow gold"}, {"18k": 0.76}) is None

    def test_finish_without_purity(self):
        assert TitleClassifier().classify(_variant("Rose Gold"), {"rose gold"}, {"18k": 0.76}) is None

    def test_purity_without_finish(self):
        assert TitleClassifier().classify(_variant("18k Platinum"), {"rose gold"}, {"18k": 0.76}) is None

    def test_case_insensitive(self):
        variant = _variant("ROSE GOLD / 14K")
        assert TitleClassifier().classify(variant, DEFAULT_ALLOWED_FINISH_TAGS, DEFAULT_PURITY_MULTIPLIERS) == "14k"

    def test_first_purity_in_table_order_wins(self):
        # Title mentions 18k before 22k, but 22k comes first in the table.
        variant = _variant("White 18k (was 22k)")
        purity = {"24k": 1, "22k": 0.925, "18k": 0.76}
        assert TitleClassifier().classify(variant, {"white"}, purity) == "22k"

        reordered = {"18k": 0.76, "22k": 0.925}
        assert TitleClassifier().classify(variant, {"white"}, reordered) == "18k"

    def test_substring_overlap_follows_table_order(self):
        # Containment, not word match: "4k" occurs inside "14k".
        variant = _variant("14k White")
        assert TitleClassifier().classify(variant, {"white"}, {"4k": 0.1, "14k": 0.6}) == "4k"


class TestDiscountToken:
    """Tests for discount token extraction."""

    def test_plain(self):
        assert extract_discount_token("18k Yellow Gold / 10%") == "10%"

    def test_whitespace_is_stripped(self):
        assert extract_discount_token("18k Rose Gold 12 % off") == "12%"

    def test_first_token_wins(self):
        assert extract_discount_token("15% then 10%") == "15%"

    def test_no_token(self):
        assert extract_discount_token("18k Yellow Gold") is None
        assert extract_discount_token("ten % off") is None


class TestStructuredClassifier:
    """Tests for structured tags with title fallback."""

    def test_structured_tags_override_title(self):
        variant = _variant("Classic band", purity_tag="22K", finish_tag="Yellow Gold")
        assert StructuredClassifier().classify(variant, {"yellow gold"}, {"18k": 0.76, "22k": 0.925}) == "22k"

    def test_structured_finish_must_be_allowed(self):
        variant = _variant("18k Yellow Gold", finish_tag="platinum")
        assert StructuredClassifier().classify(variant, {"yellow gold"}, {"18k": 0.76}) is None

    def test_unknown_structured_purity(self):
        variant = _variant("18k Yellow Gold", purity_tag="10k")
        assert StructuredClassifier().classify(variant, {"yellow gold"}, {"18k": 0.76}) is None

    def test_falls_back_to_title_per_tag(self):
        variant = _variant("18k Rose Gold", finish_tag="rose gold")
        assert StructuredClassifier().classify(variant, {"rose gold"}, {"18k": 0.76}) == "18k"

    def test_discount_tag(self):
        assert StructuredClassifier().discount_tag(_variant("18k White 10%", discount_tag="15 %")) == "15%"
        assert StructuredClassifier().discount_tag(_variant("18k White 10%")) == "10%"


def test_module_classify_uses_default_classifier():
    assert classify(_variant("18k Yellow Gold"), {"yellow gold"}, {"18k": 0.76}) == "18k"
    assert classify(_variant("Platinum"), {"yellow gold"}, {"18k": 0.76}) is None
